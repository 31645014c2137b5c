# imposter/graphics/geometry.py
from __future__ import annotations

import array
import struct
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from imposter.assets.types import MeshData, VertexLayout
from imposter.types import Bounds, Vector3

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]
Vec4 = Tuple[float, float, float, float]

QUAD_VERTEX_COUNT = 5

# center first, then the unit-square corners in fixed order
QUAD_UVS: Tuple[Vec2, ...] = (
    (0.5, 0.5),
    (0.0, 0.0),
    (1.0, 0.0),
    (1.0, 1.0),
    (0.0, 1.0),
)

# fan around vertex 0: (corner i+1, corner i, center) for each corner i
QUAD_INDICES: Tuple[int, ...] = (
    2, 1, 0,
    3, 2, 0,
    4, 3, 0,
    1, 4, 0,
)

UP: Vec3 = (0.0, 1.0, 0.0)

_DEGENERATE_EPSILON = 1e-12
_VERTEX_FORMAT = "<3f 3f 4f 2f"


@dataclass(frozen=True, slots=True)
class ImposterQuad:
    """
    Logical five-vertex quad used by the imposter shader.

    Positions are all zero: the billboard is expanded in the shader from the
    UVs and the size/offset parameters, so only `bounds` describes the
    visible extent.
    """

    name: str
    positions: Tuple[Vec3, ...]
    uvs: Tuple[Vec2, ...]
    normals: Tuple[Vec3, ...]
    tangents: Tuple[Vec4, ...]
    indices: Tuple[int, ...]
    bounds: Bounds

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def to_mesh_data(self) -> MeshData:
        """Interleave into an upload-ready vertex buffer with uint16 indices."""
        vertices = b"".join(
            struct.pack(_VERTEX_FORMAT, *p, *n, *t, *uv)
            for p, n, t, uv in zip(
                self.positions, self.normals, self.tangents, self.uvs
            )
        )
        layout = VertexLayout(
            attributes=["in_pos", "in_normal", "in_tangent", "in_uv"],
            format="3f 3f 4f 2f",
            stride_bytes=struct.calcsize(_VERTEX_FORMAT),
        )
        return MeshData(
            vertices=vertices,
            vertex_layout=layout,
            aabb=(tuple(self.bounds.min), tuple(self.bounds.max)),
            indices=array.array("H", self.indices).tobytes(),
            index_count=len(self.indices),
            index_element_size=2,
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "positions": [list(p) for p in self.positions],
            "uvs": [list(uv) for uv in self.uvs],
            "normals": [list(n) for n in self.normals],
            "tangents": [list(t) for t in self.tangents],
            "indices": list(self.indices),
            "bounds": {
                "center": list(self.bounds.center),
                "size": list(self.bounds.size),
            },
        }


def quad_name(radius: float) -> str:
    return f"ImposterQuad_{radius:.1f}"


def generate_quad(radius: float, offset: Vector3) -> ImposterQuad:
    """
    Build the imposter quad for a given radius and local offset.

    Pure function of (radius, offset): atlas resolution, frame count and
    hemisphere mode have no effect on geometry.
    """
    positions = np.zeros((QUAD_VERTEX_COUNT, 3), dtype=np.float64)
    uvs = np.array(QUAD_UVS, dtype=np.float64)
    normals = np.tile(np.array(UP, dtype=np.float64), (QUAD_VERTEX_COUNT, 1))
    indices = np.array(QUAD_INDICES, dtype=np.int64).reshape(-1, 3)

    tangents = compute_tangents(positions, uvs, normals, indices)

    size = radius * 2.0
    bounds = Bounds(
        center=Vector3(float(offset.x), float(offset.y), float(offset.z)),
        size=Vector3(size, size, size),
    )

    return ImposterQuad(
        name=quad_name(radius),
        positions=_rows(positions),
        uvs=_rows(uvs),
        normals=_rows(normals),
        tangents=_rows(tangents),
        indices=QUAD_INDICES,
        bounds=bounds,
    )


def compute_tangents(
    positions: np.ndarray,
    uvs: np.ndarray,
    normals: np.ndarray,
    triangles: np.ndarray,
) -> np.ndarray:
    """
    Per-triangle tangent accumulation followed by Gram-Schmidt.

    Returns an (n, 4) array, w holding the bitangent handedness. Vertices
    whose accumulated tangent vanishes (coincident positions, as in the
    imposter quad) get the axis most orthogonal to their normal instead.
    """
    count = len(positions)
    tan1 = np.zeros((count, 3), dtype=np.float64)
    tan2 = np.zeros((count, 3), dtype=np.float64)

    for i1, i2, i3 in triangles:
        v1, v2, v3 = positions[i1], positions[i2], positions[i3]
        w1, w2, w3 = uvs[i1], uvs[i2], uvs[i3]

        e1 = v2 - v1
        e2 = v3 - v1
        s1, t1 = w2 - w1
        s2, t2 = w3 - w1

        det = s1 * t2 - s2 * t1
        if abs(det) < _DEGENERATE_EPSILON:
            continue  # no UV area
        r = 1.0 / det

        sdir = (t2 * e1 - t1 * e2) * r
        tdir = (s1 * e2 - s2 * e1) * r

        for idx in (i1, i2, i3):
            tan1[idx] += sdir
            tan2[idx] += tdir

    tangents = np.zeros((count, 4), dtype=np.float64)
    for i in range(count):
        n = normals[i]
        t = tan1[i] - n * np.dot(n, tan1[i])
        length = np.linalg.norm(t)

        if length < _DEGENERATE_EPSILON:
            t = _orthogonal_axis(n)
        else:
            t = t / length

        handedness = -1.0 if np.dot(np.cross(n, t), tan2[i]) < 0.0 else 1.0
        tangents[i, :3] = t
        tangents[i, 3] = handedness

    return tangents


def _orthogonal_axis(normal: np.ndarray) -> np.ndarray:
    axis = np.zeros(3, dtype=np.float64)
    axis[int(np.argmin(np.abs(normal)))] = 1.0

    t = axis - normal * np.dot(normal, axis)
    return t / np.linalg.norm(t)


def _rows(values: np.ndarray) -> tuple:
    return tuple(tuple(float(x) for x in row) for row in values)
