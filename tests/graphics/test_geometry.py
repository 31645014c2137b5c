import struct

import numpy as np
import pytest

from imposter.graphics.geometry import (
    QUAD_INDICES,
    compute_tangents,
    generate_quad,
)
from imposter.types import Vector3


def test_quad_layout():
    quad = generate_quad(1.0, Vector3.zero())

    assert quad.vertex_count == 5
    assert len(quad.indices) == 12
    assert quad.triangle_count == 4
    assert quad.uvs[0] == (0.5, 0.5)
    assert quad.uvs[1:] == ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))


def test_quad_winding_fans_from_center():
    quad = generate_quad(1.0, Vector3.zero())
    triangles = [quad.indices[i : i + 3] for i in range(0, 12, 3)]

    assert triangles == [(2, 1, 0), (3, 2, 0), (4, 3, 0), (1, 4, 0)]
    for i, (a, b, center) in enumerate(triangles):
        assert center == 0
        assert b == 1 + i
        assert a == 1 + (i + 1) % 4


def test_positions_are_degenerate_and_normals_up():
    quad = generate_quad(3.0, Vector3(1.0, 2.0, 3.0))

    assert all(p == (0.0, 0.0, 0.0) for p in quad.positions)
    assert all(n == (0.0, 1.0, 0.0) for n in quad.normals)


def test_tangents_are_non_degenerate():
    quad = generate_quad(1.0, Vector3.zero())

    for tangent in quad.tangents:
        xyz = np.array(tangent[:3])
        assert np.all(np.isfinite(tangent))
        assert np.linalg.norm(xyz) == pytest.approx(1.0)
        assert np.dot(xyz, (0.0, 1.0, 0.0)) == pytest.approx(0.0)
        assert tangent[3] in (-1.0, 1.0)
    assert quad.tangents[0] == (1.0, 0.0, 0.0, 1.0)


@pytest.mark.parametrize("radius", [0.5, 1.0, 10.0])
def test_bounds(radius):
    offset = Vector3(0.25, -1.0, 4.0)
    quad = generate_quad(radius, offset)

    assert quad.bounds.center == offset
    assert tuple(quad.bounds.extents) == (radius, radius, radius)
    assert tuple(quad.bounds.size) == (2 * radius, 2 * radius, 2 * radius)


@pytest.mark.parametrize(
    "radius, offset",
    [(0.5, Vector3.zero()), (2.0, Vector3(0.0, 1.0, 0.0)), (7.3, Vector3(-1.5, 2.25, 9.0))],
)
def test_generation_is_deterministic(radius, offset):
    first = generate_quad(radius, offset)
    second = generate_quad(radius, offset)

    assert first == second
    assert first.to_mesh_data() == second.to_mesh_data()


def test_quad_name_uses_one_decimal():
    assert generate_quad(1.5, Vector3.zero()).name == "ImposterQuad_1.5"
    assert generate_quad(2.0, Vector3.zero()).name == "ImposterQuad_2.0"


def test_mesh_data_packing():
    quad = generate_quad(2.0, Vector3(0.0, 1.0, 0.0))
    mesh = quad.to_mesh_data()

    assert mesh.vertex_layout.stride_bytes == 48
    assert len(mesh.vertices) == 5 * 48
    assert mesh.index_count == 12
    assert struct.unpack("<12H", mesh.indices) == QUAD_INDICES
    assert mesh.aabb == ((-2.0, -1.0, -2.0), (2.0, 3.0, 2.0))

    # uv of the center vertex sits in the last two floats of the first vertex
    assert struct.unpack_from("<2f", mesh.vertices, 40) == (0.5, 0.5)


def test_compute_tangents_regular_triangle():
    positions = np.array([[0, 0, 0], [1, 0, 0], [0, 0, 1]], dtype=np.float64)
    uvs = np.array([[0, 0], [1, 0], [0, 1]], dtype=np.float64)
    normals = np.tile([0.0, 1.0, 0.0], (3, 1))

    tangents = compute_tangents(positions, uvs, normals, np.array([[0, 1, 2]]))

    assert np.allclose(tangents[:, :3], [[1, 0, 0]] * 3)
    # bitangent (0, 0, 1) vs cross(n, t) = (0, 0, -1)
    assert np.all(tangents[:, 3] == -1.0)
