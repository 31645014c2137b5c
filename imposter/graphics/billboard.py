# imposter/graphics/billboard.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from imposter.assets.types import Texture
from imposter.graphics.geometry import QUAD_INDICES, QUAD_UVS
from imposter.graphics.materials import (
    MaterialBinding,
    ShaderLookup,
    build_material_binding,
)
from imposter.settings import ShaderNames
from imposter.types import Vector3


@dataclass(frozen=True)
class BillboardAsset:
    """
    Legacy billboard-renderer representation of an imposter.

    Billboard vertices must lie in [0, 1] and are 2D only, so the shader
    swaps Y/Z and remaps (v * 2 - 1) * 0.5 to recover the quad. Its output
    is not authoritative.
    """

    name: str
    material: MaterialBinding
    vertices: Tuple[Tuple[float, float], ...]
    indices: Tuple[int, ...]
    image_texcoords: Tuple[Tuple[float, float, float, float], ...]
    width: float
    height: float
    bottom: float

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "material": self.material.name,
            "vertices": [list(v) for v in self.vertices],
            "indices": list(self.indices),
            "image_texcoords": [list(t) for t in self.image_texcoords],
            "width": self.width,
            "height": self.height,
            "bottom": self.bottom,
        }


def build_billboard(
    asset_name: str,
    shaders: ShaderLookup,
    *,
    base: Texture,
    pack: Texture,
    frames: int,
    radius: float,
    offset: Vector3,
    is_half: bool,
) -> BillboardAsset:
    shader = shaders.find_shader_program(ShaderNames.BILLBOARD)
    material = build_material_binding(
        f"{asset_name}_BR",
        shader,
        base=base,
        pack=pack,
        frames=frames,
        radius=radius,
        offset=offset,
        is_half=is_half,
    )

    return BillboardAsset(
        name="BillboardAsset",
        material=material,
        vertices=QUAD_UVS,
        indices=QUAD_INDICES,
        image_texcoords=tuple((u, v, 0.0, 0.0) for u, v in QUAD_UVS),
        width=radius,
        height=radius,
        bottom=radius * 0.5,
    )
