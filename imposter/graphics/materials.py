# imposter/graphics/materials.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from imposter.assets.types import Texture
from imposter.errors import InvalidStateError, MissingCapabilityError
from imposter.settings import MaterialParams
from imposter.types import Vector3


@dataclass(frozen=True)
class ShaderProgram:
    """Opaque handle to a GPU program resolved by the host."""

    name: str
    path: Optional[str] = None  # For debugging / error reporting.


class ShaderLookup(ABC):
    @abstractmethod
    def find_shader_program(self, name: str) -> ShaderProgram:
        """
        Raises:
            MissingCapabilityError: if the host has no program by that name.
        """
        pass


class ShaderLibrary(ShaderLookup):
    def __init__(self) -> None:
        self._shaders: Dict[str, ShaderProgram] = {}

    def register(self, shader: ShaderProgram) -> None:
        self._shaders[shader.name] = shader

    def find_shader_program(self, name: str) -> ShaderProgram:
        try:
            return self._shaders[name]
        except KeyError:
            raise MissingCapabilityError(f"Shader '{name}' not found")

    def __contains__(self, name: str) -> bool:
        return name in self._shaders


@dataclass(frozen=True)
class MaterialBinding:
    """
    Named shader-parameter set for one imposter.

    Always rebuilt as a whole and swapped in; never edited in place.
    """

    name: str
    shader: ShaderProgram
    textures: Mapping[str, Texture]
    floats: Mapping[str, float]
    vectors: Mapping[str, Vector3]

    def get_texture(self, name: str) -> Texture:
        return self.textures[name]

    def get_float(self, name: str) -> float:
        return self.floats[name]

    def get_vector(self, name: str) -> Vector3:
        return self.vectors[name]

    def to_document(self) -> Dict[str, Any]:
        """Serializable form; textures are referenced by durable path."""
        return {
            "name": self.name,
            "shader": self.shader.name,
            "textures": {
                key: tex.path if tex.path is not None else tex.name
                for key, tex in self.textures.items()
            },
            "floats": dict(self.floats),
            "vectors": {key: list(vec) for key, vec in self.vectors.items()},
        }


def build_material_binding(
    name: str,
    shader: ShaderProgram,
    *,
    base: Optional[Texture],
    pack: Optional[Texture],
    frames: int,
    radius: float,
    offset: Vector3,
    is_half: bool,
) -> MaterialBinding:
    """Derive the imposter shader parameters from capture settings + atlases."""
    if base is None or pack is None:
        raise InvalidStateError(
            f"Material '{name}' needs both atlases before it can be built"
        )

    return MaterialBinding(
        name=name,
        shader=shader,
        textures=MappingProxyType(
            {
                MaterialParams.BASE_TEX: base,
                MaterialParams.PACK_TEX: pack,
            }
        ),
        floats=MappingProxyType(
            {
                MaterialParams.FRAMES: float(frames),
                MaterialParams.SIZE: float(radius),
                MaterialParams.FULL_SPHERE: 0.0 if is_half else 1.0,
            }
        ),
        vectors=MappingProxyType({MaterialParams.OFFSET: offset}),
    )
