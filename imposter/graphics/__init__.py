# imposter/graphics/__init__.py
from imposter.graphics.geometry import ImposterQuad, generate_quad
from imposter.graphics.materials import (
    MaterialBinding,
    ShaderLibrary,
    ShaderLookup,
    ShaderProgram,
)

__all__ = [
    "ImposterQuad",
    "generate_quad",
    "MaterialBinding",
    "ShaderLibrary",
    "ShaderLookup",
    "ShaderProgram",
]
