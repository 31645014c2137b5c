# imposter/assets/types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from imposter.settings import ImportSettings


@dataclass(frozen=True)
class VertexLayout:
    """Describes vertex attributes for VAO creation."""

    attributes: List[str]  # e.g. ["in_pos", "in_normal", "in_uv"]
    format: str  # buffer format string e.g. "3f 3f 2f"
    stride_bytes: int  # e.g. 32


@dataclass(frozen=True)
class MeshData:
    """Raw mesh data, ready for GPU upload."""

    vertices: bytes
    vertex_layout: VertexLayout
    aabb: Tuple[Tuple[float, float, float], Tuple[float, float, float]]
    indices: Optional[bytes] = None
    index_count: int = 0
    index_element_size: int = 2  # bytes (2 or 4)


@dataclass(frozen=True)
class TextureData:
    """Raw 8-bit RGB or RGBA pixels, row-major, top row first."""

    data: bytes
    width: int
    height: int
    components: int  # 3 (RGB) or 4 (RGBA)

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> TextureData:
        if pixels.ndim != 3:
            raise ValueError(f"Expected (h, w, c) pixel array, got {pixels.shape}")
        height, width, components = pixels.shape
        return cls(
            data=np.ascontiguousarray(pixels, dtype=np.uint8).tobytes(),
            width=width,
            height=height,
            components=components,
        )

    @classmethod
    def blank(cls, width: int, height: int, components: int = 4) -> TextureData:
        return cls(
            data=bytes(width * height * components),
            width=width,
            height=height,
            components=components,
        )

    def as_array(self) -> np.ndarray:
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, self.components
        )


@dataclass
class Texture:
    """
    Host-side atlas object.

    `path` and `import_settings` are only set once the texture has been
    written to durable storage and run through the import capability.
    """

    name: str
    data: TextureData
    path: Optional[str] = None
    import_settings: Optional[ImportSettings] = None
    aniso_level: int = 1
    # GPU-side block compression marker, applied after load
    compressed: bool = False

    @property
    def width(self) -> int:
        return self.data.width

    @property
    def height(self) -> int:
        return self.data.height
