# imposter/assets/__init__.py
from imposter.assets.codec import ImageCodec, PngCodec
from imposter.assets.handle import AssetHandle, AssetId
from imposter.assets.store import DurableStore, FileSystemStore
from imposter.assets.types import (
    MeshData,
    Texture,
    TextureData,
    VertexLayout,
)

__all__ = [
    "AssetHandle",
    "AssetId",
    "DurableStore",
    "FileSystemStore",
    "ImageCodec",
    "PngCodec",
    "MeshData",
    "Texture",
    "TextureData",
    "VertexLayout",
]
