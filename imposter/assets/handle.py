# imposter/assets/handle.py
import hashlib
from dataclasses import dataclass
from typing import Generic, NewType, TypeVar

AssetId = NewType("AssetId", int)  # 64-bit integer GUID
T = TypeVar("T")  # Type of data (TextureData, ImposterQuad, Template)


def asset_id_for(path: str) -> AssetId:
    """Stable identity derived from a storage path."""
    return AssetId(int(hashlib.sha256(path.encode()).hexdigest(), 16) % (10**16))


@dataclass(frozen=True)
class AssetHandle(Generic[T]):
    """
    Lightweight reference to a durable asset.
    Holding this does not guarantee that the asset still exists on storage.
    """

    id: AssetId
    path: str
