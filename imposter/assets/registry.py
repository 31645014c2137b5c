# imposter/assets/registry.py
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from imposter.assets.handle import AssetId


@dataclass(slots=True)
class IndexEntry:
    """Bookkeeping for one durable asset."""

    id: AssetId
    path: str
    kind: str
    revision: int = 1


class AssetRegistry:
    """
    Stores index entries mapped by AssetId.
    """

    def __init__(self) -> None:
        self._storage: Dict[AssetId, IndexEntry] = {}

    def store(self, entry: IndexEntry) -> None:
        """Register or replace an entry."""
        self._storage[entry.id] = entry

    def get(self, asset_id: AssetId) -> Optional[IndexEntry]:
        """Retrieve an entry if available."""
        return self._storage.get(asset_id)

    def __contains__(self, asset_id: AssetId) -> bool:
        return asset_id in self._storage

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._storage.values())

    def __len__(self) -> int:
        return len(self._storage)

    def clear(self) -> None:
        """Clear all entries (use with caution)."""
        self._storage.clear()
