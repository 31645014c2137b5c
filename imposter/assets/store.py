# imposter/assets/store.py
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from imposter.assets.handle import AssetHandle, AssetId, asset_id_for
from imposter.assets.registry import AssetRegistry, IndexEntry
from imposter.errors import HostOperationFailedError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

INDEX_FILE = ".imposter_index.json"


def folder_of(asset_path: str) -> str:
    """Directory part of a storage path, without the trailing slash."""
    last_slash = asset_path.rfind("/")
    if last_slash < 0:
        return ""
    return asset_path[:last_slash]


def join_path(folder: str, name: str) -> str:
    return f"{folder}/{name}" if folder else name


class DurableStore(ABC):
    """
    Key-value durable storage with create/replace-by-identity semantics.

    Paths are '/'-separated strings relative to the store root. The core only
    ever holds these strings and the handles returned here.
    """

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> AssetHandle:
        pass

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def create_or_replace(
        self, path: str, document: Document, *, kind: str
    ) -> AssetHandle:
        """Write a document. Replacing keeps the existing identity."""
        pass

    @abstractmethod
    def load_document(self, path: str) -> Document:
        pass

    @abstractmethod
    def add_sub_object(
        self, asset_path: str, name: str, document: Document, *, kind: str
    ) -> AssetHandle:
        """Attach a named document to the asset stored at asset_path."""
        pass

    @abstractmethod
    def identity(self, path: str) -> Optional[IndexEntry]:
        pass

    @abstractmethod
    def refresh(self) -> None:
        """Pick up files written outside the document API."""
        pass

    @abstractmethod
    def save_index(self) -> None:
        pass


class FileSystemStore(DurableStore):
    """DurableStore rooted at a directory on the local filesystem."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.registry = AssetRegistry()
        self._load_index()

    def resolve(self, path: str) -> Path:
        return self.root / path

    def write_bytes(self, path: str, data: bytes) -> AssetHandle:
        full_path = self.resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except OSError as e:
            raise HostOperationFailedError(f"Failed to write {path}: {e}") from e

        logger.debug("Wrote %d bytes to %s", len(data), full_path)
        return self._touch(path, kind=_kind_for(path))

    def read_bytes(self, path: str) -> bytes:
        try:
            return self.resolve(path).read_bytes()
        except OSError as e:
            raise HostOperationFailedError(f"Failed to read {path}: {e}") from e

    def exists(self, path: str) -> bool:
        return self.resolve(path).is_file()

    def create_or_replace(
        self, path: str, document: Document, *, kind: str
    ) -> AssetHandle:
        existing = self.identity(path)
        payload = json.dumps(document, indent=2, sort_keys=True)
        full_path = self.resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise HostOperationFailedError(f"Failed to write {path}: {e}") from e

        if existing is not None:
            logger.info("Replaced %s '%s' (id %d)", kind, path, existing.id)
        else:
            logger.info("Created %s '%s'", kind, path)
        return self._touch(path, kind=kind)

    def load_document(self, path: str) -> Document:
        try:
            text = self.resolve(path).read_text(encoding="utf-8")
        except OSError as e:
            raise HostOperationFailedError(f"Failed to read {path}: {e}") from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise HostOperationFailedError(f"Corrupt document {path}: {e}") from e

    def add_sub_object(
        self, asset_path: str, name: str, document: Document, *, kind: str
    ) -> AssetHandle:
        if self.exists(asset_path):
            container = self.load_document(asset_path)
        else:
            container = {}

        sub_objects = container.setdefault("sub_objects", {})
        sub_objects[name] = {"kind": kind, **document}

        entry = self.identity(asset_path)
        container_kind = entry.kind if entry is not None else "asset"
        self.create_or_replace(asset_path, container, kind=container_kind)

        sub_path = f"{asset_path}#{name}"
        return self._touch(sub_path, kind=kind)

    def identity(self, path: str) -> Optional[IndexEntry]:
        return self.registry.get(asset_id_for(path))

    def refresh(self) -> None:
        if not self.root.exists():
            return

        for full_path in sorted(self.root.rglob("*")):
            if not full_path.is_file() or full_path.name == INDEX_FILE:
                continue
            path = full_path.relative_to(self.root).as_posix()
            if self.identity(path) is None:
                self.registry.store(
                    IndexEntry(asset_id_for(path), path, _kind_for(path))
                )

    def save_index(self) -> None:
        entries = {
            entry.path: {
                "id": entry.id,
                "kind": entry.kind,
                "revision": entry.revision,
            }
            for entry in sorted(self.registry, key=lambda e: e.path)
        }
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / INDEX_FILE).write_text(
                json.dumps(entries, indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise HostOperationFailedError(f"Failed to save index: {e}") from e

        logger.debug("Saved index with %d entries", len(entries))

    def _touch(self, path: str, *, kind: str) -> AssetHandle:
        asset_id = asset_id_for(path)
        entry = self.registry.get(asset_id)
        if entry is None:
            entry = IndexEntry(asset_id, path, kind)
        else:
            entry.revision += 1
            entry.kind = kind
        self.registry.store(entry)
        return AssetHandle(asset_id, path)

    def _load_index(self) -> None:
        index_path = self.root / INDEX_FILE
        if not index_path.is_file():
            return

        try:
            entries = json.loads(index_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise HostOperationFailedError(f"Failed to load index: {e}") from e

        for path, meta in entries.items():
            self.registry.store(
                IndexEntry(
                    AssetId(meta["id"]), path, meta["kind"], meta["revision"]
                )
            )


def _kind_for(path: str) -> str:
    if path.endswith(".png"):
        return "texture"
    if path.endswith(".import.json"):
        return "import_settings"
    if path.endswith(".json"):
        return "blob"
    return "file"
