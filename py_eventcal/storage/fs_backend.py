"""Filesystem-based store implementation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..internal import NotFoundError, PersistenceError
from .backend import Record, new_key, split_path

logger = logging.getLogger(__name__)


class LocalStore:
    """Filesystem-based store.

    Collections are stored as directories below ``root_dir``; each record is
    a ``<key>.json`` file within its collection directory.
    """

    def __init__(self, root_dir: Path) -> None:
        """Initialize store.

        Args:
            root_dir: Root directory for all data
        """
        self.root_dir: Path = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _collection_dir(self, collection: str) -> Path:
        """Get filesystem directory for a collection."""
        if not collection or "/" in collection or collection.startswith("."):
            raise ValueError(f"invalid collection name: {collection!r}")
        return self.root_dir / collection

    def _record_file(self, collection: str, key: str) -> Path:
        """Get filesystem path for a record."""
        if not key or "/" in key or key.startswith("."):
            raise ValueError(f"invalid record key: {key!r}")
        return self._collection_dir(collection) / f"{key}.json"

    def _read(self, file_path: Path) -> Record:
        try:
            with open(file_path, encoding="utf-8") as f:
                data: Record = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(e) from e
        return data

    def _write(self, file_path: Path, record: Record) -> None:
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = file_path.with_suffix(".json.tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, ensure_ascii=False)
            tmp_path.replace(file_path)
        except OSError as e:
            raise PersistenceError(e) from e

    async def allocate_key(self, collection: str) -> str:
        return new_key()

    async def create(self, collection: str, record: Record) -> str:
        key = new_key()
        self._write(self._record_file(collection, key), record)
        return key

    async def set(self, collection: str, key: str, record: Record) -> None:
        self._write(self._record_file(collection, key), record)

    async def get(self, collection: str, key: str) -> Record | None:
        file_path = self._record_file(collection, key)
        if not file_path.is_file():
            return None
        return self._read(file_path)

    async def list(self, collection: str) -> dict[str, Record]:
        collection_dir = self._collection_dir(collection)
        records: dict[str, Record] = {}

        if not collection_dir.exists():
            return records

        for file_path in sorted(collection_dir.glob("*.json")):
            try:
                records[file_path.stem] = self._read(file_path)
            except PersistenceError as e:
                # Skip unreadable records
                logger.warning("Skipping unreadable record %s: %s", file_path, e)
                continue

        return records

    async def query_by_field(self, collection: str, field: str, value: Any) -> dict[str, Record]:
        records = await self.list(collection)
        return {key: record for key, record in records.items() if record.get(field) == value}

    async def update(self, collection: str, key: str, partial: Record) -> None:
        file_path = self._record_file(collection, key)
        if not file_path.is_file():
            raise NotFoundError(f"Record not found: {collection}/{key}")
        record = self._read(file_path)
        record.update(partial)
        self._write(file_path, record)

    async def batch_update(self, updates: dict[str, Record | None]) -> None:
        targets = [(split_path(path), partial) for path, partial in updates.items()]
        for (collection, key), partial in targets:
            file_path = self._record_file(collection, key)
            if partial is None:
                file_path.unlink(missing_ok=True)
                continue
            if not file_path.is_file():
                # Merges never recreate a record deleted in the meantime
                continue
            record = self._read(file_path)
            record.update(partial)
            self._write(file_path, record)

    async def remove(self, collection: str, key: str) -> None:
        file_path = self._record_file(collection, key)
        if not file_path.exists():
            raise NotFoundError(f"Record not found: {collection}/{key}")
        file_path.unlink()

