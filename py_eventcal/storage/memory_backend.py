"""In-memory store, used for tests and embedding."""

from __future__ import annotations

import copy
from typing import Any

from ..internal import NotFoundError
from .backend import Record, new_key, split_path


class InMemoryStore:
    """Dictionary-backed store.

    Records are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self, data: dict[str, dict[str, Record]] | None = None) -> None:
        self._data: dict[str, dict[str, Record]] = copy.deepcopy(data) if data else {}

    def _collection(self, collection: str) -> dict[str, Record]:
        return self._data.setdefault(collection, {})

    async def allocate_key(self, collection: str) -> str:
        return new_key()

    async def create(self, collection: str, record: Record) -> str:
        key = new_key()
        self._collection(collection)[key] = copy.deepcopy(record)
        return key

    async def set(self, collection: str, key: str, record: Record) -> None:
        """Store a record under an explicit key, replacing any existing one."""
        self._collection(collection)[key] = copy.deepcopy(record)

    async def get(self, collection: str, key: str) -> Record | None:
        record = self._collection(collection).get(key)
        return copy.deepcopy(record) if record is not None else None

    async def list(self, collection: str) -> dict[str, Record]:
        return copy.deepcopy(self._collection(collection))

    async def query_by_field(self, collection: str, field: str, value: Any) -> dict[str, Record]:
        return {
            key: copy.deepcopy(record)
            for key, record in self._collection(collection).items()
            if record.get(field) == value
        }

    async def update(self, collection: str, key: str, partial: Record) -> None:
        records = self._collection(collection)
        if key not in records:
            raise NotFoundError(f"Record not found: {collection}/{key}")
        records[key].update(copy.deepcopy(partial))

    async def batch_update(self, updates: dict[str, Record | None]) -> None:
        # Validate every path first so a bad path leaves the store untouched
        targets = [(split_path(path), partial) for path, partial in updates.items()]
        for (collection, key), partial in targets:
            records = self._collection(collection)
            if partial is None:
                records.pop(key, None)
            elif key in records:
                # Merges never recreate a record deleted in the meantime
                records[key].update(copy.deepcopy(partial))

    async def remove(self, collection: str, key: str) -> None:
        records = self._collection(collection)
        if key not in records:
            raise NotFoundError(f"Record not found: {collection}/{key}")
        del records[key]
