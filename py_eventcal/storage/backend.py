"""Generic persistence backend interface."""

from __future__ import annotations

import secrets
import time
from typing import Any, Protocol

Record = dict[str, Any]


class Store(Protocol):
    """Key/value persistence organised in collections.

    Records are JSON-compatible dictionaries. Keys are opaque strings assigned
    by the store. Implementations raise PersistenceError on I/O failures.
    """

    async def allocate_key(self, collection: str) -> str:
        """Reserve a fresh unique key without writing anything.

        Args:
            collection: Collection name (e.g., "events")

        Returns:
            New key
        """
        ...

    async def create(self, collection: str, record: Record) -> str:
        """Store a new record under a fresh key.

        Args:
            collection: Collection name
            record: Record to store

        Returns:
            Key of the new record
        """
        ...

    async def set(self, collection: str, key: str, record: Record) -> None:
        """Store a record under an explicit key, replacing any existing one."""
        ...

    async def get(self, collection: str, key: str) -> Record | None:
        """Get a record by key.

        Returns:
            The record, or None if absent
        """
        ...

    async def list(self, collection: str) -> dict[str, Record]:
        """List all records of a collection as a key -> record mapping."""
        ...

    async def query_by_field(self, collection: str, field: str, value: Any) -> dict[str, Record]:
        """Find records whose ``field`` equals ``value``.

        Returns:
            Key -> record mapping; order is not guaranteed
        """
        ...

    async def update(self, collection: str, key: str, partial: Record) -> None:
        """Merge ``partial`` into an existing record.

        Raises:
            NotFoundError: If the record does not exist
        """
        ...

    async def batch_update(self, updates: dict[str, Record | None]) -> None:
        """Apply several merges/deletes in one write.

        Args:
            updates: Mapping of "collection/key" paths to partial records;
                a None value deletes the record at that path

        A merge into a record that no longer exists is skipped. The Realtime
        Database store cannot check this inside one PATCH, so there a merge
        racing a delete can leave a partial record (last writer wins).
        """
        ...

    async def remove(self, collection: str, key: str) -> None:
        """Delete a record.

        Raises:
            NotFoundError: If the record does not exist
        """
        ...


def split_path(path: str) -> tuple[str, str]:
    """Split a "collection/key" path.

    Raises:
        ValueError: If the path does not name a single record
    """
    parts = [p for p in path.split("/") if p]
    if len(parts) != 2:
        raise ValueError(f"invalid record path: {path!r}")
    return parts[0], parts[1]


def record_path(collection: str, key: str) -> str:
    """Build a "collection/key" path."""
    return f"{collection}/{key}"


PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


class PushKeyGenerator:
    """Time-ordered 20-character keys in the Realtime Database push-id format.

    8 characters encode the millisecond timestamp, 12 are random. Keys made
    within the same millisecond increment the random part so they still sort
    in creation order.
    """

    def __init__(self) -> None:
        self._last_ms = -1
        self._last_random: list[int] = []

    def __call__(self) -> str:
        now_ms = int(time.time() * 1000)
        duplicate = now_ms == self._last_ms
        self._last_ms = now_ms

        ts_chars = []
        value = now_ms
        for _ in range(8):
            ts_chars.append(PUSH_CHARS[value % 64])
            value //= 64
        key = "".join(reversed(ts_chars))

        if not duplicate:
            self._last_random = [secrets.randbelow(64) for _ in range(12)]
        else:
            i = 11
            while i >= 0 and self._last_random[i] == 63:
                self._last_random[i] = 0
                i -= 1
            if i >= 0:
                self._last_random[i] += 1

        return key + "".join(PUSH_CHARS[i] for i in self._last_random)


new_key = PushKeyGenerator()
