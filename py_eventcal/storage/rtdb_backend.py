"""Realtime Database store implementation."""

from __future__ import annotations

from typing import Any

from ..internal import NotFoundError
from ..rtdb_client import RealtimeDatabaseClient, RealtimeDatabaseConfig
from .backend import Record, new_key, record_path, split_path


class RealtimeDatabaseStore:
    """Store backed by the Realtime Database REST API.

    Each collection is a top-level node (``/events``, ``/users``). Equality
    queries use ``orderBy``/``equalTo`` and need a matching ``.indexOn`` rule.
    """

    def __init__(
        self,
        config: RealtimeDatabaseConfig | None = None,
        client: RealtimeDatabaseClient | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize store.

        Args:
            config: Database configuration (ignored when ``client`` is given)
            client: Pre-built client (e.g., with a mock transport)
            debug: Enable debug logging of database requests/responses
        """
        self.client = client or RealtimeDatabaseClient(config, debug=debug)

    async def close(self) -> None:
        await self.client.close()

    async def allocate_key(self, collection: str) -> str:
        # Push keys are generated client-side, no round trip needed
        return new_key()

    async def create(self, collection: str, record: Record) -> str:
        return await self.client.post(collection, record)

    async def set(self, collection: str, key: str, record: Record) -> None:
        await self.client.put(record_path(collection, key), record)

    async def get(self, collection: str, key: str) -> Record | None:
        data = await self.client.get(record_path(collection, key))
        return data if isinstance(data, dict) else None

    async def list(self, collection: str) -> dict[str, Record]:
        data = await self.client.get(collection)
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if isinstance(value, dict)}

    async def query_by_field(self, collection: str, field: str, value: Any) -> dict[str, Record]:
        return await self.client.query_equal(collection, field, value)

    async def update(self, collection: str, key: str, partial: Record) -> None:
        # PATCH would silently create a missing record
        if await self.get(collection, key) is None:
            raise NotFoundError(f"Record not found: {collection}/{key}")
        await self.client.patch(record_path(collection, key), partial)

    async def batch_update(self, updates: dict[str, Record | None]) -> None:
        multi_path: dict[str, Any] = {}
        for path, partial in updates.items():
            collection, key = split_path(path)
            if partial is None:
                multi_path[record_path(collection, key)] = None
                continue
            # Field-level paths keep merge semantics for the record; a record
            # deleted concurrently comes back holding only these fields
            for field, value in partial.items():
                multi_path[f"{record_path(collection, key)}/{field}"] = value

        if multi_path:
            await self.client.patch("", multi_path)

    async def remove(self, collection: str, key: str) -> None:
        if await self.get(collection, key) is None:
            raise NotFoundError(f"Record not found: {collection}/{key}")
        await self.client.delete(record_path(collection, key))
