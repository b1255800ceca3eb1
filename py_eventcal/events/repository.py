"""Event repository: typed access to the ``events`` collection of a store."""

from __future__ import annotations

from typing import Any

from ..storage import Store, record_path
from .events import Event, with_id

EVENTS = "events"


class EventRepository:
    """Persistence façade for events.

    Translates between Event objects and stored records. Query results are
    unordered; callers sort when they need an order.
    """

    def __init__(self, store: Store, collection: str = EVENTS) -> None:
        self.store = store
        self.collection = collection

    async def allocate_id(self) -> str:
        """Reserve a fresh key (used as a series id)."""
        return await self.store.allocate_key(self.collection)

    async def create(self, event: Event) -> str:
        """Persist a new event and return its id."""
        return await self.store.create(self.collection, event.to_record())

    async def get(self, event_id: str) -> Event | None:
        data = await self.store.get(self.collection, event_id)
        if data is None:
            return None
        return Event.from_record(event_id, data)

    async def list_all(self) -> list[Event]:
        records = await self.store.list(self.collection)
        return [Event.from_record(key, data) for key, data in records.items()]

    async def query_by_series(self, series_id: str) -> list[Event]:
        records = await self.store.query_by_field(self.collection, "seriesId", series_id)
        return [Event.from_record(key, data) for key, data in records.items()]

    async def query_by_participant(self, user_id: str) -> list[Event]:
        """Events listing ``user_id`` among their participants."""
        # Membership in a list cannot be expressed as a field-equality query
        return [event for event in await self.list_all() if user_id in event.participants]

    async def update(self, event_id: str, partial: dict[str, Any]) -> None:
        """Merge a partial record into one event."""
        await self.store.update(self.collection, event_id, partial)

    async def batch_update(self, updates: dict[str, dict[str, Any] | None]) -> None:
        """Merge or delete several events in one write.

        Args:
            updates: Event id -> partial record, or None to delete
        """
        await self.store.batch_update(
            {record_path(self.collection, event_id): partial for event_id, partial in updates.items()}
        )

    async def remove(self, event_id: str) -> None:
        await self.store.remove(self.collection, event_id)

    async def save(self, event: Event) -> Event:
        """Persist a new event and return it with its id."""
        return with_id(event, await self.create(event))
