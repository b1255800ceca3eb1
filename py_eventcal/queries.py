"""Read-side event queries for calendar views."""

from __future__ import annotations

from datetime import datetime

from .access import can_view
from .events import Event, EventRepository
from .internal import ValidationError
from .participants import UserDirectory, UserRecord


class EventQueries:
    """Event listings filtered by participation and visibility."""

    def __init__(self, repository: EventRepository, users: UserDirectory) -> None:
        self.repository = repository
        self.users = users

    async def _actor(self, actor: str | None) -> UserRecord | None:
        if not actor:
            return None
        user = await self.users.get_by_uid(actor)
        if user is None:
            # Unregistered ids still see events they take part in
            return UserRecord(uid=actor, handle="")
        return user

    async def user_events(self, user_id: str) -> list[Event]:
        """Events the user participates in, ordered by start."""
        events = await self.repository.query_by_participant(user_id)
        return sorted(events, key=lambda e: e.start_date)

    async def visible_events(self, actor: str | None) -> list[Event]:
        """All events ``actor`` may see (None for anonymous), ordered by start."""
        user = await self._actor(actor)
        events = await self.repository.list_all()
        return sorted((e for e in events if can_view(user, e)), key=lambda e: e.start_date)

    async def events_between(self, actor: str | None, start: datetime, end: datetime) -> list[Event]:
        """Visible events overlapping the window ``[start, end)``.

        Backs the day, week and month views.
        """
        if start >= end:
            raise ValidationError("window start must be before window end")
        return [e for e in await self.visible_events(actor) if e.start_date < end and e.end_date > start]
