"""Recurring series: materialization and mutation.

A series is not stored as such; it is the set of events sharing a
``seriesId``. Creating a recurring event writes one event per occurrence,
editing or deleting a member can be propagated to every member.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from . import recurrence as rec
from .access import can_modify
from .events import (
    DeleteScope,
    Event,
    EventPatch,
    EventRepository,
    EventTemplate,
    Frequency,
    Recurrence,
    format_timestamp,
    validate_patch,
    validate_template,
)
from .internal import (
    InvalidRecurrenceError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from .participants import ParticipantResolver, UserDirectory
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

# Frequencies accepted when a series is created; daily is only understood by edits
CREATION_FREQUENCIES = frozenset({Frequency.WEEKLY, Frequency.MONTHLY, Frequency.YEARLY})


@dataclass
class SeriesResult:
    """Outcome of a create call."""

    series_id: str | None
    event_ids: list[str] = field(default_factory=list)


class SeriesMaterializer:
    """Creates standalone events and whole recurring series."""

    def __init__(
        self,
        repository: EventRepository,
        retry_policy: RetryPolicy | None = None,
        resolver: ParticipantResolver | None = None,
    ) -> None:
        """Initialize materializer.

        Args:
            repository: Event repository to write to
            retry_policy: Policy for each instance write (default: 3 attempts, 1s apart)
            resolver: When given, participants must all be known users
        """
        self.repository = repository
        self.retry_policy = retry_policy or RetryPolicy()
        self.resolver = resolver

    async def create(
        self,
        template: EventTemplate,
        recurrence: Recurrence | None = None,
        *,
        actor: str,
        horizon_end: datetime | None = None,
    ) -> SeriesResult:
        """Create one event, or one event per occurrence of ``recurrence``.

        Occurrences run from the template start up to ``horizon_end`` (default:
        one year later). Every instance keeps the template duration.

        Args:
            template: Event fields; ``participants`` must start with ``actor``
            recurrence: Recurrence rule, or None for a standalone event
            actor: User creating the event (becomes its owner)
            horizon_end: Last possible occurrence start (inclusive)

        Returns:
            SeriesResult with the series id and the ids of the written events.
            The series id is None for standalone events, which includes a
            recurrence whose horizon ends before the template start

        Raises:
            ValidationError: If the template is invalid
            InvalidRecurrenceError: If the frequency cannot start a series
            PersistenceError: If any write still fails after retries; instances
                already written are listed in ``written_ids`` and not rolled back
        """
        validate_template(template, actor)

        if recurrence is not None and recurrence.frequency not in CREATION_FREQUENCIES:
            raise InvalidRecurrenceError(
                f"frequency {recurrence.frequency.value!r} cannot be used to create a series"
            )

        if self.resolver is not None:
            unknown = await self.resolver.unknown(template.participants)
            if unknown:
                raise ValidationError(f"unknown participants: {', '.join(unknown)}")

        occurrences: list[datetime] = []
        if recurrence is not None:
            occurrences = list(
                rec.expand(
                    template.start_date,
                    recurrence.frequency,
                    recurrence.interval,
                    horizon_end or rec.default_horizon(template.start_date),
                )
            )

        if not occurrences:
            # No recurrence, or a horizon before the start: a single standalone event
            event = template.build(owner=actor)
            event_ids = await self._save_all([event])
            logger.info("Created event %s", event_ids[0])
            return SeriesResult(series_id=None, event_ids=event_ids)

        series_id = await self.repository.allocate_id()
        events = [
            template.build(owner=actor, start_date=start, recurrence=recurrence, series_id=series_id)
            for start in occurrences
        ]

        event_ids = await self._save_all(events)
        logger.info("Created series %s with %d events", series_id, len(event_ids))
        return SeriesResult(series_id=series_id, event_ids=event_ids)

    async def _save_all(self, events: list[Event]) -> list[str]:
        """Write events concurrently, each under the retry policy."""
        results = await asyncio.gather(
            *(self.retry_policy.run(self.repository.create, event) for event in events),
            return_exceptions=True,
        )

        written = [r for r in results if isinstance(r, str)]
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            last = failures[-1]
            logger.error("Failed to write %d of %d events: %s", len(failures), len(events), last)
            err = last.err if isinstance(last, PersistenceError) else last
            raise PersistenceError(err, written_ids=written) from last  # type: ignore[arg-type]
        return written


class SeriesMutator:
    """Applies edits and deletes to events and their series."""

    def __init__(self, repository: EventRepository, users: UserDirectory | None = None) -> None:
        """Initialize mutator.

        Args:
            repository: Event repository
            users: Directory used to recognise administrators; without it only
                owners may change their events
        """
        self.repository = repository
        self.users = users

    async def _load(self, event_id: str) -> Event:
        event = await self.repository.get(event_id)
        if event is None:
            raise NotFoundError(f"Event not found: {event_id}")
        return event

    async def _ensure_can_modify(self, actor: str, event: Event) -> None:
        if actor == event.owner:
            return
        user = await self.users.get_by_uid(actor) if self.users else None
        if not can_modify(user, event):
            raise PermissionDeniedError(f"user {actor!r} may not modify event {event.id}")

    async def _series_members(self, series_id: str) -> list[Event]:
        """Series members in chronological order."""
        members = await self.repository.query_by_series(series_id)
        return sorted(members, key=lambda e: (e.start_date, e.id or ""))

    async def update(self, event_id: str, patch: EventPatch, *, actor: str) -> None:
        """Edit an event; for series members the edit is applied to the whole series.

        Series members are re-spaced in chronological order from the first
        member. With the rule unchanged, the first member moves by the same
        offset as the edited one and member ``i`` starts ``i * interval``
        frequency units after it. With a new frequency or interval, the first
        member starts at ``patch.start_date``. Every member lasts
        ``patch.end_date - patch.start_date``.

        Raises:
            ValidationError: If the patch is invalid, or carries a recurrence
                for a standalone event
            NotFoundError: If the event does not exist
            PermissionDeniedError: If ``actor`` is neither owner nor admin
            InvalidRecurrenceError: If the effective frequency is unknown
            PersistenceError: If the write fails
        """
        validate_patch(patch)
        original = await self._load(event_id)
        await self._ensure_can_modify(actor, original)

        if not original.is_series_member:
            if patch.recurrence is not None:
                raise ValidationError("a standalone event cannot become a series")
            await self.repository.update(event_id, patch.to_record())
            logger.info("Event %s updated by %s", event_id, actor)
            return

        recurrence = patch.recurrence or original.recurrence
        if recurrence is None:
            raise InvalidRecurrenceError(f"series {original.series_id} has no recurrence rule")

        new_duration = patch.end_date - patch.start_date
        nominal_step = timedelta(milliseconds=rec.frequency_to_milliseconds(recurrence.frequency))
        if new_duration >= nominal_step * recurrence.interval:
            logger.warning(
                "Series %s: duration %s is not shorter than the %s spacing, instances will overlap",
                original.series_id,
                new_duration,
                recurrence.frequency.value,
            )

        members = await self._series_members(original.series_id)
        if patch.recurrence is None or patch.recurrence == original.recurrence:
            # Re-derive from the first member so a clamped date never becomes the anchor
            base = members[0].start_date + (patch.start_date - original.start_date)
        else:
            base = patch.start_date

        updates: dict[str, dict | None] = {}
        for index, member in enumerate(members):
            start = rec.occurrence_at(base, recurrence.frequency, recurrence.interval, index)
            updates[member.id] = {  # type: ignore[index]
                "startDate": format_timestamp(start),
                "endDate": format_timestamp(start + new_duration),
                "title": patch.title if patch.title is not None else member.title,
                "description": patch.description if patch.description is not None else member.description,
                "recurrence": recurrence.to_record(),
            }

        await self.repository.batch_update(updates)
        logger.info("Series %s (%d events) updated by %s", original.series_id, len(updates), actor)

    async def delete(self, event_id: str, scope: DeleteScope = DeleteScope.SINGLE, *, actor: str) -> list[str]:
        """Delete one event or its whole series.

        Args:
            event_id: Event to delete
            scope: SINGLE removes only this event; SERIES removes every member
                (same as SINGLE for standalone events)
            actor: User performing the delete

        Returns:
            Ids of the removed events

        Raises:
            NotFoundError: If the event does not exist
            PermissionDeniedError: If ``actor`` is neither owner nor admin
            PersistenceError: If the write fails
        """
        scope = DeleteScope(scope)
        event = await self._load(event_id)
        await self._ensure_can_modify(actor, event)

        if scope is DeleteScope.SINGLE or not event.is_series_member:
            await self.repository.remove(event_id)
            logger.info("Event %s deleted by %s", event_id, actor)
            return [event_id]

        members = await self._series_members(event.series_id)
        removed = [member.id for member in members if member.id]
        await self.repository.batch_update({member_id: None for member_id in removed})
        logger.info("Series %s (%d events) deleted by %s", event.series_id, len(removed), actor)
        return removed
