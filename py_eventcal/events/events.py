"""Event types, validation and wire-record conversion.

Records are stored with camelCase field names and ISO-8601 UTC timestamps
(``2024-01-01T10:00:00Z``). The store key is the event id and is not part of
the stored record.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from ..internal import InvalidRecurrenceError, ValidationError

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 30
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 500
INTERVAL_MAX = 100


class Frequency(str, Enum):
    """Recurrence frequency."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def parse_frequency(value: str | Frequency) -> Frequency:
    """Parse a frequency name.

    Raises:
        InvalidRecurrenceError: If the name is not a known frequency
    """
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).lower())
    except ValueError:
        raise InvalidRecurrenceError(f"unknown frequency: {value!r}") from None


class DeleteScope(str, Enum):
    """Whether a delete targets one instance or its whole series."""

    SINGLE = "single"
    SERIES = "series"


@dataclass(frozen=True)
class Recurrence:
    """Recurrence rule of a series (frequency and interval)."""

    frequency: Frequency
    interval: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "frequency", parse_frequency(self.frequency))
        if isinstance(self.interval, bool) or not isinstance(self.interval, int):
            raise ValidationError(f"interval must be an integer, got {self.interval!r}")
        if not 1 <= self.interval <= INTERVAL_MAX:
            raise ValidationError(f"interval must be between 1 and {INTERVAL_MAX}, got {self.interval}")

    def to_record(self) -> dict[str, Any]:
        return {"frequency": self.frequency.value, "interval": self.interval}

    @classmethod
    def from_record(cls, data: dict[str, Any] | None) -> Recurrence | None:
        """Build a recurrence from a stored record (``None`` for standalone events)."""
        if not data or not data.get("frequency"):
            return None
        return cls(frequency=data["frequency"], interval=int(data.get("interval") or 1))


@dataclass
class Event:
    """One persisted event instance."""

    title: str
    start_date: datetime
    end_date: datetime
    description: str
    participants: list[str]
    owner: str
    private: bool = False
    recurrence: Recurrence | None = None
    series_id: str | None = None
    id: str | None = None

    @property
    def duration(self) -> timedelta:
        return self.end_date - self.start_date

    @property
    def is_series_member(self) -> bool:
        return self.series_id is not None

    def to_record(self) -> dict[str, Any]:
        """Convert to the stored record (without ``id``)."""
        return {
            "title": self.title,
            "startDate": format_timestamp(self.start_date),
            "endDate": format_timestamp(self.end_date),
            "description": self.description,
            "participants": list(self.participants),
            "private": self.private,
            "recurrence": self.recurrence.to_record() if self.recurrence else None,
            "seriesId": self.series_id,
            "owner": self.owner,
        }

    @classmethod
    def from_record(cls, event_id: str | None, data: dict[str, Any]) -> Event:
        """Build an event from a stored record.

        Records written before ``owner`` existed fall back to the first participant.
        """
        participants = list(data.get("participants") or [])
        return cls(
            id=event_id,
            title=str(data.get("title", "")),
            start_date=parse_timestamp(data["startDate"]),
            end_date=parse_timestamp(data["endDate"]),
            description=str(data.get("description", "")),
            participants=participants,
            owner=str(data.get("owner") or (participants[0] if participants else "")),
            private=bool(data.get("private", False)),
            recurrence=Recurrence.from_record(data.get("recurrence")),
            series_id=data.get("seriesId"),
        )


@dataclass
class EventTemplate:
    """Fields supplied by the caller when creating an event or series."""

    title: str
    start_date: datetime
    end_date: datetime
    description: str
    participants: list[str] = field(default_factory=list)
    private: bool = False

    def build(
        self,
        owner: str,
        start_date: datetime | None = None,
        recurrence: Recurrence | None = None,
        series_id: str | None = None,
    ) -> Event:
        """Build an event instance, optionally shifted to another start date."""
        start = start_date or self.start_date
        return Event(
            title=self.title,
            start_date=start,
            end_date=start + (self.end_date - self.start_date),
            description=self.description,
            participants=list(self.participants),
            owner=owner,
            private=self.private,
            recurrence=recurrence,
            series_id=series_id,
        )


@dataclass
class EventPatch:
    """Edit applied to an event (and, for series members, to the whole series).

    ``title``, ``description`` and ``recurrence`` are optional; start and end
    are always required.
    """

    start_date: datetime
    end_date: datetime
    title: str | None = None
    description: str | None = None
    recurrence: Recurrence | None = None

    def to_record(self) -> dict[str, Any]:
        """Convert to a partial record for merge updates."""
        data: dict[str, Any] = {
            "startDate": format_timestamp(self.start_date),
            "endDate": format_timestamp(self.end_date),
        }
        if self.title is not None:
            data["title"] = self.title
        if self.description is not None:
            data["description"] = self.description
        if self.recurrence is not None:
            data["recurrence"] = self.recurrence.to_record()
        return data


def format_timestamp(dt: datetime) -> str:
    """Format an aware datetime as an ISO-8601 UTC string with ``Z`` suffix."""
    if dt.tzinfo is None:
        raise ValidationError(f"timestamp must be timezone-aware: {dt.isoformat()}")
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"invalid timestamp: {value!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _check_length(name: str, value: str, minimum: int, maximum: int) -> None:
    if not isinstance(value, str) or not minimum <= len(value) <= maximum:
        raise ValidationError(f"The {name} must be between {minimum} and {maximum} characters!")


def _check_dates(start: datetime, end: datetime) -> None:
    if start.tzinfo is None or end.tzinfo is None:
        raise ValidationError("start and end dates must be timezone-aware")
    if start >= end:
        raise ValidationError("The start date must be before the end date!")


def validate_template(template: EventTemplate, actor: str) -> None:
    """Validate a creation template.

    Raises:
        ValidationError: If any field is out of range
    """
    _check_length("title", template.title, TITLE_MIN_LENGTH, TITLE_MAX_LENGTH)
    _check_length("description", template.description, DESCRIPTION_MIN_LENGTH, DESCRIPTION_MAX_LENGTH)
    _check_dates(template.start_date, template.end_date)

    participants = template.participants
    if not participants:
        raise ValidationError("an event needs at least one participant")
    if len(set(participants)) != len(participants):
        raise ValidationError("participants must be unique")
    if participants[0] != actor:
        raise ValidationError(f"participants must start with the event owner {actor!r}")


def validate_patch(patch: EventPatch) -> None:
    """Validate an edit.

    Raises:
        ValidationError: If any field is out of range
    """
    _check_dates(patch.start_date, patch.end_date)
    if patch.title is not None:
        _check_length("title", patch.title, TITLE_MIN_LENGTH, TITLE_MAX_LENGTH)
    if patch.description is not None:
        _check_length("description", patch.description, DESCRIPTION_MIN_LENGTH, DESCRIPTION_MAX_LENGTH)


def with_id(event: Event, event_id: str) -> Event:
    """Return a copy of ``event`` carrying the repository-assigned id."""
    return replace(event, id=event_id)
