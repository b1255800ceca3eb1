"""Recurring-event calendar core: series creation, editing and deletion."""

from .events import (
    DeleteScope,
    Event,
    EventPatch,
    EventRepository,
    EventTemplate,
    Frequency,
    Recurrence,
)
from .internal import (
    CalendarError,
    InvalidRecurrenceError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from .participants import ParticipantResolver, Role, UserDirectory, UserRecord
from .queries import EventQueries
from .retry import RetryPolicy
from .series import SeriesMaterializer, SeriesMutator, SeriesResult
from .storage import InMemoryStore, LocalStore, RealtimeDatabaseStore, Store

__version__ = "0.1.0"

__all__ = [
    "DeleteScope",
    "Event",
    "EventPatch",
    "EventRepository",
    "EventTemplate",
    "Frequency",
    "Recurrence",
    "CalendarError",
    "InvalidRecurrenceError",
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
    "ValidationError",
    "ParticipantResolver",
    "Role",
    "UserDirectory",
    "UserRecord",
    "EventQueries",
    "RetryPolicy",
    "SeriesMaterializer",
    "SeriesMutator",
    "SeriesResult",
    "InMemoryStore",
    "LocalStore",
    "RealtimeDatabaseStore",
    "Store",
]
