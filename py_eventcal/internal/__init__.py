"""Internal helpers for py-eventcal."""

from .internal import (
    CalendarError,
    InvalidRecurrenceError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "CalendarError",
    "InvalidRecurrenceError",
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
    "ValidationError",
]
