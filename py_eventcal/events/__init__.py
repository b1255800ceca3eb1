"""Event model and repository."""

from .events import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    INTERVAL_MAX,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    DeleteScope,
    Event,
    EventPatch,
    EventTemplate,
    Frequency,
    Recurrence,
    format_timestamp,
    parse_frequency,
    parse_timestamp,
    validate_patch,
    validate_template,
)
from .repository import EventRepository

__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "DESCRIPTION_MIN_LENGTH",
    "INTERVAL_MAX",
    "TITLE_MAX_LENGTH",
    "TITLE_MIN_LENGTH",
    "DeleteScope",
    "Event",
    "EventPatch",
    "EventTemplate",
    "EventRepository",
    "Frequency",
    "Recurrence",
    "format_timestamp",
    "parse_frequency",
    "parse_timestamp",
    "validate_patch",
    "validate_template",
]
