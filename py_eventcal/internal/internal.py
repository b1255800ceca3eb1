"""Error types shared by the calendar core, stores and the feed endpoint."""

from __future__ import annotations


class CalendarError(Exception):
    """Calendar error with an HTTP-style status code."""

    code = 500

    def __init__(self, code: int | None = None, err: Exception | None = None):
        if code is not None:
            self.code = code
        self.err = err
        super().__init__(str(self))

    def __str__(self) -> str:
        from http import HTTPStatus

        try:
            text = HTTPStatus(self.code).phrase
        except ValueError:
            text = "Unknown"

        s = f"{self.code} {text}"
        if self.err:
            return f"{s}: {self.err}"
        return s


class ValidationError(CalendarError):
    """Input rejected before any persistence I/O."""

    code = 400

    def __init__(self, message: str):
        super().__init__(err=Exception(message))


class PermissionDeniedError(CalendarError):
    """The acting user may not perform the operation."""

    code = 403

    def __init__(self, message: str):
        super().__init__(err=Exception(message))


class NotFoundError(CalendarError):
    """Event, series member or user is missing."""

    code = 404

    def __init__(self, message: str):
        super().__init__(err=Exception(message))


class InvalidRecurrenceError(CalendarError):
    """Unknown or unsupported recurrence frequency."""

    code = 422

    def __init__(self, message: str):
        super().__init__(err=Exception(message))


class PersistenceError(CalendarError):
    """Underlying store failure.

    ``err`` holds the last underlying error. ``written_ids`` lists records that
    were persisted before the failure (partial series materialization).
    """

    code = 503

    def __init__(self, err: Exception | None = None, written_ids: list[str] | None = None):
        self.written_ids = list(written_ids or [])
        super().__init__(err=err)

