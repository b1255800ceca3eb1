"""Recurrence expansion.

Occurrences are computed from the series start rather than from the previous
occurrence, so a day-of-month that does not exist in a shorter month is
clamped to that month's last day and restored afterwards::

    >>> [d.date().isoformat() for d in expand(datetime(2024, 1, 31, tzinfo=UTC), "monthly",
    ...                                        horizon_end=datetime(2024, 4, 30, tzinfo=UTC))]
    ['2024-01-31', '2024-02-29', '2024-03-31', '2024-04-30']
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

from dateutil.relativedelta import relativedelta

from .events.events import Frequency, parse_frequency
from .internal import InvalidRecurrenceError

_DAY_MS = 1000 * 60 * 60 * 24

# Nominal step lengths; months are 30 days and years 365 days.
FREQUENCY_MILLISECONDS = {
    Frequency.DAILY: _DAY_MS,
    Frequency.WEEKLY: _DAY_MS * 7,
    Frequency.MONTHLY: _DAY_MS * 30,
    Frequency.YEARLY: _DAY_MS * 365,
}

DEFAULT_HORIZON = relativedelta(years=1)


def step(frequency: Frequency | str, count: int) -> relativedelta:
    """Calendar offset covering ``count`` frequency units."""
    frequency = parse_frequency(frequency)
    if frequency is Frequency.DAILY:
        return relativedelta(days=count)
    elif frequency is Frequency.WEEKLY:
        return relativedelta(days=7 * count)
    elif frequency is Frequency.MONTHLY:
        return relativedelta(months=count)
    elif frequency is Frequency.YEARLY:
        return relativedelta(years=count)
    raise InvalidRecurrenceError(f"unknown frequency: {frequency!r}")


def occurrence_at(start: datetime, frequency: Frequency | str, interval: int, index: int) -> datetime:
    """Return the ``index``-th occurrence (zero-based) of a rule starting at ``start``."""
    return start + step(frequency, index * interval)


def default_horizon(start: datetime) -> datetime:
    """Default expansion horizon: one calendar year after ``start``."""
    return start + DEFAULT_HORIZON


def expand(
    start: datetime,
    frequency: Frequency | str,
    interval: int = 1,
    horizon_end: datetime | None = None,
) -> Iterator[datetime]:
    """Expand a recurrence rule into occurrence dates.

    Args:
        start: First occurrence (always included when not past the horizon)
        frequency: Recurrence frequency
        interval: Number of frequency units between occurrences
        horizon_end: Inclusive upper bound (default: one year after start)

    Returns:
        Iterator over occurrence datetimes in increasing order. Every call
        returns a fresh iterator.

    Raises:
        InvalidRecurrenceError: If the frequency is unknown
    """
    frequency = parse_frequency(frequency)
    if interval < 1:
        raise InvalidRecurrenceError(f"interval must be positive, got {interval}")
    horizon = horizon_end if horizon_end is not None else default_horizon(start)
    return _occurrences(start, frequency, interval, horizon)


def _occurrences(start: datetime, frequency: Frequency, interval: int, horizon: datetime) -> Iterator[datetime]:
    index = 0
    while True:
        candidate = occurrence_at(start, frequency, interval, index)
        if candidate > horizon:
            return
        yield candidate
        index += 1


def frequency_to_milliseconds(frequency: Frequency | str) -> int:
    """Nominal length of one frequency unit in milliseconds.

    Raises:
        InvalidRecurrenceError: If the frequency is unknown
    """
    return FREQUENCY_MILLISECONDS[parse_frequency(frequency)]
