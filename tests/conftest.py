"""Shared fixtures for py-eventcal tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from py_eventcal.events import EventRepository, EventTemplate
from py_eventcal.retry import RetryPolicy
from py_eventcal.storage import InMemoryStore

OWNER = "uid-alice"


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def repository(store):
    return EventRepository(store)


@pytest.fixture
def fast_retry():
    """Retry policy that does not actually sleep between attempts."""
    return RetryPolicy(max_attempts=3, backoff=1.0, sleep=AsyncMock())


@pytest.fixture
def make_template():
    def factory(**overrides):
        start = overrides.pop("start_date", datetime(2024, 1, 1, 10, 0, tzinfo=UTC))
        fields = {
            "title": "Team Sync",
            "start_date": start,
            "end_date": start + timedelta(hours=1),
            "description": "Weekly planning meeting",
            "participants": [OWNER, "uid-bob"],
            "private": False,
        }
        fields.update(overrides)
        return EventTemplate(**fields)

    return factory
