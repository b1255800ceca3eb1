"""Tests for the ICS feed endpoint."""

import asyncio
from datetime import timedelta

import pytest
from icalendar import Calendar
from starlette.testclient import TestClient

from py_eventcal.events import EventRepository, Recurrence
from py_eventcal.internal import PersistenceError
from py_eventcal.series import SeriesMaterializer
from py_eventcal.server import create_app
from py_eventcal.storage import InMemoryStore

OWNER = "uid-alice"


class FailingStore(InMemoryStore):
    async def list(self, collection):
        raise PersistenceError(ConnectionError("database unavailable"))


@pytest.fixture
def seeded_store(make_template):
    store = InMemoryStore()
    materializer = SeriesMaterializer(EventRepository(store))
    template = make_template()

    async def seed():
        await materializer.create(
            template,
            Recurrence("weekly", 1),
            actor=OWNER,
            horizon_end=template.start_date + timedelta(weeks=2),
        )
        await materializer.create(
            make_template(title="Private Chat", participants=["uid-carol"], private=True),
            None,
            actor="uid-carol",
        )

    asyncio.run(seed())
    return store


def test_feed_requires_user(seeded_store):
    client = TestClient(create_app(seeded_store))

    response = client.get("/feed.ics")

    assert response.status_code == 400
    assert "user" in response.text


def test_feed_lists_participant_events(seeded_store):
    client = TestClient(create_app(seeded_store))

    response = client.get("/feed.ics", params={"user": "uid-bob"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    assert 'filename="calendar-uid-bob.ics"' in response.headers["content-disposition"]

    calendar = Calendar.from_ical(response.text)
    vevents = list(calendar.walk("VEVENT"))
    assert len(vevents) == 3
    starts = [v.decoded("dtstart") for v in vevents]
    assert starts == sorted(starts)
    assert starts[1] - starts[0] == timedelta(weeks=1)
    assert {str(v["summary"]) for v in vevents} == {"Team Sync"}
    assert len({str(v["related-to"]) for v in vevents}) == 1
    assert {str(v["class"]) for v in vevents} == {"PUBLIC"}


def test_feed_for_private_event_participant(seeded_store):
    client = TestClient(create_app(seeded_store))

    response = client.get("/feed.ics", params={"user": "uid-carol"})

    vevents = list(Calendar.from_ical(response.text).walk("VEVENT"))
    assert len(vevents) == 1
    assert str(vevents[0]["class"]) == "PRIVATE"
    assert "RELATED-TO" not in vevents[0]


def test_feed_store_failure():
    client = TestClient(create_app(FailingStore()))

    response = client.get("/feed.ics", params={"user": OWNER})

    assert response.status_code == 503
