"""Tests for calendar view queries and visibility."""

from datetime import UTC, datetime

import pytest

from py_eventcal.access import can_modify, can_view
from py_eventcal.internal import ValidationError
from py_eventcal.participants import Role, UserDirectory, UserRecord
from py_eventcal.queries import EventQueries


@pytest.fixture
def directory(store):
    return UserDirectory(store)


@pytest.fixture
def queries(repository, directory):
    return EventQueries(repository, directory)


async def add_event(repository, make_template, owner, participants, start, private=False):
    template = make_template(start_date=start, participants=participants, private=private)
    return await repository.save(template.build(owner=owner))


def at(day, hour=10):
    return datetime(2024, 1, day, hour, tzinfo=UTC)


@pytest.mark.asyncio
async def test_private_events_hidden_from_outsiders(repository, directory, queries, make_template):
    await directory.add(UserRecord(uid="uid-root", handle="root", role=Role.ADMIN))
    public = await add_event(repository, make_template, "uid-alice", ["uid-alice"], at(2))
    private = await add_event(
        repository, make_template, "uid-alice", ["uid-alice", "uid-bob"], at(1), private=True
    )

    assert [e.id for e in await queries.visible_events("uid-bob")] == [private.id, public.id]
    assert [e.id for e in await queries.visible_events("uid-root")] == [private.id, public.id]
    assert [e.id for e in await queries.visible_events("uid-carol")] == [public.id]
    assert [e.id for e in await queries.visible_events(None)] == [public.id]


@pytest.mark.asyncio
async def test_user_events_sorted_by_start(repository, queries, make_template):
    late = await add_event(repository, make_template, "uid-alice", ["uid-alice", "uid-bob"], at(9))
    early = await add_event(repository, make_template, "uid-bob", ["uid-bob"], at(3))
    await add_event(repository, make_template, "uid-carol", ["uid-carol"], at(5))

    assert [e.id for e in await queries.user_events("uid-bob")] == [early.id, late.id]
    assert await queries.user_events("uid-nobody") == []


@pytest.mark.asyncio
async def test_events_between_uses_overlap(repository, queries, make_template):
    inside = await add_event(repository, make_template, "uid-alice", ["uid-alice"], at(3))
    # Ends exactly at the window start, so it does not overlap
    touching = await add_event(repository, make_template, "uid-alice", ["uid-alice"], at(1, 23))
    straddling = await add_event(repository, make_template, "uid-alice", ["uid-alice"], at(7, 23))
    await add_event(repository, make_template, "uid-alice", ["uid-alice"], at(8, 0))

    window = await queries.events_between("uid-alice", at(2, 0), at(8, 0))

    ids = [e.id for e in window]
    assert ids == [inside.id, straddling.id]
    assert touching.id not in ids


@pytest.mark.asyncio
async def test_events_between_rejects_empty_window(queries):
    with pytest.raises(ValidationError, match="window"):
        await queries.events_between("uid-alice", at(2), at(2))


def test_access_rules(make_template):
    event = make_template(private=True).build(owner="uid-alice")
    alice = UserRecord(uid="uid-alice", handle="alice")
    bob = UserRecord(uid="uid-bob", handle="bob")
    carol = UserRecord(uid="uid-carol", handle="carol")
    root = UserRecord(uid="uid-root", handle="root", role=Role.ADMIN)

    assert can_modify(alice, event)
    assert can_modify(root, event)
    assert not can_modify(bob, event)
    assert not can_modify(None, event)

    assert can_view(bob, event)
    assert can_view(root, event)
    assert not can_view(carol, event)
    assert not can_view(None, event)
    assert can_view(None, make_template().build(owner="uid-alice"))
