"""Tests for the in-memory and filesystem stores."""

import pytest

from py_eventcal.internal import NotFoundError, PersistenceError
from py_eventcal.storage import InMemoryStore, LocalStore, new_key, record_path, split_path


@pytest.fixture(params=["memory", "local"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStore()
    return LocalStore(tmp_path / "data")


@pytest.mark.asyncio
async def test_create_get_and_list(any_store):
    key = await any_store.create("events", {"title": "Standup", "seriesId": None})

    assert await any_store.get("events", key) == {"title": "Standup", "seriesId": None}
    assert await any_store.get("events", "missing") is None
    assert await any_store.list("events") == {key: {"title": "Standup", "seriesId": None}}
    assert await any_store.list("users") == {}


@pytest.mark.asyncio
async def test_allocate_key_writes_nothing(any_store):
    key = await any_store.allocate_key("events")

    assert key
    assert await any_store.get("events", key) is None
    assert await any_store.list("events") == {}


@pytest.mark.asyncio
async def test_set_replaces_record(any_store):
    await any_store.set("users", "alice", {"uid": "uid-alice", "role": "user"})
    await any_store.set("users", "alice", {"uid": "uid-alice"})

    assert await any_store.get("users", "alice") == {"uid": "uid-alice"}


@pytest.mark.asyncio
async def test_query_by_field(any_store):
    a = await any_store.create("events", {"seriesId": "s1"})
    b = await any_store.create("events", {"seriesId": "s1"})
    await any_store.create("events", {"seriesId": "s2"})

    result = await any_store.query_by_field("events", "seriesId", "s1")

    assert set(result) == {a, b}
    assert await any_store.query_by_field("events", "seriesId", "s3") == {}


@pytest.mark.asyncio
async def test_update_merges_fields(any_store):
    key = await any_store.create("events", {"title": "Standup", "private": False})

    await any_store.update("events", key, {"title": "Daily Standup"})

    assert await any_store.get("events", key) == {"title": "Daily Standup", "private": False}


@pytest.mark.asyncio
async def test_update_and_remove_missing_record(any_store):
    with pytest.raises(NotFoundError):
        await any_store.update("events", "missing", {"title": "x"})
    with pytest.raises(NotFoundError):
        await any_store.remove("events", "missing")


@pytest.mark.asyncio
async def test_remove(any_store):
    key = await any_store.create("events", {"title": "Standup"})

    await any_store.remove("events", key)

    assert await any_store.get("events", key) is None


@pytest.mark.asyncio
async def test_batch_update_merges_and_deletes(any_store):
    keep = await any_store.create("events", {"title": "One", "private": True})
    drop = await any_store.create("events", {"title": "Two"})

    await any_store.batch_update(
        {
            record_path("events", keep): {"title": "One bis"},
            record_path("events", drop): None,
        }
    )

    assert await any_store.get("events", keep) == {"title": "One bis", "private": True}
    assert await any_store.get("events", drop) is None


@pytest.mark.asyncio
async def test_batch_update_rejects_bad_path_before_writing(any_store):
    key = await any_store.create("events", {"title": "One"})

    with pytest.raises(ValueError):
        await any_store.batch_update({record_path("events", key): None, "events": None})

    assert await any_store.get("events", key) == {"title": "One"}


@pytest.mark.asyncio
async def test_memory_store_copies_records():
    store = InMemoryStore()
    record = {"participants": ["uid-alice"]}
    key = await store.create("events", record)

    record["participants"].append("uid-bob")
    fetched = await store.get("events", key)
    fetched["participants"].append("uid-carol")

    assert await store.get("events", key) == {"participants": ["uid-alice"]}


@pytest.mark.asyncio
async def test_local_store_persists_across_instances(tmp_path):
    key = await LocalStore(tmp_path).create("events", {"title": "Standup"})

    assert (tmp_path / "events" / f"{key}.json").is_file()
    assert await LocalStore(tmp_path).get("events", key) == {"title": "Standup"}


@pytest.mark.asyncio
async def test_local_store_skips_unreadable_records_in_list(tmp_path):
    store = LocalStore(tmp_path)
    key = await store.create("events", {"title": "Standup"})
    (tmp_path / "events" / "broken.json").write_text("{not json", encoding="utf-8")

    assert await store.list("events") == {key: {"title": "Standup"}}
    with pytest.raises(PersistenceError):
        await store.get("events", "broken")


@pytest.mark.asyncio
async def test_local_store_rejects_path_traversal(tmp_path):
    store = LocalStore(tmp_path)

    with pytest.raises(ValueError):
        await store.get("events", "../secrets")
    with pytest.raises(ValueError):
        await store.list("../etc")


def test_record_paths():
    assert record_path("events", "abc") == "events/abc"
    assert split_path("events/abc") == ("events", "abc")
    assert split_path("/events/abc/") == ("events", "abc")
    with pytest.raises(ValueError):
        split_path("events/abc/title")


def test_push_keys_sort_in_creation_order():
    keys = [new_key() for _ in range(50)]

    assert all(len(key) == 20 for key in keys)
    assert len(set(keys)) == 50
    assert keys == sorted(keys)


@pytest.mark.asyncio
async def test_batch_update_does_not_recreate_deleted_record(any_store):
    key = await any_store.create("events", {"title": "One", "owner": "uid-alice"})
    await any_store.remove("events", key)

    await any_store.batch_update({record_path("events", key): {"title": "One bis"}})

    assert await any_store.get("events", key) is None
    assert await any_store.list("events") == {}
