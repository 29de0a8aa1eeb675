from __future__ import annotations

from datetime import datetime
from functools import partial
import json

import anyio
import pytest

from eventhub.domain.errors import ConflictError, NotFoundError, PersistenceError
from eventhub.repositories.event_store import EventStore
from eventhub.repositories.json_storage import JsonCollectionFile

from conftest import event_fields

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 10, 17, 12, 0)


async def test_create_assigns_increasing_ids(event_store):
    ids = [(await event_store.create(**event_fields(title=f"E{i}"))).id for i in range(3)]
    await event_store.delete(ids[-1])
    ids.append((await event_store.create(**event_fields(title="E3"))).id)

    assert ids == [1, 2, 3, 4]


async def test_create_coerces_capacity_and_price(event_store):
    event = await event_store.create(**event_fields(capacity="25", price="9.99"))
    assert event.capacity == 25
    assert event.price == pytest.approx(9.99)
    assert event.registrations == 0
    assert event.registered_users == ()


async def test_register_until_full(event_store):
    event = await event_store.create(**event_fields(capacity=2))
    await event_store.register_user(event.id, 10)
    await event_store.register_user(event.id, 11)

    with pytest.raises(ConflictError, match="full"):
        await event_store.register_user(event.id, 12)

    stored = await event_store.find_by_id(event.id)
    assert stored.registrations == 2
    assert stored.registered_users == (10, 11)


async def test_duplicate_registration_is_rejected(event_store):
    event = await event_store.create(**event_fields())
    await event_store.register_user(event.id, 10)
    with pytest.raises(ConflictError, match="already registered"):
        await event_store.register_user(event.id, 10)

    stored = await event_store.find_by_id(event.id)
    assert stored.registrations == 1
    assert len(stored.registered_users) == 1


async def test_unregister(event_store):
    event = await event_store.create(**event_fields())
    with pytest.raises(ConflictError, match="not registered"):
        await event_store.unregister_user(event.id, 10)

    await event_store.register_user(event.id, 10)
    await event_store.unregister_user(event.id, 10)
    stored = await event_store.find_by_id(event.id)
    assert stored.registrations == 0
    assert stored.registered_users == ()


async def test_unregister_clamps_counter_at_zero(event_store):
    event = await event_store.create(**event_fields(registrations=0, registered_users=(10,)))
    await event_store.unregister_user(event.id, 10)
    assert (await event_store.find_by_id(event.id)).registrations == 0


async def test_missing_event_raises_not_found(event_store):
    for call in (
        event_store.register_user(5, 1),
        event_store.unregister_user(5, 1),
        event_store.update(5, title="x"),
        event_store.delete(5),
    ):
        with pytest.raises(NotFoundError):
            await call


async def test_find_all_orders_by_start_and_flags_upcoming(event_store):
    await event_store.create(**event_fields(title="Future", date="2099-01-01", time="10:00"))
    await event_store.create(**event_fields(title="Past", date="2020-01-01", time="10:00"))

    listed = await event_store.find_all(now=NOW)

    assert [item.event.title for item in listed] == ["Past", "Future"]
    assert [item.is_upcoming for item in listed] == [False, True]
    assert listed[1].to_dict()["isUpcoming"] is True

    on_disk = json.loads(event_store.path.read_text(encoding="utf-8"))
    assert all("isUpcoming" not in e for e in on_disk)


async def test_search_is_case_insensitive_across_fields(event_store):
    await event_store.create(**event_fields(title="Open Air", description="Summer Music Festival"))
    await event_store.create(**event_fields(title="Chess", category="Games", description="Blitz", location="Hall"))

    assert [e.title for e in await event_store.search("music")] == ["Open Air"]
    assert [e.title for e in await event_store.search("HALL")] == ["Chess"]
    assert [e.title for e in await event_store.search("games")] == ["Chess"]
    assert await event_store.search("opera") == []


async def test_category_organizer_popular_and_upcoming(event_store):
    a = await event_store.create(**event_fields(title="A", category="Tech", organizer_id=1, date="2099-03-01"))
    b = await event_store.create(**event_fields(title="B", category="tech", organizer_id=2, date="2099-02-01"))
    c = await event_store.create(**event_fields(title="C", category="Art", organizer_id=1, date="2021-02-01"))
    await event_store.register_user(b.id, 1)
    await event_store.register_user(b.id, 2)
    await event_store.register_user(c.id, 1)

    assert {e.title for e in await event_store.find_by_category("TECH")} == {"A", "B"}
    assert [e.id for e in await event_store.get_events_by_organizer(1)] == [a.id, c.id]
    assert [e.title for e in await event_store.get_popular_events(2)] == ["B", "C"]
    assert [e.title for e in await event_store.get_upcoming_events(10, now=NOW)] == ["B", "A"]
    assert [e.title for e in await event_store.get_upcoming_events(1, now=NOW)] == ["B"]


async def test_event_stats_and_past_count(event_store):
    await event_store.create(**event_fields(category="Tech", date="2099-01-01"))
    past = await event_store.create(**event_fields(category="Tech", date="2020-01-01"))
    await event_store.create(**event_fields(category="Art", date="2099-05-01"))
    await event_store.register_user(past.id, 3)

    stats = await event_store.get_event_stats(now=NOW)
    assert stats == {
        "totalEvents": 3,
        "upcomingEvents": 2,
        "pastEvents": 1,
        "totalRegistrations": 1,
        "categoryStats": {"Tech": 2, "Art": 1},
    }
    assert await event_store.cleanup_past_events(now=NOW) == 1
    assert len(event_store) == 3


async def test_update_does_not_touch_registration_counters(event_store):
    event = await event_store.create(**event_fields())
    await event_store.register_user(event.id, 4)
    updated = await event_store.update(event.id, title="Renamed", capacity=50)

    assert updated.title == "Renamed"
    assert updated.capacity == 50
    assert updated.registrations == 1
    assert updated.registered_users == (4,)
    with pytest.raises(ValueError):
        await event_store.update(event.id, isUpcoming=True)


async def test_concurrent_registrations_respect_capacity(event_store):
    event = await event_store.create(**event_fields(capacity=5))
    accepted: list[int] = []
    rejected: list[int] = []

    async def attempt(user_id: int) -> None:
        try:
            await event_store.register_user(event.id, user_id)
            accepted.append(user_id)
        except ConflictError:
            rejected.append(user_id)

    async with anyio.create_task_group() as tg:
        for user_id in range(1, 13):
            tg.start_soon(attempt, user_id)

    assert len(accepted) == 5
    assert len(rejected) == 7

    reopened = EventStore(JsonCollectionFile(event_store.path))
    await reopened.load()
    stored = await reopened.find_by_id(event.id)
    assert stored.registrations == 5
    assert sorted(stored.registered_users) == sorted(accepted)


async def test_concurrent_creates_get_distinct_ids(event_store):
    async with anyio.create_task_group() as tg:
        for i in range(8):
            tg.start_soon(partial(event_store.create, **event_fields(title=f"E{i}")))

    reopened = EventStore(JsonCollectionFile(event_store.path))
    await reopened.load()
    listed = await reopened.find_all(now=NOW)
    assert sorted(item.event.id for item in listed) == list(range(1, 9))


async def test_reload_reproduces_collection_and_resumes_ids(event_store):
    first = await event_store.create(**event_fields(title="One"))
    await event_store.create(**event_fields(title="Two"))
    await event_store.register_user(first.id, 9)

    reopened = EventStore(JsonCollectionFile(event_store.path))
    await reopened.load()

    assert await reopened.find_all(now=NOW) == await event_store.find_all(now=NOW)
    assert (await reopened.create(**event_fields(title="Three"))).id == 3


async def test_string_user_ids_match_stored_ids(event_store):
    event = await event_store.create(**event_fields())
    await event_store.register_user(event.id, 10)
    with pytest.raises(ConflictError, match="already registered"):
        await event_store.register_user(event.id, "10")

    stored = await event_store.find_by_id(event.id)
    assert stored.registered_users == (10,)
    assert stored.registrations == 1

    await event_store.unregister_user(event.id, "10")
    stored = await event_store.find_by_id(event.id)
    assert stored.registered_users == ()
    assert stored.registrations == 0


async def test_load_rejects_malformed_records(data_dir):
    data_dir.mkdir(parents=True, exist_ok=True)
    path = data_dir / "events.json"
    store = EventStore(JsonCollectionFile(path))

    path.write_text(json.dumps([{"title": "No id"}]), encoding="utf-8")
    with pytest.raises(PersistenceError) as info:
        await store.load()
    assert isinstance(info.value.__cause__, KeyError)

    path.write_text(json.dumps([{"id": "seven", "title": "Bad id"}]), encoding="utf-8")
    with pytest.raises(PersistenceError) as info:
        await store.load()
    assert isinstance(info.value.__cause__, ValueError)
    assert len(store) == 0
