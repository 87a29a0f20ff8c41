from __future__ import annotations

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any

import pytest

from quannem.services.baseline import BaselineLoader
from quannem.services.data_store import LocalDataStore, merge_unique
from quannem.services.identifiers import MonotonicIdGenerator
from quannem.services.notifications import MockNotificationSink, NotificationDispatcher, NotificationResult
from quannem.services.notifications.base import BaseNotificationSink
from quannem.services.storage import InMemoryStorage, JsonFileStorage

from .conftest import BASELINE_REVIEWS, FIXED_TIMESTAMP


class ExplodingSink(BaseNotificationSink):
    @property
    def provider_name(self) -> str:
        return "exploding"

    async def send(self, resource: str, data: dict[str, Any]) -> NotificationResult:
        raise ConnectionError("webhook unreachable")


class CountingLoader(BaselineLoader):
    def __init__(self, records: list[dict[str, Any]]) -> None:
        super().__init__(static_root="/nonexistent")
        self.records = records
        self.calls: list[str] = []

    async def load(self, resource: str) -> list[dict[str, Any]]:
        self.calls.append(resource)
        return [dict(r) for r in self.records]


def test_merge_unique_keeps_first_occurrence() -> None:
    merged = merge_unique([{"id": 1, "v": "a"}], [{"id": 1, "v": "b"}, {"id": 2, "v": "c"}])
    assert merged == [{"id": 1, "v": "a"}, {"id": 2, "v": "c"}]


def test_merge_unique_treats_missing_ids_as_one_identifier() -> None:
    merged = merge_unique([{"name": "x"}, {"name": "y"}, {"id": 3}])
    assert merged == [{"name": "x"}, {"id": 3}]


@pytest.mark.asyncio
async def test_read_returns_baseline_then_overlay(store: LocalDataStore, storage: InMemoryStorage) -> None:
    storage.set("quannem_reviews_local", json.dumps([{"id": 10, "name": "Lan"}]))

    records = await store.read("reviews")

    assert [r["id"] for r in records] == [1, 2, 10]


@pytest.mark.asyncio
async def test_read_has_no_duplicate_ids(store: LocalDataStore, storage: InMemoryStorage) -> None:
    storage.set(
        "quannem_reviews_local",
        json.dumps([{"id": 2, "name": "dup"}, {"id": 7}, {"id": 7}, {"id": 1}]),
    )

    records = await store.read("reviews")
    ids = [r["id"] for r in records]

    assert len(ids) == len(set(ids))
    assert ids == [1, 2, 7]


@pytest.mark.asyncio
async def test_baseline_shadows_overlay_with_same_id(storage: InMemoryStorage, dispatcher: NotificationDispatcher) -> None:
    store = LocalDataStore(storage, CountingLoader([{"id": 1, "name": "A"}]), dispatcher, write_delay=0)
    storage.set("quannem_reviews_local", json.dumps([{"id": 1, "name": "B"}, {"id": 2, "name": "C"}]))

    assert await store.read("reviews") == [{"id": 1, "name": "A"}, {"id": 2, "name": "C"}]


@pytest.mark.asyncio
async def test_read_survives_missing_baseline(tmp_path: Path, storage: InMemoryStorage, dispatcher: NotificationDispatcher) -> None:
    store = LocalDataStore(storage, BaselineLoader(static_root=tmp_path / "missing"), dispatcher, write_delay=0)
    overlay = [{"id": 5, "name": "Lan"}, {"id": 6, "name": "Hùng"}]
    storage.set("quannem_reservations_local", json.dumps(overlay))

    assert await store.read("reservations") == overlay


@pytest.mark.asyncio
async def test_unknown_resource_skips_baseline(storage: InMemoryStorage, dispatcher: NotificationDispatcher) -> None:
    loader = CountingLoader([{"id": 1}])
    store = LocalDataStore(storage, loader, dispatcher, write_delay=0)
    storage.set("quannem_menu_local", json.dumps([{"id": 9}]))

    assert await store.read("menu") == [{"id": 9}]
    assert loader.calls == []


@pytest.mark.asyncio
async def test_every_read_refetches_baseline(storage: InMemoryStorage, dispatcher: NotificationDispatcher) -> None:
    loader = CountingLoader([{"id": 1}])
    store = LocalDataStore(storage, loader, dispatcher, write_delay=0)

    await store.read("reviews")
    await store.read("reviews")

    assert loader.calls == ["reviews", "reviews"]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["{not json", '{"id": 1}', "null", '"text"'])
async def test_unreadable_overlay_reads_as_empty(store: LocalDataStore, storage: InMemoryStorage, raw: str) -> None:
    storage.set("quannem_reviews_local", raw)

    records = await store.read("reviews")

    assert records == BASELINE_REVIEWS


@pytest.mark.asyncio
async def test_overlay_entries_that_are_not_objects_are_dropped(store: LocalDataStore, storage: InMemoryStorage) -> None:
    storage.set("quannem_reservations_local", json.dumps([1, "x", {"id": 4}]))

    assert await store.read("reservations") == [{"id": 4}]


@pytest.mark.asyncio
async def test_write_then_read_contains_exactly_one_new_record(store: LocalDataStore) -> None:
    fields = {"name": "Lan", "phone": "0901234567", "date": "2026-02-01", "time": "19:00", "guests": "4"}

    confirmation = await store.write("reservations", fields)
    records = await store.read("reservations")

    assert confirmation.success is True
    assert confirmation.message == "Saved successfully"
    matching = [r for r in records if {k: r.get(k) for k in fields} == fields]
    assert len(matching) == 1
    assert matching[0]["id"] == confirmation.data["id"] == 100
    assert matching[0]["timestamp"] == FIXED_TIMESTAMP
    assert "id" not in fields and "timestamp" not in fields


@pytest.mark.asyncio
async def test_write_replaces_whole_overlay(store: LocalDataStore, storage: InMemoryStorage) -> None:
    await store.write("reviews", {"name": "A", "rating": 5})
    await store.write("reviews", {"name": "B", "rating": 3})

    stored = json.loads(storage.get("quannem_reviews_local"))

    assert [r["name"] for r in stored] == ["A", "B"]
    assert [r["id"] for r in stored] == [100, 101]


@pytest.mark.asyncio
async def test_write_generated_fields_override_supplied_ones(store: LocalDataStore) -> None:
    confirmation = await store.write("reviews", {"id": 1, "timestamp": "yesterday", "name": "Sneaky"})

    assert confirmation.data["id"] == 100
    assert confirmation.data["timestamp"] == FIXED_TIMESTAMP


@pytest.mark.asyncio
async def test_identical_writes_produce_distinct_records(storage: InMemoryStorage, dispatcher: NotificationDispatcher) -> None:
    store = LocalDataStore(
        storage,
        CountingLoader([]),
        dispatcher,
        id_generator=MonotonicIdGenerator(clock_ms=lambda: 1_700_000_000_000),
        write_delay=0,
    )
    fields = {"name": "Lan", "rating": 5}

    first = await store.write("reviews", fields)
    second = await store.write("reviews", fields)

    assert first.data["id"] != second.data["id"]
    assert len(await store.read("reviews")) == 2


@pytest.mark.asyncio
async def test_write_recovers_from_malformed_overlay(store: LocalDataStore, storage: InMemoryStorage) -> None:
    storage.set("quannem_reservations_local", "[{broken")

    await store.write("reservations", {"name": "Lan"})

    stored = json.loads(storage.get("quannem_reservations_local"))
    assert len(stored) == 1
    assert stored[0]["name"] == "Lan"


@pytest.mark.asyncio
async def test_write_dispatches_notification(store: LocalDataStore, sink: MockNotificationSink) -> None:
    confirmation = await store.write("reviews", {"name": "Lan", "rating": 5})
    await store.drain()

    assert len(sink.sent) == 1
    assert sink.sent[0]["resource"] == "reviews"
    assert sink.sent[0]["data"] == confirmation.data


@pytest.mark.asyncio
async def test_write_succeeds_when_sink_raises(storage: InMemoryStorage, caplog: pytest.LogCaptureFixture) -> None:
    store = LocalDataStore(storage, CountingLoader([]), NotificationDispatcher(ExplodingSink()), write_delay=0)

    with caplog.at_level(logging.ERROR):
        confirmation = await store.write("reservations", {"name": "Lan"})
        await store.drain()

    assert confirmation.success is True
    assert "Notification for reservations raised" in caplog.text
    assert len(await store.read("reservations")) == 1


@pytest.mark.asyncio
async def test_write_succeeds_when_sink_reports_failure(storage: InMemoryStorage) -> None:
    sink = MockNotificationSink(failure_rate=1.0)
    store = LocalDataStore(storage, CountingLoader([]), NotificationDispatcher(sink), write_delay=0)

    confirmation = await store.write("reviews", {"name": "Lan"})
    await store.drain()

    assert confirmation.success is True
    assert sink.sent == []


@pytest.mark.asyncio
async def test_write_waits_for_simulated_latency(
    storage: InMemoryStorage,
    dispatcher: NotificationDispatcher,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    delays: list[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("quannem.services.data_store.asyncio.sleep", fake_sleep)
    store = LocalDataStore(storage, CountingLoader([]), dispatcher, write_delay=0.5)

    await store.write("reviews", {"name": "Lan"})
    await store.drain()

    assert delays == [0.5]


@pytest.mark.asyncio
async def test_clear_drops_overlay_only(store: LocalDataStore) -> None:
    await store.write("reviews", {"name": "Lan"})

    store.clear("reviews")

    assert await store.read("reviews") == BASELINE_REVIEWS


def test_merge_unique_keeps_bool_and_int_ids_apart() -> None:
    merged = merge_unique([{"id": 1, "v": "a"}], [{"id": True, "v": "b"}, {"id": 1.0, "v": "c"}])

    assert merged == [{"id": 1, "v": "a"}, {"id": True, "v": "b"}]


@pytest.mark.asyncio
async def test_stores_sharing_one_file_never_reuse_an_id(tmp_path: Path, dispatcher: NotificationDispatcher) -> None:
    def frozen_clock() -> int:
        return 1_700_000_000_000

    def make_store() -> LocalDataStore:
        return LocalDataStore(
            JsonFileStorage(tmp_path / "overlay.json"),
            CountingLoader([]),
            dispatcher,
            id_generator=MonotonicIdGenerator(clock_ms=frozen_clock),
            write_delay=0,
        )

    worker_a, worker_b = make_store(), make_store()

    first = await worker_a.write("reviews", {"name": "Lan"})
    second = await worker_b.write("reviews", {"name": "Minh"})

    assert first.data["id"] == 1_700_000_000_000
    assert second.data["id"] == 1_700_000_000_001
    assert [r["name"] for r in await worker_a.read("reviews")] == ["Lan", "Minh"]


@pytest.mark.asyncio
async def test_write_keeps_stored_entries_that_are_not_objects(store: LocalDataStore, storage: InMemoryStorage) -> None:
    storage.set("quannem_reservations_local", json.dumps([["legacy"], "note", {"id": 4}]))

    await store.write("reservations", {"name": "Lan"})

    stored = json.loads(storage.get("quannem_reservations_local"))
    assert stored[:3] == [["legacy"], "note", {"id": 4}]
    assert stored[3]["name"] == "Lan"
    assert [r["id"] for r in await store.read("reservations")] == [4, 100]


class GatedStorage(InMemoryStorage):
    """Storage whose get blocks the calling thread until released."""

    def __init__(self) -> None:
        super().__init__()
        self.released = threading.Event()
        self.unblocked: list[bool] = []

    def get(self, key: str) -> str | None:
        self.unblocked.append(self.released.wait(timeout=5))
        return super().get(key)


@pytest.mark.asyncio
async def test_blocking_storage_does_not_stall_the_event_loop(dispatcher: NotificationDispatcher) -> None:
    storage = GatedStorage()
    store = LocalDataStore(storage, CountingLoader([]), dispatcher, write_delay=0)

    write = asyncio.create_task(store.write("reviews", {"name": "Lan"}))
    read = asyncio.create_task(store.read("reviews"))
    await asyncio.sleep(0.05)
    storage.released.set()

    confirmation = await write
    await read

    assert confirmation.success is True
    assert storage.unblocked and all(storage.unblocked)


@pytest.mark.asyncio
async def test_concurrent_writes_all_persist(storage: InMemoryStorage, dispatcher: NotificationDispatcher) -> None:
    store = LocalDataStore(storage, CountingLoader([]), dispatcher, write_delay=0)

    confirmations = await asyncio.gather(*(store.write("reviews", {"n": n}) for n in range(20)))

    stored = json.loads(storage.get("quannem_reviews_local"))
    assert sorted(r["n"] for r in stored) == list(range(20))
    assert len({c.data["id"] for c in confirmations}) == 20
