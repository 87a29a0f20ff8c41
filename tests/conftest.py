from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from quannem.services.baseline import BaselineLoader
from quannem.services.data_store import LocalDataStore
from quannem.services.identifiers import SequentialIdGenerator
from quannem.services.notifications import MockNotificationSink, NotificationDispatcher
from quannem.services.storage import InMemoryStorage

FIXED_TIMESTAMP = "2026-01-01T12:00:00.000Z"

BASELINE_REVIEWS: list[dict[str, Any]] = [
    {"id": 1, "name": "Minh Anh", "rating": 5, "comment_vi": "Ngon", "comment_en": "Tasty", "source": "Google"},
    {"id": 2, "name": "Thomas", "rating": 4, "comment_vi": "Tốt", "comment_en": "Good", "source": "Google"},
]


def write_baseline(root: Path, resource: str, data: Any) -> None:
    path = root / "assets" / "data" / f"{resource}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")


@pytest.fixture
def static_root(tmp_path: Path) -> Path:
    write_baseline(tmp_path, "reviews", BASELINE_REVIEWS)
    write_baseline(tmp_path, "reservations", [])
    return tmp_path


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def sink() -> MockNotificationSink:
    return MockNotificationSink()


@pytest.fixture
def dispatcher(sink: MockNotificationSink) -> NotificationDispatcher:
    return NotificationDispatcher(sink)


@pytest.fixture
def store(storage: InMemoryStorage, static_root: Path, dispatcher: NotificationDispatcher) -> LocalDataStore:
    return LocalDataStore(
        storage=storage,
        baseline=BaselineLoader(static_root=static_root),
        dispatcher=dispatcher,
        id_generator=SequentialIdGenerator(start=100),
        clock=lambda: FIXED_TIMESTAMP,
        write_delay=0,
    )
