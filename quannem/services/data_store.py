"""
Local Data Store

The "API" behind the website: each resource is a static baseline
(read-only JSON shipped with the site) plus a local overlay of records
added at runtime, kept in key-value storage as one JSON-encoded list.

Reads merge baseline then overlay and keep the first record seen for
each id, so a baseline record shadows an overlay record that shares
its id. Writes stamp the new record with an id and a timestamp, replace
the whole overlay, and announce the record on the notification sink
without waiting for it.

Usage:
    store = LocalDataStore(storage, baseline, dispatcher)
    reviews = await store.read("reviews")
    confirmation = await store.write("reservations", {"name": "Lan", "guests": 4})

Author: Your Name
Version: 1.0.0
"""

import asyncio
import json
import logging
import threading
from typing import Any, Callable, Optional

from quannem.schemas import WriteConfirmation
from quannem.services.baseline import BaselineLoader
from quannem.services.identifiers import BaseIdGenerator, MonotonicIdGenerator, utc_timestamp
from quannem.services.notifications.dispatcher import NotificationDispatcher
from quannem.services.storage.base import BaseKeyValueStorage

logger = logging.getLogger(__name__)


def _identity(key: Any) -> Any:
    """Hashable identity of an id value; True and 1 stay distinct."""
    if isinstance(key, bool):
        return ("bool", key)
    try:
        hash(key)
    except TypeError:
        # unhashable id, compare by its JSON form
        return ("json", json.dumps(key, sort_keys=True, default=str))
    return key


def merge_unique(*sources: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Concatenate sources and keep the first record for each id."""
    seen = set()
    unique = []
    for records in sources:
        for record in records:
            key = _identity(record.get("id"))
            if key in seen:
                continue
            seen.add(key)
            unique.append(record)
    return unique


def _max_int_id(items: list[Any]) -> int:
    ids = [
        item.get("id") for item in items
        if isinstance(item, dict) and isinstance(item.get("id"), int) and not isinstance(item.get("id"), bool)
    ]
    return max(ids, default=0)


class LocalDataStore:
    """Baseline + local overlay storage for reservations and reviews.

    Storage calls run in a worker thread so a contended file lock never
    stalls the event loop.
    """

    def __init__(
        self,
        storage: BaseKeyValueStorage,
        baseline: BaselineLoader,
        dispatcher: NotificationDispatcher,
        id_generator: Optional[BaseIdGenerator] = None,
        clock: Optional[Callable[[], str]] = None,
        write_delay: float = 0.5,
        key_prefix: str = "quannem",
    ):
        self.storage = storage
        self.baseline = baseline
        self.dispatcher = dispatcher
        self.id_generator = id_generator or MonotonicIdGenerator()
        self.clock = clock or utc_timestamp
        self.write_delay = write_delay
        self.key_prefix = key_prefix
        self._write_lock = threading.Lock()

    def storage_key(self, resource: str) -> str:
        return f"{self.key_prefix}_{resource}_local"

    def _load_overlay(self, resource: str) -> list[Any]:
        """Load the stored overlay list as-is. Absent or unreadable data counts as empty."""
        key = self.storage_key(resource)
        raw = self.storage.get(key)
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Ignoring malformed overlay under '{key}': {e}")
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring overlay under '{key}': not a list")
            return []
        return data

    def _read_overlay(self, resource: str) -> list[dict[str, Any]]:
        return [item for item in self._load_overlay(resource) if isinstance(item, dict)]

    def _append(self, resource: str, fields: dict[str, Any]) -> tuple[dict[str, Any], int]:
        """Read-modify-write of the overlay; entries already stored are kept untouched."""
        with self._write_lock:
            current = self._load_overlay(resource)

            new_item = {
                **fields,
                "id": self.id_generator.next_id(floor=_max_int_id(current)),
                "timestamp": self.clock(),
            }

            current.append(new_item)
            self.storage.set(self.storage_key(resource), json.dumps(current, ensure_ascii=False))
            return new_item, len(current)

    async def read(self, resource: str) -> list[dict[str, Any]]:
        """
        Return the merged, deduplicated records of resource.

        Baseline records come first, then overlay records; no time ordering.
        Unknown resources skip the baseline and return the overlay alone.
        Never raises for baseline failures.
        """
        static_data: list[dict[str, Any]] = []
        if self.baseline.has_endpoint(resource):
            static_data = await self.baseline.load(resource)

        local_data = await asyncio.to_thread(self._read_overlay, resource)
        merged = merge_unique(static_data, local_data)

        logger.debug(
            f"Read {resource}: {len(static_data)} baseline + {len(local_data)} local "
            f"-> {len(merged)} unique"
        )
        return merged

    async def write(self, resource: str, fields: dict[str, Any]) -> WriteConfirmation:
        """
        Add a record to the overlay of resource.

        Fields are stored as supplied; id and timestamp are generated and
        take precedence over same-named fields. The id is above every id
        already in the overlay.
        """
        if self.write_delay:
            await asyncio.sleep(self.write_delay)

        new_item, count = await asyncio.to_thread(self._append, resource, fields)
        logger.info(f"Saved {resource} #{new_item['id']} ({count} local)")

        self.dispatcher.dispatch(resource, new_item)

        return WriteConfirmation(success=True, message="Saved successfully", data=new_item)

    def clear(self, resource: str) -> None:
        """Drop every local record of resource."""
        self.storage.remove(self.storage_key(resource))
        logger.info(f"Cleared local {resource}")

    async def drain(self) -> None:
        """Wait for pending notifications."""
        await self.dispatcher.drain()
