"""
Record Identifier Generation

New records get an integer id taken from the wall clock in
milliseconds. The generator never hands out the same id twice, even
when two writes land in the same millisecond or the clock steps back.
Callers pass the highest id already stored as a floor, so processes
sharing one storage file do not reuse each other's ids.
"""

import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format a creation timestamp, e.g. ``2026-01-01T12:00:00.000Z``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BaseIdGenerator(ABC):
    """Source of unique record identifiers."""

    @abstractmethod
    def next_id(self, floor: int = 0) -> int:
        """Return a fresh id strictly greater than floor."""
        pass


class MonotonicIdGenerator(BaseIdGenerator):
    """Wall-clock milliseconds, bumped past the last id (and floor) when needed."""

    def __init__(self, clock_ms: Optional[Callable[[], int]] = None):
        self._clock_ms = clock_ms or _wall_clock_ms
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self, floor: int = 0) -> int:
        with self._lock:
            self._last = max(self._clock_ms(), self._last + 1, floor + 1)
            return self._last


class SequentialIdGenerator(BaseIdGenerator):
    """Deterministic counter."""

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def next_id(self, floor: int = 0) -> int:
        with self._lock:
            value = max(self._next, floor + 1)
            self._next = value + 1
            return value
