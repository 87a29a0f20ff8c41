"""
In-Memory Key-Value Storage

Dict-backed storage. Used for admin sessions and in tests; nothing
survives a restart.
"""

from typing import Optional

from quannem.services.storage.base import BaseKeyValueStorage


class InMemoryStorage(BaseKeyValueStorage):
    """Process-local storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    @property
    def backend_name(self) -> str:
        return "memory"

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)
