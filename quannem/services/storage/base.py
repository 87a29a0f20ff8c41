"""
Key-Value Storage Abstract Base Class

Defines the storage port used by the data store and the admin session.
Values are plain strings, the same contract the browser's localStorage
and sessionStorage offer; callers do their own JSON encoding.

Author: Your Name
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """Raised when the storage medium cannot be read or written."""


class BaseKeyValueStorage(ABC):
    """Abstract base class for key-value storage backends."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend name."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is a no-op."""
        pass
