"""
Storage Backend Factory

Returns the file-backed or in-memory key-value storage based on
STORAGE_BACKEND.

Author: Your Name
Version: 1.0.0
"""

import logging
from functools import lru_cache

from quannem.core.config import get_settings, StorageBackend
from quannem.services.storage.base import BaseKeyValueStorage, StorageError
from quannem.services.storage.file import JsonFileStorage
from quannem.services.storage.memory import InMemoryStorage

logger = logging.getLogger(__name__)


@lru_cache()
def get_storage() -> BaseKeyValueStorage:
    """Get the configured overlay storage."""
    settings = get_settings()

    if settings.storage_backend == StorageBackend.MEMORY:
        logger.info("Storage: Using InMemoryStorage")
        return InMemoryStorage()

    logger.info(f"Storage: Using JsonFileStorage ({settings.storage_file})")
    return JsonFileStorage(settings.storage_file, lock_timeout=settings.storage_lock_timeout)


def reset_storage() -> None:
    """Clear the cached storage instance."""
    get_storage.cache_clear()


__all__ = [
    "get_storage",
    "reset_storage",
    "BaseKeyValueStorage",
    "StorageError",
    "InMemoryStorage",
    "JsonFileStorage",
]
