"""
JSON File Key-Value Storage with Concurrency Control

Plays the part of the browser's localStorage on the server: a single
JSON object file mapping key -> string value. Every get/set/remove runs
under a file lock so several worker processes can share the file.

Only single operations are atomic. A read-modify-write spanning a get
and a set can still lose an update to another process.

Author: Your Name
Version: 1.0.0
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from filelock import FileLock, Timeout

from quannem.services.storage.base import BaseKeyValueStorage, StorageError

logger = logging.getLogger(__name__)


class JsonFileStorage(BaseKeyValueStorage):
    """File-backed storage guarded by a FileLock."""

    def __init__(self, path: Union[str, Path], lock_timeout: float = 30):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout
        logger.info(f"JsonFileStorage initialized ({self.path})")

    @property
    def backend_name(self) -> str:
        return "file"

    def _ensure_dir(self) -> None:
        """Create the storage directory if needed."""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created storage directory: {self.path.parent}")

    def _lock(self) -> FileLock:
        self._ensure_dir()
        return FileLock(str(self.lock_path), timeout=self.lock_timeout)

    def _load(self) -> dict[str, str]:
        """Load the whole file. A missing or corrupt file reads as empty."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.path}: top-level value is not an object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            with self._lock():
                return self._load().get(key)
        except Timeout as e:
            logger.error(f"Lock timeout reading '{key}'")
            raise StorageError(f"Lock timeout ({self.lock_timeout}s)") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._lock():
                data = self._load()
                data[key] = value
                self._dump(data)
                logger.debug(f"Stored '{key}' ({len(value)} chars)")
        except Timeout as e:
            logger.error(f"Lock timeout writing '{key}'")
            raise StorageError(f"Lock timeout ({self.lock_timeout}s)") from e

    def remove(self, key: str) -> None:
        try:
            with self._lock():
                data = self._load()
                if key in data:
                    del data[key]
                    self._dump(data)
                    logger.debug(f"Removed '{key}'")
        except Timeout as e:
            logger.error(f"Lock timeout removing '{key}'")
            raise StorageError(f"Lock timeout ({self.lock_timeout}s)") from e
