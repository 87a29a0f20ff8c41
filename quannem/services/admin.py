"""
Admin Session Service

Small admin page guarded by hardcoded demo credentials. Authentication
state is one session-scoped flag (``admin_auth`` == "true"); every
login attempt, good or bad, is reported on the notification sink.

This is a convenience gate for the restaurant owner, not security.

Author: Your Name
Version: 1.0.0
"""

import logging
import secrets
import time
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Optional

from quannem.services.notifications.dispatcher import NotificationDispatcher
from quannem.services.storage.base import BaseKeyValueStorage
from quannem.services.storage.memory import InMemoryStorage

logger = logging.getLogger(__name__)

AUTH_FLAG_KEY = "admin_auth"
ADMIN_LOGIN_EVENT = "admin_login"


class AdminAuthService:
    """Login/logout against one session's storage."""

    def __init__(
        self,
        session_storage: BaseKeyValueStorage,
        dispatcher: NotificationDispatcher,
        username: str = "admin",
        password: str = "admin123",
    ):
        self.session_storage = session_storage
        self.dispatcher = dispatcher
        self._username = username
        self._password = password

    def is_authenticated(self) -> bool:
        return self.session_storage.get(AUTH_FLAG_KEY) == "true"

    def login(self, user: str, password: str) -> bool:
        """Check credentials, set the session flag and report the attempt."""
        if user == self._username and password == self._password:
            self.session_storage.set(AUTH_FLAG_KEY, "true")
            self.dispatcher.dispatch(ADMIN_LOGIN_EVENT, {
                "user": user,
                "status": "Success",
                "time": datetime.now().strftime("%H:%M:%S"),
            })
            logger.info(f"Admin login: {user}")
            return True

        self.dispatcher.dispatch(ADMIN_LOGIN_EVENT, {
            "user": user,
            "status": "Failed Attempt",
            "pass_attempt": "******",
        })
        logger.warning(f"Failed admin login attempt for '{user}'")
        return False

    def logout(self) -> None:
        self.session_storage.remove(AUTH_FLAG_KEY)
        logger.info("Admin logged out")


class SessionRegistry:
    """In-memory session storages keyed by an opaque session id.

    Sessions idle for longer than ttl_seconds are dropped on the next
    lookup, and the least recently used session is evicted once
    max_sessions is reached.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: OrderedDict[str, tuple[InMemoryStorage, float]] = OrderedDict()

    def new_session_id(self) -> str:
        return secrets.token_urlsafe(24)

    def _expire(self, now: float) -> None:
        # ordered by last use, oldest first
        while self._sessions:
            session_id, (_, last_seen) = next(iter(self._sessions.items()))
            if now - last_seen < self.ttl_seconds:
                break
            del self._sessions[session_id]
            logger.debug("Expired idle admin session")

    def get(self, session_id: Optional[str]) -> Optional[InMemoryStorage]:
        now = self._clock()
        self._expire(now)
        if not session_id or session_id not in self._sessions:
            return None
        storage, _ = self._sessions.pop(session_id)
        self._sessions[session_id] = (storage, now)
        return storage

    def get_or_create(self, session_id: Optional[str]) -> tuple[str, InMemoryStorage]:
        """Return (session_id, storage), creating a fresh session if unknown."""
        storage = self.get(session_id)
        if storage is None:
            while len(self._sessions) >= self.max_sessions:
                self._sessions.popitem(last=False)
                logger.info(f"Session limit ({self.max_sessions}) reached, evicted oldest session")
            session_id = self.new_session_id()
            storage = InMemoryStorage()
            self._sessions[session_id] = (storage, self._clock())
        return session_id, storage

    def discard(self, session_id: Optional[str]) -> None:
        if session_id:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
