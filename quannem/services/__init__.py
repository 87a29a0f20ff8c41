"""
                        Services Module

Contains the data layer behind the website, wired from configuration.
Swappable parts (storage, notification sink) have Mock/Memory and Real
implementations selected by ENV_MODE and STORAGE_BACKEND.

Services:
    - storage: key-value storage port (file / memory)
    - baseline: static seed data loader
    - notifications: Discord webhook sink and fire-and-forget dispatcher
    - data_store: merged baseline + overlay reads, overlay writes
    - admin: demo admin session
    - export: JSON / Excel downloads
"""

from functools import lru_cache

from quannem.core.config import get_settings
from quannem.services.admin import SessionRegistry
from quannem.services.baseline import BaselineLoader
from quannem.services.data_store import LocalDataStore
from quannem.services.notifications import NotificationDispatcher, get_notification_sink
from quannem.services.storage import get_storage


@lru_cache()
def get_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(get_notification_sink())


@lru_cache()
def get_baseline_loader() -> BaselineLoader:
    settings = get_settings()
    return BaselineLoader(
        static_root=settings.static_root,
        base_url=settings.baseline_base_url,
        timeout=settings.baseline_timeout_seconds,
    )


@lru_cache()
def get_data_store() -> LocalDataStore:
    """Get the configured data store."""
    settings = get_settings()
    return LocalDataStore(
        storage=get_storage(),
        baseline=get_baseline_loader(),
        dispatcher=get_dispatcher(),
        write_delay=settings.write_delay_seconds,
        key_prefix=settings.storage_key_prefix,
    )


@lru_cache()
def get_session_registry() -> SessionRegistry:
    settings = get_settings()
    return SessionRegistry(
        ttl_seconds=settings.session_ttl_seconds,
        max_sessions=settings.max_sessions,
    )


__all__ = [
    "get_dispatcher",
    "get_baseline_loader",
    "get_data_store",
    "get_session_registry",
    "LocalDataStore",
]
