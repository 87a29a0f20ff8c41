"""
Notification Sink Factory

Returns the Mock or Discord notification sink based on ENV_MODE.

Author: Your Name
Version: 1.0.0
"""

import logging
from functools import lru_cache

from quannem.core.config import get_settings
from quannem.services.notifications.base import (
    BaseNotificationSink,
    NotificationResult,
    build_embed_payload,
)
from quannem.services.notifications.discord import DiscordWebhookSink
from quannem.services.notifications.dispatcher import NotificationDispatcher
from quannem.services.notifications.mock import MockNotificationSink

logger = logging.getLogger(__name__)


@lru_cache()
def get_notification_sink() -> BaseNotificationSink:
    """Get the configured notification sink."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Notification Sink: Using MockNotificationSink (development mode)")
        return MockNotificationSink(
            failure_rate=settings.mock_notification_failure_rate,
            footer=settings.notification_footer,
        )
    else:
        logger.info(f"Notification Sink: Using DiscordWebhookSink ({settings.env_mode.value} mode)")
        return DiscordWebhookSink(
            webhook_url=settings.discord_webhook_url,
            footer=settings.notification_footer,
            timeout=settings.webhook_timeout_seconds,
        )


def reset_notification_sink() -> None:
    """Clear the cached sink instance."""
    get_notification_sink.cache_clear()


__all__ = [
    "get_notification_sink",
    "reset_notification_sink",
    "build_embed_payload",
    "BaseNotificationSink",
    "NotificationResult",
    "NotificationDispatcher",
    "MockNotificationSink",
    "DiscordWebhookSink",
]
