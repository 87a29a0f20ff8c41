"""
Discord Webhook Notification Sink

Production implementation: posts an embed to a Discord webhook with
httpx. Delivery is best-effort and at-most-once; there is no retry.

Author: Your Name
Version: 1.0.0
"""

import logging
from typing import Any, Optional

import httpx

from quannem.services.notifications.base import (
    BaseNotificationSink,
    NotificationResult,
    build_embed_payload,
)

logger = logging.getLogger(__name__)


class DiscordWebhookSink(BaseNotificationSink):
    """Notification sink posting to a Discord webhook."""

    def __init__(
        self,
        webhook_url: str,
        footer: str = "Quán Nem System",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not webhook_url:
            raise ValueError(
                "DISCORD_WEBHOOK_URL is required outside development mode. "
                "Set it in your .env file or environment variables."
            )
        self.webhook_url = webhook_url
        self.footer = footer
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        logger.info("DiscordWebhookSink initialized")

    @property
    def provider_name(self) -> str:
        return "discord"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(self, resource: str, data: dict[str, Any]) -> NotificationResult:
        """POST the embed for a new entry."""
        payload = build_embed_payload(resource, data, self.footer)

        try:
            response = await self._get_client().post(self.webhook_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Discord Webhook failed: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                provider="discord"
            )

        if not response.is_success:
            logger.error(f"Discord Webhook failed: HTTP {response.status_code}")
            return NotificationResult(
                success=False,
                error_message=f"HTTP {response.status_code}",
                provider="discord"
            )

        logger.info(f"Sent {resource} notification to Discord")
        return NotificationResult(
            success=True,
            message_id=response.headers.get("X-Message-Id"),
            provider="discord"
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
