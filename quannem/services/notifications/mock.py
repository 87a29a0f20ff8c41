"""
Mock Notification Sink

Simulates the Discord webhook for development and tests.
No messages are sent - payloads are logged and kept in ``sent``.

Author: Your Name
Version: 1.0.0
"""

import asyncio
import logging
import random
import uuid
from typing import Any

from quannem.services.notifications.base import (
    BaseNotificationSink,
    NotificationResult,
    build_embed_payload,
)

logger = logging.getLogger(__name__)


class MockNotificationSink(BaseNotificationSink):
    """Recording notification sink for development."""

    def __init__(
        self,
        failure_rate: float = 0.0,
        footer: str = "Quán Nem System",
        latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.footer = footer
        self.latency = latency
        self.sent: list[dict[str, Any]] = []
        logger.info(f"MockNotificationSink initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def send(self, resource: str, data: dict[str, Any]) -> NotificationResult:
        """Simulate posting to the webhook."""
        if self.latency:
            await asyncio.sleep(self.latency)

        if self._should_fail():
            logger.warning(f"Mock notification failed (simulated) for {resource}")
            return NotificationResult(
                success=False,
                error_message="Simulated webhook failure",
                provider="mock"
            )

        payload = build_embed_payload(resource, data, self.footer)
        self.sent.append({"resource": resource, "data": dict(data), "payload": payload})

        message_id = f"mock_{uuid.uuid4().hex[:12]}"
        logger.info(f"Mock notification for {resource} (ID: {message_id})")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )
