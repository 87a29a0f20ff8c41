"""
Fire-and-Forget Notification Dispatch

Runs sink sends as background asyncio tasks so that callers never wait
on the webhook. Failures are logged and dropped.
"""

import asyncio
import logging
from typing import Any

from quannem.services.notifications.base import BaseNotificationSink

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Schedules best-effort sends on a notification sink."""

    def __init__(self, sink: BaseNotificationSink):
        self.sink = sink
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, resource: str, data: dict[str, Any]) -> asyncio.Task:
        """Schedule a send and return immediately. Needs a running loop."""
        task = asyncio.create_task(self._deliver(resource, dict(data)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, resource: str, data: dict[str, Any]) -> None:
        try:
            result = await self.sink.send(resource, data)
        except Exception:
            logger.exception(f"Notification for {resource} raised")
            return

        if not result.success:
            logger.warning(
                f"Notification for {resource} not delivered via {result.provider}: "
                f"{result.error_message}"
            )

    async def drain(self) -> None:
        """Wait for every in-flight send."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
