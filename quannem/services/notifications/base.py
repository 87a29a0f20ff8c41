"""
Notification Sink Abstract Base Class

Defines the interface for announcing new records (and admin logins)
to an external channel, plus the Discord embed payload every
implementation describes.

Supports both Mock (development) and Discord (production) implementations.

Author: Your Name
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from quannem.services.identifiers import utc_timestamp

REVIEW_COLOR = 0xF1C40F  # gold
DEFAULT_COLOR = 0x2ECC71  # green


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def build_embed_payload(
    resource: str,
    data: dict[str, Any],
    footer: str,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Build the webhook body announcing a new entry of resource.

    One inline field per key of data; falsy values are shown as "N/A".

    Args:
        resource: Resource name ("reviews", "reservations", "admin_login", ...)
        data: The record or event details
        footer: Footer text
        now: Embed timestamp (defaults to current UTC time)

    Returns:
        JSON-serializable webhook payload
    """
    return {
        "embeds": [{
            "title": f"🔔 New {_upper_first(resource)}",
            "color": REVIEW_COLOR if resource == "reviews" else DEFAULT_COLOR,
            "description": f"A new {resource} has been submitted!",
            "fields": [
                {
                    "name": _upper_first(str(key)),
                    "value": str(value or "N/A"),
                    "inline": True,
                }
                for key, value in data.items()
            ],
            "footer": {
                "text": footer,
            },
            "timestamp": utc_timestamp(now),
        }]
    }


class BaseNotificationSink(ABC):
    """Abstract base class for notification sinks."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send(self, resource: str, data: dict[str, Any]) -> NotificationResult:
        """Announce a new entry. Must not raise on delivery failure."""
        pass

    async def aclose(self) -> None:
        """Release network resources, if any."""
        return None
