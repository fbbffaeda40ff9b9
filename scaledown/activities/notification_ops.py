"""Slack notifications for scale-down failures."""

import logging
from datetime import datetime
from typing import Optional

import httpx

from ..models.types import NotificationSeverity

logger = logging.getLogger(__name__)

# Map severity to Slack colors
COLOR_MAP = {
    NotificationSeverity.INFO: "#36a64f",      # Green
    NotificationSeverity.WARNING: "#ff9900",   # Orange
    NotificationSeverity.ERROR: "#ff0000",     # Red
    NotificationSeverity.CRITICAL: "#990000",  # Dark Red
}

EMOJI_MAP = {
    NotificationSeverity.INFO: ":information_source:",
    NotificationSeverity.WARNING: ":warning:",
    NotificationSeverity.ERROR: ":x:",
    NotificationSeverity.CRITICAL: ":rotating_light:",
}


def build_slack_payload(message: str, severity: NotificationSeverity) -> dict:
    """Build a Slack attachment payload for a message."""
    return {
        "attachments": [
            {
                "color": COLOR_MAP.get(severity, "#808080"),
                "title": f"{EMOJI_MAP.get(severity, ':bell:')} Event Hubs Scale-Down",
                "text": message,
                "footer": "Event Hubs Throughput Scale-Down",
                "ts": int(datetime.now().timestamp()),
            }
        ]
    }


async def post_slack_message(
    webhook_url: str,
    message: str,
    severity: NotificationSeverity,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Post a message to a Slack webhook.

    Raises:
        httpx.HTTPError: If the Slack request fails
    """
    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.post(
            webhook_url,
            json=build_slack_payload(message, severity),
            timeout=10.0,
        )
        response.raise_for_status()
