"""Notification sink implementations."""

import json
import logging
from datetime import UTC, datetime
from typing import Optional, Protocol

import httpx
import redis.asyncio as redis

from ...exceptions import NotificationError

logger = logging.getLogger(__name__)

# Discord rejects message content longer than this
WEBHOOK_CONTENT_LIMIT = 2000


class NotificationSink(Protocol):
    """Protocol for anything that can receive a text notification."""

    async def send(self, text: str) -> None:
        """
        Deliver text.

        Raises:
            NotificationError: If delivery failed
        """
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...


class LogNotificationSink:
    """Sink that only writes to the log. Used when nothing else is configured."""

    def __init__(self, name: str = "status"):
        self.name = name

    async def send(self, text: str) -> None:
        logger.info(f"[{self.name}] {text}")

    async def close(self) -> None:
        return None


class WebhookNotificationSink:
    """Posts text to a Discord-compatible webhook."""

    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        """
        Initialize webhook sink.

        Args:
            url: Webhook URL
            client: Optional shared httpx client (created if omitted)
            timeout: Per-request timeout in seconds
        """
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, text: str) -> None:
        # Empty content is rejected by the webhook API
        content = text[:WEBHOOK_CONTENT_LIMIT] or "\u200b"
        payload = {"content": content, "allowed_mentions": {"parse": []}}

        try:
            response = await self._client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise NotificationError(f"Webhook request failed: {e}") from e

        if response.status_code >= 400:
            raise NotificationError(
                f"Webhook rejected message: {response.status_code} {response.text[:200]}"
            )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class RedisNotificationSink:
    """Publishes text on a Redis pub/sub channel for other services to pick up."""

    def __init__(self, redis_client, channel: str):
        """
        Initialize redis sink.

        Args:
            redis_client: Async Redis client
            channel: Pub/sub channel name
        """
        self.redis = redis_client
        self.channel = channel

    async def send(self, text: str) -> None:
        message = {"text": text, "timestamp": datetime.now(UTC).isoformat()}
        try:
            await self.redis.publish(self.channel, json.dumps(message))
        except redis.RedisError as e:
            raise NotificationError(f"Redis publish to {self.channel} failed: {e}") from e

    async def close(self) -> None:
        # The client is shared and closed by its owner
        return None
