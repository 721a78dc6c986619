"""
Storage Module - Black Box Interface

Purpose: Own the Redis connection used by pub/sub sinks
Interface: connect(), disconnect(), ping()
Hidden: Redis specifics, connection pooling

Session state itself is never persisted; Redis only carries published text.
"""

from typing import Optional

import redis.asyncio as redis

from ...config.provider import RedisConfig


class StorageModule:
    """Black box Redis connection holder."""

    def __init__(self, redis_config: RedisConfig):
        """Initialize storage with a Redis configuration section."""
        self.config = redis_config
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> redis.Redis:
        """Get the Redis client, creating it on first use."""
        if not self._client:
            # Password passed separately to avoid URL encoding issues
            self._client = redis.from_url(
                self.config.url,
                password=self.config.password,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def ping(self) -> bool:
        """Check the connection."""
        if not self._client:
            return False
        try:
            return bool(await self._client.ping())
        except redis.RedisError:
            return False

    async def disconnect(self):
        """Close the Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule"]
