"""
Sink Factory.

Builds the configured sink for a SinkConfig section, wiring shared
clients in.
"""

import logging
from typing import Any, Optional

from ...config.provider import SinkConfig
from .sinks import (
    LogNotificationSink,
    NotificationSink,
    RedisNotificationSink,
    WebhookNotificationSink,
)

logger = logging.getLogger(__name__)


class SinkFactory:
    """Composition root for notification sinks."""

    @staticmethod
    def build(sink_config: SinkConfig, redis_client: Optional[Any] = None) -> NotificationSink:
        """
        Build a sink.

        Args:
            sink_config: Sink section from the config provider
            redis_client: Async Redis client, required for redis sinks

        Returns:
            NotificationSink implementation

        Raises:
            ValueError: If the configuration cannot produce a sink
        """
        kind = sink_config.kind

        if kind == "webhook":
            if not sink_config.webhook_url:
                raise ValueError(f"Sink '{sink_config.name}' is 'webhook' but no webhook URL is set")
            logger.info(f"Sink '{sink_config.name}' delivers to webhook")
            return WebhookNotificationSink(sink_config.webhook_url)

        if kind == "redis":
            if redis_client is None:
                raise ValueError(f"Sink '{sink_config.name}' is 'redis' but no Redis client is available")
            logger.info(f"Sink '{sink_config.name}' publishes to redis channel {sink_config.channel}")
            return RedisNotificationSink(redis_client, sink_config.channel)

        if kind == "log":
            logger.info(f"Sink '{sink_config.name}' writes to the log only")
            return LogNotificationSink(sink_config.name)

        raise ValueError(f"Unknown sink kind '{kind}' for sink '{sink_config.name}'")
