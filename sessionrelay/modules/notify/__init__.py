"""
Notify Module - Black Box Interface

Purpose: Deliver rendered text to the outside world
Interface: NotificationSink, Publisher, SinkFactory
Hidden: Transport (log, webhook, redis pub/sub), timeouts, failure logging

Sinks raise NotificationError; the Publisher turns every failure into a
logged False so callers never have to handle delivery errors.
"""

from .factory import SinkFactory
from .publisher import Publisher
from .sinks import (
    LogNotificationSink,
    NotificationSink,
    RedisNotificationSink,
    WebhookNotificationSink,
)

__all__ = [
    "NotificationSink",
    "LogNotificationSink",
    "WebhookNotificationSink",
    "RedisNotificationSink",
    "Publisher",
    "SinkFactory",
]
