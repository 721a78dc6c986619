"""
Sources Module - Black Box Interface

Purpose: Normalize external producers into aggregator updates
Interface: SourceAdapter, PushSourceAdapter, PullSourceAdapter, SourceFactory
Hidden: Snapshot decoding, ownership filtering, cloud polling and diffing

Push sources replace their whole slice of state per request; pull sources
patch it session by session.
"""

from .base import SourceAdapter
from .cloud import HttpCloudEventSource
from .factory import SourceFactory
from .interfaces import ContactRequest, EventSource, LoginResult, SessionEventHandler
from .pull import PullSourceAdapter
from .push import PushSourceAdapter, is_valid_source_id, parse_snapshot

__all__ = [
    "SourceAdapter",
    "PushSourceAdapter",
    "PullSourceAdapter",
    "EventSource",
    "SessionEventHandler",
    "LoginResult",
    "ContactRequest",
    "HttpCloudEventSource",
    "SourceFactory",
    "is_valid_source_id",
    "parse_snapshot",
]
