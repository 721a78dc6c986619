"""
Push source adapter.

Named external clients push a complete session snapshot at arbitrary times.
Each accepted request fully replaces that client's slice of state.
"""

import logging
import re
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from ..aggregator import Aggregator
from ..api.models import SessionPayload
from ..session import SessionRecord
from .base import SourceAdapter

logger = logging.getLogger(__name__)

SOURCE_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,99}$")

_snapshot_adapter = TypeAdapter(Optional[Dict[str, SessionPayload]])


def is_valid_source_id(source_id: Optional[str]) -> bool:
    """Check a source identifier taken from the request path."""
    return bool(source_id) and SOURCE_ID_PATTERN.match(source_id) is not None


def parse_snapshot(body: bytes) -> Optional[Dict[str, SessionRecord]]:
    """
    Decode a snapshot body.

    Args:
        body: Raw request body

    Returns:
        session_key -> SessionRecord mapping (empty for an empty or null
        body), or None if the body cannot be decoded
    """
    if not body or not body.strip():
        return {}

    try:
        payload = _snapshot_adapter.validate_json(body)
    except ValidationError as e:
        logger.warning(f"Rejected snapshot body: {e.error_count()} validation errors")
        return None

    if payload is None:
        return {}
    return {key: entry.to_record(key) for key, entry in payload.items()}


class PushSourceAdapter(SourceAdapter):
    """Adapter behind the ingestion endpoint."""

    kind = "push"

    def __init__(self, aggregator: Aggregator):
        super().__init__(aggregator)
        self._seen: Dict[str, None] = {}
        self.accepted = 0
        self.rejected = 0

    @property
    def source_ids(self) -> List[str]:
        return sorted(self._seen)

    async def ingest(self, source_id: Optional[str], body: bytes) -> bool:
        """
        Handle one inbound snapshot.

        Args:
            source_id: Source identifier from the request path
            body: Raw request body

        Returns:
            True if the snapshot was handed to the aggregator

        Logic:
        1. Reject empty or malformed source identifiers
        2. Decode the body; undecodable bodies are rejected
        3. Hand every decoded snapshot to the aggregator, which decides
           whether anything changed
        """
        if not is_valid_source_id(source_id):
            logger.warning(f"Rejected snapshot with invalid source id: {source_id!r}")
            self.rejected += 1
            return False

        logger.debug(f"Received session data from {source_id}: {body[:500]!r}")
        sessions = parse_snapshot(body)
        if sessions is None:
            self.rejected += 1
            return False

        await self.aggregator.apply_full_replace(source_id, sessions)
        self._seen[source_id] = None
        self.accepted += 1
        return True

    def describe(self) -> dict:
        info = super().describe()
        info.update({"accepted": self.accepted, "rejected": self.rejected})
        return info

