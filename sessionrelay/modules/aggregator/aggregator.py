import asyncio
import logging
from typing import Callable, Dict, List, Mapping, Optional

from ..session import CanonicalState, SessionRecord, SourceMapping

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], object]


class Aggregator:
    def __init__(self):
        """
        Initialize an empty aggregator.

        State lives for the process lifetime. Every public operation runs
        under a single asyncio.Lock, so producers (push requests, pull
        adapter callbacks) and the debounce scheduler never observe a
        half-applied update.
        """
        self._state: CanonicalState = {}
        self._lock = asyncio.Lock()
        self._listeners: List[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        """
        Register a callable invoked after every accepted change.

        The debounce scheduler registers its request() here.
        """
        self._listeners.append(listener)

    async def apply_full_replace(self, source_id: str, mapping: Mapping[str, SessionRecord]) -> bool:
        """
        Replace a source's whole slice of state.

        Args:
            source_id: Source identifier
            mapping: Complete session_key -> SessionRecord snapshot

        Returns:
            True if the snapshot differed from the stored one

        Logic:
        1. A source seen for the first time is always a change
        2. A different number of sessions is a change
        3. Otherwise any new key or structurally different record is a change
        4. Unchanged snapshots leave state and listeners untouched
        """
        new_mapping: SourceMapping = dict(mapping)

        async with self._lock:
            old = self._state.get(source_id)
            changed = old is None or _differs(old, new_mapping)
            if changed:
                self._state[source_id] = new_mapping

        if changed:
            logger.debug(f"Source {source_id} replaced with {len(new_mapping)} sessions")
            self._notify()
        return changed

    async def apply_upsert(self, source_id: str, key: str, record: SessionRecord) -> None:
        """
        Insert or overwrite one session and always signal a change.

        Incremental updates are filtered upstream by the pull adapter,
        so no equality check happens here.
        """
        async with self._lock:
            self._state.setdefault(source_id, {})[key] = record

        self._notify()

    async def apply_remove(self, source_id: str, key: str) -> bool:
        """
        Remove one session and always signal a change.

        Returns:
            True if the session was present
        """
        async with self._lock:
            existed = self._state.get(source_id, {}).pop(key, None) is not None

        self._notify()
        return existed

    async def snapshot(self) -> CanonicalState:
        """Return a copy of the canonical state safe to read without the lock."""
        async with self._lock:
            return {source_id: dict(sessions) for source_id, sessions in self._state.items()}

    async def get_record(self, source_id: str, key: str) -> Optional[SessionRecord]:
        """Get the stored record for one session, if any."""
        async with self._lock:
            return self._state.get(source_id, {}).get(key)

    async def source_ids(self) -> List[str]:
        """Get all known source identifiers, sorted."""
        async with self._lock:
            return sorted(self._state)

    def _notify(self) -> None:
        for listener in self._listeners:
            try:
                listener()
            except Exception as e:
                logger.error(f"Change listener failed: {e}")


def _differs(old: Dict[str, SessionRecord], new: Dict[str, SessionRecord]) -> bool:
    if len(old) != len(new):
        return True
    for key, record in new.items():
        existing = old.get(key)
        if existing is None or existing != record:
            return True
    return False
