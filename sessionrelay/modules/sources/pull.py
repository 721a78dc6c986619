"""
Pull source adapter.

Owns one authenticated connection to the cloud session service and turns
its callbacks into incremental aggregator updates for sessions hosted by
the logged-in account.
"""

import asyncio
import logging
from typing import List, Mapping, Optional

import httpx

from ...exceptions import SourceLoginError
from ..aggregator import Aggregator
from ..notify import Publisher
from ..session import SessionRecord
from .base import SourceAdapter
from .interfaces import ContactRequest, EventSource

logger = logging.getLogger(__name__)


class PullSourceAdapter(SourceAdapter):
    """Adapter for one polled cloud account."""

    kind = "pull"

    def __init__(
        self,
        source_id: str,
        event_source: EventSource,
        credential: str,
        aggregator: Aggregator,
        notifier: Optional[Publisher] = None,
        poll_interval: float = 1.0,
    ):
        """
        Initialize pull adapter.

        Args:
            source_id: Source identifier (the account username)
            event_source: Cloud connection producing callbacks
            credential: Account password
            aggregator: Destination for session updates
            notifier: Publisher for contact request notifications
            poll_interval: Seconds between update() pumps
        """
        super().__init__(aggregator)
        self.source_id = source_id
        self.event_source = event_source
        self._credential = credential
        self.notifier = notifier
        self.poll_interval = poll_interval
        self.identity: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def source_ids(self) -> List[str]:
        return [self.source_id]

    @property
    def logged_in(self) -> bool:
        return self.identity is not None

    async def start(self) -> None:
        """
        Log in, subscribe to callbacks and start pumping the connection.

        Raises:
            SourceLoginError: If the account cannot log in. There is no retry.
        """
        await self.login()
        self._task = asyncio.create_task(self._poll_loop())

    async def login(self) -> None:
        try:
            result = await self.event_source.login(self.source_id, self._credential)
        except httpx.HTTPError as e:
            raise SourceLoginError(self.source_id, f"transport error: {e}") from e
        except Exception as e:
            raise SourceLoginError(self.source_id, f"login failed: {e}") from e

        if result.two_factor_required:
            raise SourceLoginError(self.source_id, "two-factor authentication must be disabled")
        if not result.ok or not result.user_id:
            raise SourceLoginError(self.source_id, result.error or "login rejected")

        self.identity = result.user_id
        self.event_source.subscribe(self)
        logger.info(f"Login successful for {self.source_id} ({self.identity})")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        try:
            if self.logged_in:
                await self.event_source.logout()
        except Exception as e:
            logger.warning(f"Logout failed for {self.source_id}: {e}")
        finally:
            self.identity = None
            await self.event_source.close()

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.event_source.update()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Update tick failed for {self.source_id}: {e}")
            await asyncio.sleep(self.poll_interval)

    # Session callbacks

    def _owns(self, record: SessionRecord) -> bool:
        return self.identity is not None and record.owner_id == self.identity

    async def on_added(self, session_key: str, record: SessionRecord) -> None:
        if not self._owns(record):
            return
        await self.aggregator.apply_upsert(self.source_id, session_key, record)

    async def on_updated(self, session_key: str, record: SessionRecord) -> None:
        if not self._owns(record):
            return

        # Polling repeats volatile fields; only a changed active count matters here
        existing = await self.aggregator.get_record(self.source_id, session_key)
        if existing is not None and existing.active_user_count == record.active_user_count:
            return

        await self.aggregator.apply_upsert(self.source_id, session_key, record)

    async def on_removed(self, session_key: str, record: SessionRecord) -> None:
        if not self._owns(record):
            return
        await self.aggregator.apply_remove(self.source_id, session_key)

    async def on_contact_merge(self, contact_id: str, records: Mapping[str, SessionRecord]) -> None:
        """Sessions decoded from the account's own contact status."""
        if contact_id != self.identity:
            return
        for session_key, record in records.items():
            await self.on_updated(session_key, record)

    async def on_new_contact_request(self, request: ContactRequest) -> None:
        logger.info(f"{self.source_id} received a contact request from {request.username}")
        if self.notifier is not None:
            await self.notifier.send(f"New contact request from {request.username}")

    def describe(self) -> dict:
        info = super().describe()
        info.update({"logged_in": self.logged_in, "identity": self.identity})
        return info
