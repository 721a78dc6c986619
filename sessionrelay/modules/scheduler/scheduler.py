import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..notify import Publisher
from ..render import TERSE_POLICY, RenderPolicy, render
from ..session import CanonicalState

logger = logging.getLogger(__name__)

SnapshotProvider = Callable[[], Awaitable[CanonicalState]]


class SchedulerStatus(str, Enum):
    """State of the debounce scheduler."""

    IDLE = "idle"
    PENDING = "pending"


class DebounceScheduler:
    def __init__(
        self,
        snapshot: SnapshotProvider,
        publisher: Publisher,
        policy: RenderPolicy = TERSE_POLICY,
        delay: float = 5.0,
    ):
        """
        Initialize debounce scheduler.

        Args:
            snapshot: Coroutine function returning the current canonical state
            publisher: Destination for the rendered status
            policy: Render policy applied on fire
            delay: Window length in seconds, measured from the first request
        """
        self._snapshot = snapshot
        self.publisher = publisher
        self.policy = policy
        self.delay = delay
        self._task: Optional[asyncio.Task] = None
        self._fire_at: Optional[float] = None
        self._sampled = False
        self._dirty = False
        self.publish_count = 0

    @property
    def status(self) -> SchedulerStatus:
        return SchedulerStatus.PENDING if self._task is not None else SchedulerStatus.IDLE

    @property
    def fire_at(self) -> Optional[float]:
        """Event loop time at which the pending publish fires, if armed."""
        return self._fire_at

    @property
    def task(self) -> Optional[asyncio.Task]:
        """Pending fire task, if armed."""
        return self._task

    def request(self) -> bool:
        """
        Ask for a publish.

        Must be called from a running event loop.

        Returns:
            True if this call armed a new window, False if one was already pending

        Logic:
        1. Idle: arm a one-shot task firing after `delay`
        2. Pending, snapshot not yet read: do nothing (the window is not extended)
        3. Pending, snapshot already read: mark dirty so a fresh window is armed
           once the in-flight send finishes
        """
        if self._task is not None:
            if self._sampled:
                self._dirty = True
            return False

        loop = asyncio.get_running_loop()
        self._fire_at = loop.time() + self.delay
        self._task = loop.create_task(self._fire())
        logger.debug(f"Status publish scheduled in {self.delay}s")
        return True

    def cancel(self) -> None:
        """Drop a pending publish without sending anything."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
            self._fire_at = None
            self._sampled = False
            self._dirty = False

    async def _fire(self) -> None:
        try:
            await asyncio.sleep(self.delay)
            state = await self._snapshot()
            self._sampled = True
            status = render(state, self.policy)
            logger.info(f"Updating status: {status}")
            if await self.publisher.send(status):
                self.publish_count += 1
        except asyncio.CancelledError:
            self._dirty = False
            raise
        except Exception as e:
            logger.error(f"Status publish failed: {e}")
        finally:
            if self._task is asyncio.current_task():
                rearm = self._dirty
                self._task = None
                self._fire_at = None
                self._sampled = False
                self._dirty = False
                if rearm:
                    logger.debug("State changed during publish; scheduling another")
                    self.request()
