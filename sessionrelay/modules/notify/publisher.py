import asyncio
import logging

from .sinks import NotificationSink

logger = logging.getLogger(__name__)


class Publisher:
    def __init__(self, sink: NotificationSink, timeout: float = 10.0, name: str = "status"):
        """
        Initialize publisher.

        Args:
            sink: Destination for rendered text
            timeout: Upper bound in seconds for a single send
            name: Label used in log messages
        """
        self.sink = sink
        self.timeout = timeout
        self.name = name

    async def send(self, text: str) -> bool:
        """
        Send text to the sink.

        Failures are logged and swallowed; there is no retry.

        Returns:
            True if the sink accepted the text
        """
        try:
            await asyncio.wait_for(self.sink.send(text), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Publishing {self.name} timed out after {self.timeout}s")
            return False
        except Exception as e:
            logger.error(f"Publishing {self.name} failed: {e}")
            return False
        return True

    async def close(self) -> None:
        await self.sink.close()
