import asyncio
import logging
from typing import List, Optional

from ...exceptions import ContainerControlError, UnknownInstanceError
from ..aggregator import Aggregator
from ..containers import ContainerControl, ContainerInfo
from ..render import VERBOSE_POLICY, RenderPolicy, render

logger = logging.getLogger(__name__)


class CommandModule:
    def __init__(
        self,
        aggregator: Aggregator,
        control: ContainerControl,
        instance_names: Optional[List[str]] = None,
        image: Optional[str] = None,
        stop_grace_seconds: int = 30,
        policy: RenderPolicy = VERBOSE_POLICY,
    ):
        """
        Initialize command module.

        Args:
            aggregator: Source of the current session state
            control: Container runtime
            instance_names: Container names operators may act on (empty = any)
            image: Headless image pulled by update_image()
            stop_grace_seconds: Grace period passed to stop
            policy: Render policy for the sessions listing
        """
        self.aggregator = aggregator
        self.control = control
        self.instance_names = list(instance_names or [])
        self.image = image
        self.stop_grace_seconds = stop_grace_seconds
        self.policy = policy

    async def list_sessions(self) -> str:
        """Verbose listing of every known session, grouped by source."""
        return render(await self.aggregator.snapshot(), self.policy)

    async def list_containers(self) -> List[ContainerInfo]:
        """
        List managed containers.

        Only containers carrying a configured instance name are returned,
        unless no instance names are configured.
        """
        containers = await asyncio.to_thread(self.control.list)
        if not self.instance_names:
            return containers
        return [c for c in containers if any(c.matches(name) for name in self.instance_names)]

    async def restart(self, instance: Optional[str] = None) -> List[str]:
        """
        Restart one instance, or every configured instance when none is named.

        Returns:
            Names of the restarted instances

        Raises:
            UnknownInstanceError: If the named instance is not configured or not found
        """
        targets = [instance] if instance else list(self.instance_names)
        if not targets:
            raise UnknownInstanceError("<all>")

        restarted = []
        for name in targets:
            container = await self._resolve(name)
            await asyncio.to_thread(self.control.restart, container.id)
            logger.info(f"Restarted instance {name} ({container.id[:12]})")
            restarted.append(name)
        return restarted

    async def stop(self, instance: str) -> None:
        container = await self._resolve(instance)
        await asyncio.to_thread(self.control.stop, container.id, self.stop_grace_seconds)
        logger.info(f"Stopped instance {instance}")

    async def start(self, instance: str) -> None:
        container = await self._resolve(instance)
        await asyncio.to_thread(self.control.start, container.id)
        logger.info(f"Started instance {instance}")

    async def update_image(self) -> str:
        """
        Pull the headless image.

        Running instances keep the old image until they are restarted.
        """
        if not self.image:
            raise ContainerControlError("No headless image configured (HEADLESS_IMAGE)")
        output = await asyncio.to_thread(self.control.pull, self.image)
        logger.info(f"Pulled {self.image}")
        return output

    async def _resolve(self, instance: str) -> ContainerInfo:
        if self.instance_names and instance not in self.instance_names:
            raise UnknownInstanceError(instance)

        for container in await asyncio.to_thread(self.control.list):
            if container.matches(instance):
                return container
        raise UnknownInstanceError(instance)
