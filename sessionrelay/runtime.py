"""
Relay runtime - the composition root.

Builds every module from configuration and wires the data flow:

    source adapter -> aggregator -> scheduler -> renderer -> publisher -> sink

The runtime object is passed explicitly to whoever needs it (the FastAPI
app keeps it on app.state); there are no module-level singletons.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config.provider import ConfigProvider, EnvConfigProvider
from .modules.aggregator import Aggregator
from .modules.commands import CommandModule
from .modules.config import ConfigModule, get_config
from .modules.containers import DockerCliControl
from .modules.notify import Publisher, SinkFactory
from .modules.render import TERSE_POLICY, VERBOSE_POLICY
from .modules.scheduler import DebounceScheduler
from .modules.sources import PullSourceAdapter, PushSourceAdapter, SourceAdapter, SourceFactory
from .modules.storage import StorageModule

logger = logging.getLogger(__name__)


@dataclass
class RelayRuntime:
    """All live components of one relay process."""

    aggregator: Aggregator
    scheduler: DebounceScheduler
    status_publisher: Publisher
    notifier: Publisher
    push_adapter: PushSourceAdapter
    commands: CommandModule
    pull_adapters: List[PullSourceAdapter] = field(default_factory=list)
    storage: Optional[StorageModule] = None

    @property
    def adapters(self) -> List[SourceAdapter]:
        return [self.push_adapter, *self.pull_adapters]

    async def start(self) -> None:
        """
        Start all pull sources.

        Raises:
            SourceLoginError: If any account fails to log in (fatal)
        """
        for adapter in self.pull_adapters:
            await adapter.start()
        logger.info(f"Relay started with {len(self.pull_adapters)} cloud source(s)")

    async def stop(self) -> None:
        """Cancel pending publishes, stop sources and close transports."""
        self.scheduler.cancel()
        for adapter in self.pull_adapters:
            await adapter.stop()
        await self.status_publisher.close()
        await self.notifier.close()
        if self.storage:
            await self.storage.disconnect()
        logger.info("Relay stopped")


async def build_runtime(
    config: Optional[ConfigModule] = None,
    config_provider: Optional[ConfigProvider] = None,
) -> RelayRuntime:
    """
    Build a runtime from configuration.

    Args:
        config: Scalar settings (defaults to the environment singleton)
        config_provider: Structured settings (defaults to environment variables)

    Returns:
        Wired but not yet started RelayRuntime
    """
    config = config or get_config()
    provider = config_provider or EnvConfigProvider()

    status_sink_config = provider.get_status_sink_config()
    notify_sink_config = provider.get_notify_sink_config()

    storage = None
    redis_client = None
    if "redis" in (status_sink_config.kind, notify_sink_config.kind):
        storage = StorageModule(provider.get_redis_config())
        redis_client = await storage.connect()

    timeout = config.get("publish_timeout")
    status_publisher = Publisher(SinkFactory.build(status_sink_config, redis_client), timeout, "status")
    notifier = Publisher(SinkFactory.build(notify_sink_config, redis_client), timeout, "notification")

    render_config = provider.get_render_config()
    terse = TERSE_POLICY.configured(render_config.denylist, render_config.strip_tag)
    verbose = VERBOSE_POLICY.configured(render_config.denylist, render_config.strip_tag)

    aggregator = Aggregator()
    scheduler = DebounceScheduler(
        aggregator.snapshot,
        status_publisher,
        policy=terse,
        delay=config.get("debounce_seconds"),
    )
    aggregator.add_listener(scheduler.request)

    container_config = provider.get_container_config()
    commands = CommandModule(
        aggregator,
        DockerCliControl(timeout=container_config.command_timeout),
        instance_names=container_config.instance_names,
        image=container_config.image,
        stop_grace_seconds=container_config.stop_grace_seconds,
        policy=verbose,
    )

    return RelayRuntime(
        aggregator=aggregator,
        scheduler=scheduler,
        status_publisher=status_publisher,
        notifier=notifier,
        push_adapter=PushSourceAdapter(aggregator),
        commands=commands,
        pull_adapters=SourceFactory.build_pull_adapters(provider.get_cloud_config(), aggregator, notifier),
        storage=storage,
    )
