"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol


@dataclass
class CloudAccount:
    """Credentials for one polled cloud account."""
    username: str
    password: str = field(repr=False)


@dataclass
class CloudConfig:
    """Cloud (pull source) configuration."""
    api_url: str
    accounts: List[CloudAccount]
    poll_interval: float

    @property
    def is_configured(self) -> bool:
        """Check if any pull source should be started."""
        return bool(self.accounts)


@dataclass
class SinkConfig:
    """Notification sink configuration."""
    name: str
    kind: str
    webhook_url: Optional[str]
    channel: str


@dataclass
class RedisConfig:
    """Redis connection configuration."""
    host: str
    port: int
    db: int
    password: Optional[str] = field(default=None, repr=False)

    @property
    def url(self) -> str:
        return f"redis://{self.host}:{self.port}/{self.db}"


@dataclass
class RenderConfig:
    """Status rendering configuration."""
    denylist: List[str]
    strip_tag: str


@dataclass
class ContainerConfig:
    """Headless container configuration."""
    instance_names: List[str]
    image: Optional[str]
    stop_grace_seconds: int
    command_timeout: int


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_cloud_config(self) -> CloudConfig:
        """Get cloud source configuration."""
        ...

    def get_status_sink_config(self) -> SinkConfig:
        """Get the sink receiving the debounced status."""
        ...

    def get_notify_sink_config(self) -> SinkConfig:
        """Get the sink receiving ad hoc notifications."""
        ...

    def get_redis_config(self) -> RedisConfig:
        """Get Redis configuration."""
        ...

    def get_render_config(self) -> RenderConfig:
        """Get rendering configuration."""
        ...

    def get_container_config(self) -> ContainerConfig:
        """Get container configuration."""
        ...


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_cloud_config(self) -> CloudConfig:
        """
        Get cloud configuration from environment variables.

        CLOUD_ACCOUNTS uses the format username:password,username:password.
        """
        accounts = []
        for entry in _split_list(os.getenv("CLOUD_ACCOUNTS", "")):
            username, sep, password = entry.partition(":")
            if not sep or not username:
                raise ValueError(
                    "CLOUD_ACCOUNTS entries must use the format username:password"
                )
            accounts.append(CloudAccount(username=username, password=password))

        return CloudConfig(
            api_url=os.getenv("CLOUD_API_URL", "https://api.resonite.com").rstrip("/"),
            accounts=accounts,
            poll_interval=float(os.getenv("POLL_INTERVAL", "1")),
        )

    def get_status_sink_config(self) -> SinkConfig:
        """Get status sink configuration from environment variables."""
        return SinkConfig(
            name="status",
            kind=os.getenv("STATUS_SINK", "log").lower(),
            webhook_url=os.getenv("STATUS_WEBHOOK_URL"),
            channel=os.getenv("STATUS_CHANNEL", "sessionrelay:status"),
        )

    def get_notify_sink_config(self) -> SinkConfig:
        """Get notification sink configuration from environment variables."""
        return SinkConfig(
            name="notifications",
            kind=os.getenv("NOTIFY_SINK", "log").lower(),
            webhook_url=os.getenv("NOTIFY_WEBHOOK_URL"),
            channel=os.getenv("NOTIFY_CHANNEL", "sessionrelay:notifications"),
        )

    def get_redis_config(self) -> RedisConfig:
        """Get Redis configuration from environment variables."""
        # Might be in tcp://host:port format from K8s service links
        redis_port_env = os.getenv("REDIS_PORT", "6379")
        if redis_port_env.startswith("tcp://"):
            redis_port = int(redis_port_env.split(":")[-1])
        else:
            redis_port = int(redis_port_env)

        return RedisConfig(
            host=os.getenv("REDIS_HOST", "localhost"),
            port=redis_port,
            db=int(os.getenv("REDIS_DB", "0")),
            password=os.getenv("REDIS_PASSWORD"),
        )

    def get_render_config(self) -> RenderConfig:
        """Get render configuration from environment variables."""
        return RenderConfig(
            denylist=_split_list(os.getenv("RENDER_DENYLIST", "Userspace,Local")),
            strip_tag=os.getenv("RENDER_STRIP_TAG", "[fp]"),
        )

    def get_container_config(self) -> ContainerConfig:
        """Get container configuration from environment variables."""
        return ContainerConfig(
            instance_names=_split_list(os.getenv("INSTANCE_NAMES", "")),
            image=os.getenv("HEADLESS_IMAGE"),
            stop_grace_seconds=int(os.getenv("STOP_GRACE_SECONDS", "30")),
            command_timeout=int(os.getenv("DOCKER_TIMEOUT", "60")),
        )
