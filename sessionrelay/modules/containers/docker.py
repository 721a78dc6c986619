"""
Docker CLI container control.

Calls are synchronous subprocess invocations; async callers run them in a
worker thread.
"""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from typing import List, Protocol

from ...exceptions import ContainerControlError

logger = logging.getLogger(__name__)


@dataclass
class ContainerInfo:
    """A container as reported by the runtime."""

    id: str
    names: List[str] = field(default_factory=list)

    def matches(self, instance: str) -> bool:
        return instance in self.names


class ContainerControl(Protocol):
    """Protocol for container runtimes."""

    def list(self) -> List[ContainerInfo]:
        ...

    def restart(self, container_id: str) -> None:
        ...

    def stop(self, container_id: str, grace_seconds: int) -> None:
        ...

    def start(self, container_id: str) -> None:
        ...

    def pull(self, image: str) -> str:
        ...


class DockerCliControl:
    """ContainerControl backed by the docker command line client."""

    def __init__(self, docker_binary: str = "docker", timeout: int = 60):
        """
        Initialize docker control.

        Args:
            docker_binary: Name or path of the docker executable
            timeout: Seconds before a docker invocation is abandoned
        """
        self.docker_binary = docker_binary
        self.timeout = timeout

    def list(self) -> List[ContainerInfo]:
        """List all containers, running or not."""
        output = self._run(["ps", "-a", "--no-trunc", "--format", "{{json .}}"])

        containers = []
        for line in output.splitlines():
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.warning(f"Skipping unparsable docker ps line: {line[:200]}")
                continue
            names = [name.strip().lstrip("/") for name in entry.get("Names", "").split(",") if name.strip()]
            containers.append(ContainerInfo(id=entry.get("ID", ""), names=names))
        return containers

    def restart(self, container_id: str) -> None:
        self._run(["restart", container_id])

    def stop(self, container_id: str, grace_seconds: int) -> None:
        self._run(["stop", "-t", str(grace_seconds), container_id])

    def start(self, container_id: str) -> None:
        self._run(["start", container_id])

    def pull(self, image: str) -> str:
        return self._run(["pull", image])

    def _run(self, args: List[str]) -> str:
        cmd = [self.docker_binary, *args]
        logger.info(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise ContainerControlError(f"'{' '.join(cmd)}' timed out after {self.timeout}s") from e
        except OSError as e:
            raise ContainerControlError(f"Cannot run {self.docker_binary}: {e}") from e

        if result.returncode != 0:
            raise ContainerControlError(
                f"'{' '.join(cmd)}' failed ({result.returncode}): {result.stderr.strip()}"
            )
        return result.stdout
