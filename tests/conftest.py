"""
Shared pytest fixtures for sessionrelay tests.

This module provides common fixtures including:
- DockerMocker: Mock docker subprocess calls with canned responses
- RecordingSink: In-memory notification sink
- Redis mocks for pub/sub sink tests
"""

import asyncio
import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Union
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessionrelay.exceptions import NotificationError
from sessionrelay.modules.aggregator import Aggregator
from sessionrelay.modules.session import SessionRecord


# =============================================================================
# Docker Mocking Infrastructure
# =============================================================================

@dataclass
class DockerResponse:
    """Represents a mocked docker command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    def to_completed_process(self) -> MagicMock:
        """Convert to a subprocess.CompletedProcess-like mock."""
        result = MagicMock()
        result.stdout = self.stdout
        result.stderr = self.stderr
        result.returncode = self.returncode
        return result


@dataclass
class DockerCall:
    """Record of a docker call made during testing."""
    command: List[str]
    full_command_str: str
    matched_pattern: Optional[str] = None


class DockerMocker:
    """
    Mock docker subprocess calls with pattern-matched responses.

    Usage:
        def test_restart(docker_mocker):
            docker_mocker.register("ps", DockerResponse(stdout='{"ID":"abc","Names":"headless-1"}'))
            DockerCliControl().restart("abc")
            assert docker_mocker.was_called_with("restart abc")
    """

    def __init__(self):
        self._responses: List[tuple] = []
        self._call_history: List[DockerCall] = []
        self._default_response = DockerResponse()

    def register(self, pattern: Union[str, Pattern], response: DockerResponse) -> "DockerMocker":
        """Register a response for commands matching a substring or regex."""
        self._responses.append((pattern, response))
        return self

    def set_default_response(self, response: DockerResponse) -> "DockerMocker":
        self._default_response = response
        return self

    def mock_run(self, cmd: List[str], capture_output: bool = True, text: bool = True,
                 timeout: Optional[int] = None, **kwargs) -> MagicMock:
        """Side effect for patching subprocess.run."""
        if cmd[0] != "docker":
            raise RuntimeError(f"Non-docker command blocked: {' '.join(cmd)}")

        docker_args = " ".join(cmd[1:])
        matched_pattern = None
        response = self._default_response

        for pattern, resp in self._responses:
            if isinstance(pattern, str):
                if pattern in docker_args:
                    matched_pattern, response = pattern, resp
                    break
            elif pattern.search(docker_args):
                matched_pattern, response = pattern.pattern, resp
                break

        self._call_history.append(DockerCall(cmd, " ".join(cmd), matched_pattern))
        return response.to_completed_process()

    @property
    def calls(self) -> List[DockerCall]:
        return self._call_history

    def was_called_with(self, pattern: str) -> bool:
        """Check if any call contained the given pattern."""
        return any(pattern in call.full_command_str for call in self._call_history)


PS_OUTPUT = "\n".join([
    '{"ID":"aaa111","Names":"headless-main","State":"running"}',
    '{"ID":"bbb222","Names":"headless-event","State":"exited"}',
    '{"ID":"ccc333","Names":"redis","State":"running"}',
])


@pytest.fixture
def docker_mocker():
    """DockerMocker with subprocess.run patched and a canned `docker ps` listing."""
    mocker = DockerMocker()
    mocker.register("ps -a", DockerResponse(stdout=PS_OUTPUT))
    with patch("subprocess.run", side_effect=mocker.mock_run):
        yield mocker


# =============================================================================
# Notification Infrastructure
# =============================================================================

class RecordingSink:
    """Notification sink that records what it receives."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.messages: List[str] = []
        self.sent_at: List[float] = []
        self.fail = fail
        self.delay = delay
        self.closed = False

    async def send(self, text: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise NotificationError("sink unavailable")
        self.messages.append(text)
        self.sent_at.append(asyncio.get_running_loop().time())

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def aggregator():
    return Aggregator()


@pytest.fixture
def mock_redis():
    """Create a mock async Redis client."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


def make_record(active: int = 1, total: int = 1, access: str = "Anyone", hidden: bool = False,
                name: str = "", owner: Optional[str] = None) -> SessionRecord:
    """Shorthand SessionRecord builder."""
    return SessionRecord(
        active_user_count=active,
        total_user_count=total,
        access_level=access,
        hidden=hidden,
        display_name=name,
        owner_id=owner,
    )


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "docker_mock: Tests using mocked docker subprocess calls"
    )
