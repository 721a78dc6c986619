"""Source interfaces following Black Box Design principles."""
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from ..session import SessionRecord


@dataclass
class LoginResult:
    """Standardized login result."""
    ok: bool
    user_id: Optional[str] = None
    error: Optional[str] = None
    two_factor_required: bool = False


@dataclass(frozen=True)
class ContactRequest:
    """An incoming contact (friend) request."""
    user_id: str
    username: str


class SessionEventHandler(Protocol):
    """Protocol for receivers of cloud session callbacks."""

    async def on_added(self, session_key: str, record: SessionRecord) -> None:
        ...

    async def on_updated(self, session_key: str, record: SessionRecord) -> None:
        ...

    async def on_removed(self, session_key: str, record: SessionRecord) -> None:
        ...

    async def on_contact_merge(self, contact_id: str, records: Mapping[str, SessionRecord]) -> None:
        ...

    async def on_new_contact_request(self, request: ContactRequest) -> None:
        ...


class EventSource(Protocol):
    """Protocol for a cloud session service connection."""

    async def login(self, identity: str, credential: str) -> LoginResult:
        """
        Authenticate against the cloud service.

        Args:
            identity: Account username
            credential: Account password

        Returns:
            LoginResult with the authenticated user id on success
        """
        ...

    def subscribe(self, handler: SessionEventHandler) -> None:
        """Register the receiver of session callbacks."""
        ...

    async def update(self) -> None:
        """Pump the connection once; callbacks fire from here."""
        ...

    async def logout(self) -> None:
        """End the authenticated session."""
        ...

    async def close(self) -> None:
        """Release transport resources, whether or not login succeeded."""
        ...
