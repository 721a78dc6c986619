"""
HTTP implementation of the cloud EventSource.

Polls the cloud REST API and turns successive session listings into
added/updated/removed callbacks, the way the streaming SDK reports them:
every poll reports every still-present session as updated, so receivers
must filter repeats themselves.
"""

import logging
import uuid
from typing import Dict, List, Optional, Set

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ..session import SessionRecord
from .interfaces import ContactRequest, LoginResult, SessionEventHandler

logger = logging.getLogger(__name__)


class CloudSessionInfo(BaseModel):
    """Session listing entry as returned by the cloud API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: str = Field(..., alias="sessionId")
    name: str = ""
    host_user_id: Optional[str] = Field(None, alias="hostUserId")
    active_users: int = Field(0, ge=0, alias="activeUsers")
    joined_users: int = Field(0, ge=0, alias="joinedUsers")
    access_level: str = Field("", alias="accessLevel")
    hide_from_listing: bool = Field(False, alias="hideFromListing")

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            active_user_count=self.active_users,
            total_user_count=self.joined_users,
            access_level=self.access_level,
            hidden=self.hide_from_listing,
            display_name=self.name,
            owner_id=self.host_user_id,
        )


class CloudContact(BaseModel):
    """Contact entry as returned by the cloud API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    contact_username: str = Field("", alias="contactUsername")
    contact_status: str = Field("", alias="contactStatus")
    is_accepted: bool = Field(False, alias="isAccepted")


_sessions_adapter = TypeAdapter(List[CloudSessionInfo])
_contacts_adapter = TypeAdapter(List[CloudContact])


class HttpCloudEventSource:
    """EventSource backed by the cloud REST API."""

    def __init__(self, api_url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        """
        Initialize cloud event source.

        Args:
            api_url: Base URL of the cloud API
            client: Optional httpx client (created if omitted)
            timeout: Per-request timeout in seconds
        """
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.api_url, timeout=timeout)
        self._handler: Optional[SessionEventHandler] = None
        self._user_id: Optional[str] = None
        self._token: Optional[str] = None
        self._sessions: Dict[str, SessionRecord] = {}
        self._seen_requests: Set[str] = set()

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    async def login(self, identity: str, credential: str) -> LoginResult:
        payload = {
            "username": identity,
            "authentication": {"$type": "password", "password": credential},
            "secretMachineId": str(uuid.uuid4()),
            "rememberMe": False,
        }

        try:
            response = await self._client.post("/userSessions", json=payload)
        except httpx.HTTPError as e:
            return LoginResult(ok=False, error=f"transport error: {e}")

        if response.text.strip().strip('"') == "TOTP":
            return LoginResult(ok=False, error="TOTP", two_factor_required=True)
        if response.status_code >= 400:
            return LoginResult(ok=False, error=f"{response.status_code}: {response.text[:200]}")

        try:
            entity = response.json().get("entity") or {}
        except (ValueError, AttributeError):
            return LoginResult(ok=False, error="malformed login response")
        user_id = entity.get("userId")
        token = entity.get("token")
        if not user_id or not token:
            return LoginResult(ok=False, error="login response carried no session token")

        self._user_id = user_id
        self._token = token
        self._client.headers["Authorization"] = f"res {user_id}:{token}"
        return LoginResult(ok=True, user_id=user_id)

    def subscribe(self, handler: SessionEventHandler) -> None:
        self._handler = handler

    async def update(self) -> None:
        """
        Poll sessions and contacts once and fire callbacks.

        Raises:
            httpx.HTTPError: On transport or status errors (the caller logs them)
        """
        if self._handler is None or self._user_id is None:
            return
        await self._poll_sessions()
        await self._poll_contacts()

    async def _poll_sessions(self) -> None:
        response = await self._client.get("/sessions", params={"hostId": self._user_id})
        response.raise_for_status()

        current = {
            info.session_id: info.to_record()
            for info in _sessions_adapter.validate_python(response.json())
        }

        for key, record in current.items():
            if key in self._sessions:
                await self._handler.on_updated(key, record)
            else:
                await self._handler.on_added(key, record)

        for key in self._sessions.keys() - current.keys():
            await self._handler.on_removed(key, self._sessions[key])

        self._sessions = current

    async def _poll_contacts(self) -> None:
        response = await self._client.get(f"/users/{self._user_id}/contacts")
        response.raise_for_status()

        pending = [
            contact
            for contact in _contacts_adapter.validate_python(response.json())
            if contact.contact_status == "Requested" and not contact.is_accepted
        ]

        # Forget requests that were accepted or ignored so a repeat is reported again
        self._seen_requests &= {contact.id for contact in pending}

        for contact in pending:
            if contact.id in self._seen_requests:
                continue
            self._seen_requests.add(contact.id)
            await self._handler.on_new_contact_request(
                ContactRequest(user_id=contact.id, username=contact.contact_username or contact.id)
            )

    async def logout(self) -> None:
        try:
            if self._user_id and self._token:
                response = await self._client.delete(f"/userSessions/{self._user_id}/{self._token}")
                if response.status_code >= 400:
                    logger.warning(f"Logout returned {response.status_code}")
        finally:
            self._user_id = None
            self._token = None
            self._client.headers.pop("Authorization", None)

    async def close(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
