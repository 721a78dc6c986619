"""
sessionrelay shared data models.

These models define the structure of data crossing the HTTP boundary:
inbound push snapshots and outbound API responses.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..session import SessionRecord


class IngestAck(str, Enum):
    """Plain-text acknowledgment returned by the ingestion endpoint."""

    SUCCESS = "Success"
    FAILURE = "Failure"


# Inbound Models


class SessionPayload(BaseModel):
    """One session entry inside a pushed snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    active_user_count: int = Field(
        0,
        ge=0,
        validation_alias=AliasChoices("activeUserCount", "ActiveUserCount", "active_user_count"),
        serialization_alias="activeUserCount",
    )
    user_count: int = Field(
        0,
        ge=0,
        validation_alias=AliasChoices("userCount", "UserCount", "user_count"),
        serialization_alias="userCount",
    )
    access_level: str = Field(
        "",
        validation_alias=AliasChoices("accessLevel", "AccessLevel", "access_level"),
        serialization_alias="accessLevel",
    )
    hidden: bool = Field(False, validation_alias=AliasChoices("hidden", "Hidden"))

    def to_record(self, session_key: str) -> SessionRecord:
        """Build the record; push sessions are named by their key and have no owner."""
        return SessionRecord(
            active_user_count=self.active_user_count,
            total_user_count=self.user_count,
            access_level=self.access_level,
            hidden=self.hidden,
            display_name=session_key,
        )

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionPayload":
        return cls(
            active_user_count=record.active_user_count,
            user_count=record.total_user_count,
            access_level=record.access_level,
            hidden=record.hidden,
        )


# Response Models


class StatusResponse(BaseModel):
    """Current terse status and publisher state."""

    status: str = Field(..., description="Terse rendering of the current state")
    scheduler: str = Field(..., description="Debounce scheduler state (idle/pending)")
    publishes: int = Field(0, description="Successful status publishes since startup")
    sources: List[str] = Field(default_factory=list, description="Known source identifiers")


class SourceSessionsResponse(BaseModel):
    """Full canonical state as JSON."""

    sources: Dict[str, Dict[str, SessionPayload]]
    count: int


class ContainerModel(BaseModel):
    """One container known to the container runtime."""

    id: str
    names: List[str]


class ContainerListResponse(BaseModel):
    containers: List[ContainerModel]
    count: int


class CommandResponse(BaseModel):
    """Result of a container command."""

    status: str = Field("success", description="Command outcome")
    message: str = Field(..., description="Human-readable summary")
    instances: List[str] = Field(default_factory=list, description="Instances acted on")
    output: Optional[str] = Field(None, description="Runtime output, if any")
