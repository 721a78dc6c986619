"""
API Module - Black Box Interface

Purpose: HTTP routing and module orchestration
Interface: REST endpoints (routes.router), request/response models
Hidden: Request decoding, error responses

The API module only orchestrates - it contains no business logic.
All logic is delegated to the runtime's modules.
"""

from .models import (
    CommandResponse,
    ContainerListResponse,
    ContainerModel,
    IngestAck,
    SessionPayload,
    SourceSessionsResponse,
    StatusResponse,
)

__all__ = [
    "IngestAck",
    "SessionPayload",
    "StatusResponse",
    "SourceSessionsResponse",
    "ContainerModel",
    "ContainerListResponse",
    "CommandResponse",
]
