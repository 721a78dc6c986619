"""
HTTP routes.

Every handler reads the RelayRuntime from app.state; nothing here holds
state of its own.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ...exceptions import ContainerControlError, UnknownInstanceError
from ...runtime import RelayRuntime
from ..render import render
from .models import (
    CommandResponse,
    ContainerListResponse,
    ContainerModel,
    IngestAck,
    SessionPayload,
    SourceSessionsResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_runtime(request: Request) -> RelayRuntime:
    """Dependency returning the live runtime."""
    runtime = getattr(request.app.state, "relay", None)
    if runtime is None:
        raise HTTPException(503, "Service not initialized")
    return runtime


# Ingestion Endpoint


@router.api_route("/ingest", methods=["PUT", "POST"], response_class=PlainTextResponse)
async def ingest_without_source():
    """Snapshots must name their source in the path."""
    logger.warning("Rejected snapshot without source id")
    return PlainTextResponse(IngestAck.FAILURE.value)


@router.api_route("/ingest/{source_id:path}", methods=["PUT", "POST"], response_class=PlainTextResponse)
async def ingest(request: Request, source_id: str):
    """
    Accept a full session snapshot from a push source.

    Always answers HTTP 200 with a plain-text acknowledgment:
        Success: Snapshot handed to the aggregator
        Failure: Missing/malformed source id, undecodable body, or internal error
    """
    try:
        runtime = get_runtime(request)
        body = await request.body()
        accepted = await runtime.push_adapter.ingest(source_id, body)
    except Exception as e:
        logger.error(f"Failed to handle snapshot from {source_id!r}: {e}")
        accepted = False

    ack = IngestAck.SUCCESS if accepted else IngestAck.FAILURE
    return PlainTextResponse(ack.value)


# Status Endpoints


@router.get("/status", response_model=StatusResponse)
async def get_status(runtime: RelayRuntime = Depends(get_runtime)):
    """Current terse status as it would be published now."""
    state = await runtime.aggregator.snapshot()
    return StatusResponse(
        status=render(state, runtime.scheduler.policy),
        scheduler=runtime.scheduler.status.value,
        publishes=runtime.scheduler.publish_count,
        sources=sorted(state),
    )


@router.get("/sessions", response_class=PlainTextResponse)
async def list_sessions(runtime: RelayRuntime = Depends(get_runtime)):
    """Verbose listing of all running sessions, grouped by source."""
    return PlainTextResponse(await runtime.commands.list_sessions())


@router.get("/sources", response_model=SourceSessionsResponse)
async def list_sources(runtime: RelayRuntime = Depends(get_runtime)):
    """Canonical state as JSON."""
    state = await runtime.aggregator.snapshot()
    return SourceSessionsResponse(
        sources={
            source_id: {key: SessionPayload.from_record(record) for key, record in sessions.items()}
            for source_id, sessions in state.items()
        },
        count=sum(len(sessions) for sessions in state.values()),
    )


# Container Command Endpoints


@router.get("/containers", response_model=ContainerListResponse)
async def list_containers(runtime: RelayRuntime = Depends(get_runtime)):
    containers = await runtime.commands.list_containers()
    return ContainerListResponse(
        containers=[ContainerModel(id=c.id, names=c.names) for c in containers],
        count=len(containers),
    )


@router.post("/containers/restart", response_model=CommandResponse)
async def restart_instances(instance: Optional[str] = None, runtime: RelayRuntime = Depends(get_runtime)):
    """
    Restart one instance, or all configured instances when none is given.

    Returns:
        200: Instances restarted
        404: Unknown instance
        502: Container runtime failure
    """
    restarted = await runtime.commands.restart(instance)
    return CommandResponse(message=f"Restarted {', '.join(restarted)}", instances=restarted)


@router.post("/containers/update", response_model=CommandResponse)
async def update_image(runtime: RelayRuntime = Depends(get_runtime)):
    """
    Pull the headless image.

    Instances continue to use the old image until restarted.
    """
    output = await runtime.commands.update_image()
    return CommandResponse(message=f"Pulled {runtime.commands.image}", output=output)


@router.post("/containers/{instance}/stop", response_model=CommandResponse)
async def stop_instance(instance: str, runtime: RelayRuntime = Depends(get_runtime)):
    await runtime.commands.stop(instance)
    return CommandResponse(message=f"Stopped {instance}", instances=[instance])


@router.post("/containers/{instance}/start", response_model=CommandResponse)
async def start_instance(instance: str, runtime: RelayRuntime = Depends(get_runtime)):
    await runtime.commands.start(instance)
    return CommandResponse(message=f"Started {instance}", instances=[instance])


# Health Endpoints


@router.get("/healthz")
async def healthz():
    """
    Minimal health check endpoint for container readiness/liveness probes.

    Returns:
        200: Service is running
    """
    return {"status": "ok"}


@router.get("/health")
async def health_check(request: Request):
    """
    Health check with component status.

    Returns:
        200: Service healthy
        503: Service unhealthy
    """
    runtime = getattr(request.app.state, "relay", None)
    if runtime is None:
        return JSONResponse(status_code=503, content={"status": "unhealthy", "error": "not initialized"})

    sources = [adapter.describe() for adapter in runtime.adapters]
    healthy = all(source.get("logged_in", True) for source in sources)

    redis_status = None
    if runtime.storage:
        redis_status = "connected" if await runtime.storage.ping() else "disconnected"
        healthy = healthy and redis_status == "connected"

    content = {
        "status": "healthy" if healthy else "unhealthy",
        "scheduler": runtime.scheduler.status.value,
        "sources": sources,
        "redis": redis_status,
    }
    return JSONResponse(status_code=200 if healthy else 503, content=content)


# Error handlers


async def unknown_instance_handler(request: Request, exc: UnknownInstanceError):
    """Handle commands naming an instance that does not exist."""
    logger.warning(f"Unknown instance requested: {exc.instance}")
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def container_error_handler(request: Request, exc: ContainerControlError):
    """Handle container runtime failures."""
    logger.error(f"Container command failed: {exc}")
    return JSONResponse(status_code=502, content={"error": str(exc)})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UnknownInstanceError, unknown_instance_handler)
    app.add_exception_handler(ContainerControlError, container_error_handler)
