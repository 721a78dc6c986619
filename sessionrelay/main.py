#!/usr/bin/env python3
"""
sessionrelay - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the relay runtime (sources, aggregator, scheduler, publishers)
3. Runs the HTTP server hosting the ingestion endpoint and commands

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from sessionrelay import __version__
from sessionrelay.logging_config import get_logging_config
from sessionrelay.modules.api.routes import install_error_handlers, router
from sessionrelay.modules.config import get_config
from sessionrelay.runtime import build_runtime

# Get configuration
config = get_config()

log_config.dictConfig(get_logging_config(config.get("log_level")))
logger = logging.getLogger("sessionrelay.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.

    A SourceLoginError raised while starting pull sources propagates out of
    here, which aborts server startup.
    """
    logger.info("Starting session relay...")

    runtime = await build_runtime(config)
    try:
        await runtime.start()
    except Exception as e:
        logger.error(f"Relay died during startup: {e}")
        await runtime.stop()
        raise
    app.state.relay = runtime

    logger.info("Session relay started successfully")

    yield

    logger.info("Shutting down session relay...")
    await runtime.stop()
    app.state.relay = None
    logger.info("Session relay shutdown complete")


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title="sessionrelay",
        description="Relays live session state into a debounced status line",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    install_error_handlers(app)
    return app


app = create_app()


def main() -> None:
    uvicorn.run(
        "sessionrelay.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )


if __name__ == "__main__":
    main()
