"""
Logging configuration for the relay and the uvicorn server it runs under.

Probe traffic on the health endpoints is dropped from the access log.
"""

import logging
from typing import Any, Dict

HEALTH_PATHS = ("/health", "/healthz")

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GET requests on the health endpoints."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        return not ("GET" in message and any(f"{path} " in message for path in HEALTH_PATHS))


def _stdout_handler(formatter: str, *filters: str) -> Dict[str, Any]:
    handler = {"class": "logging.StreamHandler", "formatter": formatter, "stream": "ext://sys.stdout"}
    if filters:
        handler["filters"] = list(filters)
    return handler


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """
    Build a dictConfig mapping.

    Args:
        level: Level for the sessionrelay loggers; uvicorn stays at INFO

    Returns:
        Dictionary accepted by logging.config.dictConfig and uvicorn's log_config
    """
    server_loggers = {
        name: {"handlers": [handler], "level": "INFO", "propagate": False}
        for name, handler in (("uvicorn", "default"), ("uvicorn.error", "default"), ("uvicorn.access", "access"))
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "default": {"format": DEFAULT_FORMAT},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": _stdout_handler("default"),
            "access": _stdout_handler("access", "health_check_filter"),
        },
        "loggers": {
            **server_loggers,
            "sessionrelay": {"handlers": ["default"], "level": level.upper(), "propagate": False},
        },
        "root": {"level": "INFO", "handlers": ["default"]},
    }
