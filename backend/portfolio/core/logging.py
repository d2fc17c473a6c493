"""Structured logging for the portfolio API using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from portfolio.core.config import settings

# Third-party loggers that follow the configured level
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Per-statement and per-call chatter, only wanted while debugging
DRIVER_LOGGERS = ("sqlalchemy.engine", "aiosqlite")


def add_service_info(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp every event with the service name and version."""
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", settings.version)
    return event_dict


def build_processors(debug: bool) -> list[Any]:
    """Processor chain: console output in debug, JSON lines otherwise."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            add_service_info,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return processors


def setup_logging() -> None:
    """Configure structured logging for the application."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(settings.debug),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    for name in SERVER_LOGGERS:
        logging.getLogger(name).setLevel(log_level)

    driver_level = log_level if settings.debug else max(log_level, logging.WARNING)
    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, usually with ``__name__``."""
    return structlog.get_logger(name)
