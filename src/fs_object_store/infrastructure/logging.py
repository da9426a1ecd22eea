"""Structured logging for the object store.

Every event carries the ``service`` and ``environment`` it came from, so
records from several stores shipped to one sink can be told apart.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "fs_object_store"


def _service_context(service: str, environment: str) -> Processor:
    def add_service(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    environment: str = "development",
) -> structlog.stdlib.BoundLogger:
    """
    Configure structlog and return the store's root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' for shipping, 'console' for local runs
        environment: Deployment environment stamped on every event
    """
    log_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _service_context(SERVICE_NAME, environment),
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return get_logger(SERVICE_NAME)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """Logger for ``name`` with ``initial_context`` already bound."""
    logger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger
