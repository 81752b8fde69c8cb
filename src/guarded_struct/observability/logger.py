"""Structured logging setup.

Library modules log through the standard ``logging`` module. ``setup_logging``
installs a root handler whose ``structlog.stdlib.ProcessorFormatter`` renders
those records, and records from ``get_logger`` loggers, as JSON or console
output.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from guarded_struct.core.config import StructSettings

HANDLER_NAME = "guarded_struct.structlog"


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(
    level: str = "INFO",
    format: str = "console",
) -> logging.Handler:
    """Configure structured logging for applications using guarded structs.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for production, "console" for development.

    Returns:
        The installed root handler.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    shared = _shared_processors()

    renderer: Any
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)
    logging.getLogger("guarded_struct").setLevel(log_level)
    return handler


def setup_logging_from_settings(settings: StructSettings) -> logging.Handler:
    """Apply the ``observability`` section of *settings*."""
    return setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
