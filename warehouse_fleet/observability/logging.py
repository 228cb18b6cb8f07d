"""Structured logging configuration for the warehouse fleet controller."""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional, TextIO

import structlog

from warehouse_fleet.enterprise.config.settings import LoggingSettings

# Libraries whose INFO chatter drowns out the fleet events.
_NOISY_LOGGERS = ("sqlalchemy.engine", "grpc", "uvicorn.access")


def _build_structlog_processors(json_output: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def configure_logging(settings: LoggingSettings, stream: Optional[TextIO] = None) -> None:
    """Configure stdlib + structlog logging based on settings.

    Safe to call more than once; the last call wins.
    """

    level = getattr(logging, settings.level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=level,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=_build_structlog_processors(settings.json),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(stream),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def bind_global_context(**context: Any) -> Dict[str, Any]:
    """Bind context vars that should be included in all subsequent logs."""

    structlog.contextvars.bind_contextvars(**context)
    return context
