"""Structured logging for AppCanvas.

structlog renders JSON in production and colored console lines in
development. Request-scoped values (correlation id, owner id) are bound
through context variables and merged into every entry logged while the
request runs.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from appcanvas.core.config import Settings, get_settings

# stdlib loggers of the libraries we run under
LIBRARY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")
SQL_LOGGER = "sqlalchemy.engine"


def rename_event_to_message(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Expose the event text as ``message`` in JSON output."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _renderer(settings: Settings) -> Processor:
    if settings.log_format == "console" or settings.is_development:
        return structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib loggers of uvicorn and SQLAlchemy.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)
    renderer = _renderer(settings)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if isinstance(renderer, structlog.processors.JSONRenderer):
        processors.append(rename_event_to_message)

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=not settings.is_development,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(level)

    # Statement logging is controlled by db_echo only
    logging.getLogger(SQL_LOGGER).setLevel(logging.INFO if settings.db_echo else logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger whose entries carry ``logger_name``.

    The name is an initial context value of the lazy proxy, so loggers
    created at import time still pick up the configuration applied later
    by ``configure_logging``.
    """
    return structlog.get_logger(logger_name=name or "appcanvas")


def bind_request_context(correlation_id: str, **values: Any) -> None:
    """Bind the correlation id (and any other values) for the current request."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id, **values)


def bind_owner_id(owner_id: str) -> None:
    structlog.contextvars.bind_contextvars(owner_id=owner_id)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
