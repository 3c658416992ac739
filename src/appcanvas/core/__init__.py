"""Core AppCanvas utilities.

This module exports core utilities for use throughout the application.
"""

from appcanvas.core.config import Settings, get_settings
from appcanvas.core.exceptions import (
    AppCanvasError,
    ConflictError,
    InternalError,
    NotFoundError,
    StorageUnavailableError,
    ValidationFailedError,
)
from appcanvas.core.logging import (
    bind_owner_id,
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "bind_owner_id",
    "bind_request_context",
    "clear_request_context",
    "AppCanvasError",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "StorageUnavailableError",
    "ValidationFailedError",
]
