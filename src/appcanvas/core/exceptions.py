"""Error taxonomy shared by the data layer and the evaluator.

Every failure the core raises deliberately is one of these five kinds.
The HTTP layer maps each kind to a status code.
"""

from typing import Any


class AppCanvasError(Exception):
    """Base class for all AppCanvas errors."""

    code = "internal"

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None):
        self.message = message
        self.details = details or []
        super().__init__(message)


class NotFoundError(AppCanvasError):
    """Raised when a Database, Table, Column or Record does not exist."""

    code = "not_found"


class ConflictError(AppCanvasError):
    """Raised on duplicate names or namespace ids."""

    code = "conflict"


class ValidationFailedError(AppCanvasError):
    """Raised when a request or document has a malformed shape."""

    code = "validation_failed"


class StorageUnavailableError(AppCanvasError):
    """Raised when a namespace session cannot be opened or used."""

    code = "storage_unavailable"


class InternalError(AppCanvasError):
    """Raised for unexpected failures."""

    code = "internal"
