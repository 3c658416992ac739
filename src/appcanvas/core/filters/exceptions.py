"""Exceptions for filter compilation and evaluation."""

from appcanvas.core.exceptions import InternalError


class FilterCompilationError(InternalError):
    """Raised when a predicate tree cannot be lowered to a storage query."""

    pass
