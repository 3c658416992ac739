"""Exceptions for calculation and condition evaluation."""

from appcanvas.core.exceptions import ValidationFailedError


class CalculationError(ValidationFailedError):
    """Raised when a calculation or condition document cannot be evaluated."""

    pass
