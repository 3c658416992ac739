"""Calculation and condition evaluation API."""

from .context import EvaluationContext, RecordDataSource
from .evaluator import CalculationEvaluator, evaluate_calculation, evaluate_condition
from .exceptions import CalculationError
from .templates import find_calculation_ids, format_value, substitute

__all__ = [
    "CalculationError",
    "CalculationEvaluator",
    "EvaluationContext",
    "RecordDataSource",
    "evaluate_calculation",
    "evaluate_condition",
    "find_calculation_ids",
    "format_value",
    "substitute",
]
