"""Comparison, logical and arithmetic operators for calculations and conditions."""

import math
from datetime import datetime
from typing import Any

from appcanvas.core.coercion import ValueCoercer, parse_datetime

from .exceptions import CalculationError

COMPARISON_OPERATORS = frozenset(
    {
        "equals",
        "not_equals",
        "greater_than",
        "less_than",
        "greater_equal",
        "less_equal",
        "contains",
    }
)
LOGICAL_OPERATORS = frozenset({"and", "or"})
UNARY_OPERATORS = frozenset({"is_empty", "is_not_empty"})
ARITHMETIC_OPERATORS = frozenset({"add", "subtract", "multiply", "divide", "modulo", "concat"})

FALSE_STRINGS = frozenset({"", "false", "0"})


def is_truthy(value: Any) -> bool:
    """Truthiness of a resolved value as the UI understands it."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def as_number(value: Any) -> float | None:
    """Numeric reading of a value, or None when it is not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _normalize(left: Any, right: Any) -> tuple[Any, Any]:
    """Bring two operands to a common comparable form."""
    if isinstance(left, datetime) or isinstance(right, datetime):
        left_dt, right_dt = parse_datetime(left), parse_datetime(right)
        if left_dt is not None and right_dt is not None:
            return left_dt, right_dt
        return left, right

    if isinstance(left, bool) or isinstance(right, bool):
        return ValueCoercer.to_boolean(left), ValueCoercer.to_boolean(right)

    left_num, right_num = as_number(left), as_number(right)
    if left_num is not None and right_num is not None:
        return left_num, right_num

    return left, right


def compare(operator: str, left: Any, right: Any) -> bool:
    """Apply a comparison, unary or logical operator to two resolved operands.

    Raises:
        CalculationError: If the operator is unknown.
    """
    if operator == "and":
        return is_truthy(left) and is_truthy(right)
    if operator == "or":
        return is_truthy(left) or is_truthy(right)
    if operator == "is_empty":
        return is_empty(left)
    if operator == "is_not_empty":
        return not is_empty(left)

    if operator == "contains":
        if left is None or right is None:
            return False
        if isinstance(left, (list, tuple, set)):
            return right in left
        return ValueCoercer.to_string(right).lower() in ValueCoercer.to_string(left).lower()

    left, right = _normalize(left, right)

    if operator == "equals":
        return left == right
    if operator == "not_equals":
        return left != right

    # Ordering requires comparable types
    try:
        if operator == "greater_than":
            return left > right
        if operator == "less_than":
            return left < right
        if operator == "greater_equal":
            return left >= right
        if operator == "less_equal":
            return left <= right
    except TypeError:
        return False

    raise CalculationError(f"Unknown condition operator: {operator}")


def apply_arithmetic(operation: str, accumulator: Any, operand: Any) -> Any:
    """Combine the running result of a calculation with the next operand.

    Raises:
        CalculationError: If the operation is unknown or divides by zero.
    """
    if operation == "concat":
        return ValueCoercer.to_string(accumulator) + ValueCoercer.to_string(operand)

    if operation == "add":
        left, right = as_number(accumulator), as_number(operand)
        if left is None or right is None:
            return ValueCoercer.to_string(accumulator) + ValueCoercer.to_string(operand)
        return left + right

    if operation not in ARITHMETIC_OPERATORS:
        raise CalculationError(f"Unknown calculation operation: {operation}")

    left = ValueCoercer.to_number(accumulator)
    right = ValueCoercer.to_number(operand)

    if operation == "subtract":
        return left - right
    if operation == "multiply":
        return left * right

    if right == 0:
        raise CalculationError(f"Division by zero in '{operation}' step")
    if operation == "divide":
        return left / right
    return left % right
