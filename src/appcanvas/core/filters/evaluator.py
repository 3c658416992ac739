"""In-process evaluator for filter predicates."""

from collections.abc import Mapping
from typing import Any

from .ast import And, Comparison, MatchAll, Predicate
from .exceptions import FilterCompilationError


class PredicateEvaluator:
    """Matches stored documents against a predicate tree.

    Mirrors the semantics of the SQL lowering: absent fields never satisfy
    a comparison except ``not_equals``, and incomparable types do not match.
    """

    def __init__(self, predicate: Predicate):
        self.predicate = predicate

    def matches(self, document: Mapping[str, Any]) -> bool:
        """Check whether a stored document satisfies the predicate."""
        return self._evaluate(self.predicate, document)

    def _evaluate(self, node: Predicate, document: Mapping[str, Any]) -> bool:
        if isinstance(node, MatchAll):
            return True

        if isinstance(node, And):
            return all(self._evaluate(operand, document) for operand in node.operands)

        if isinstance(node, Comparison):
            return self._compare(node, document)

        raise FilterCompilationError(f"Unknown predicate node: {type(node).__name__}")

    def _compare(self, node: Comparison, document: Mapping[str, Any]) -> bool:
        present = node.column in document and document[node.column] is not None
        actual = document.get(node.column)
        expected = node.value
        op = node.operator

        if op == "not_equals":
            if expected is None:
                return present
            return not present or actual != expected

        if not present:
            return expected is None and op == "equals"

        if op == "equals":
            return actual == expected

        if op == "contains":
            return str(expected).lower() in _as_text(actual).lower()

        try:
            if op == "greater_than":
                return actual > expected
            if op == "less_than":
                return actual < expected
            if op == "greater_equal":
                return actual >= expected
            if op == "less_equal":
                return actual <= expected
        except TypeError:
            return False

        raise FilterCompilationError(f"Unknown operator: {op}")


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def matches(predicate: Predicate, document: Mapping[str, Any]) -> bool:
    """Check a single document against a predicate."""
    return PredicateEvaluator(predicate).matches(document)
