"""Compiles declarative filter lists into predicate trees."""

from collections.abc import Iterable, Mapping
from typing import Any

from appcanvas.core.coercion import ColumnType, ValueCoercer
from appcanvas.core.logging import get_logger

from .ast import UNSET, And, Comparison, Filter, MatchAll, Predicate

logger = get_logger(__name__)


class FilterCompiler:
    """Turns filters plus column types into one composite predicate.

    Every filter is checked independently; filters that cannot be compiled
    are skipped, never rejected. The surviving comparisons are combined
    with AND.
    """

    OPERATORS = frozenset(
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

    def compile(
        self,
        filters: Iterable[Filter | Mapping[str, Any]] | None,
        columns: Iterable[Any] | None,
    ) -> Predicate:
        """Compile filters to a predicate.

        Args:
            filters: Filters as ``Filter`` objects or plain dicts.
            columns: Column definitions (objects or dicts with name and type).

        Returns:
            ``MatchAll`` when nothing survives, the single comparison when one
            does, otherwise ``And`` of all comparisons.
        """
        column_types = _column_types(columns or [])
        comparisons: list[Predicate] = []

        for raw in filters or []:
            item = raw if isinstance(raw, Filter) else Filter.from_dict(dict(raw))
            comparison = self._compile_filter(item, column_types)
            if comparison is not None:
                comparisons.append(comparison)

        if not comparisons:
            return MatchAll()
        if len(comparisons) == 1:
            return comparisons[0]
        return And(tuple(comparisons))

    def _compile_filter(
        self, item: Filter, column_types: dict[str, ColumnType]
    ) -> Comparison | None:
        if not item.column or not item.operator or item.value is UNSET:
            logger.debug("Skipping incomplete filter", column=item.column, operator=item.operator)
            return None

        if item.operator not in self.OPERATORS:
            logger.warning("Unknown filter operator", operator=item.operator, column=item.column)
            return None

        if item.logic and item.logic.lower() == "or":
            logger.warning(
                "Filter logic 'or' is not supported, combining with AND",
                column=item.column,
            )

        column_type = column_types.get(item.column, ColumnType.STRING)
        value = ValueCoercer.to_storage(ValueCoercer.coerce(item.value, column_type))
        return Comparison(column=item.column, operator=item.operator, value=value)


def _column_types(columns: Iterable[Any]) -> dict[str, ColumnType]:
    types: dict[str, ColumnType] = {}
    for column in columns:
        if isinstance(column, Mapping):
            name, type_name = column.get("name"), column.get("type")
        else:
            name, type_name = getattr(column, "name", None), getattr(column, "type", None)
        if name:
            types[name] = ColumnType.parse(type_name)
    return types


def compile_filters(
    filters: Iterable[Filter | Mapping[str, Any]] | None,
    columns: Iterable[Any] | None,
) -> Predicate:
    """Compile filters against column definitions.

    Examples:
        >>> compile_filters([], [])
        MatchAll()

        >>> compile_filters(
        ...     [{"column": "age", "operator": "greater_than", "value": "18"}],
        ...     [{"name": "age", "type": "number"}],
        ... )
        Comparison(column='age', operator='greater_than', value=18.0)
    """
    return FilterCompiler().compile(filters, columns)
