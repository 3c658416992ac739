"""Per-render evaluation context."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Protocol

from appcanvas.core.coercion import utcnow
from appcanvas.core.filters import Filter
from appcanvas.domain.entities import BaseElement, QueryAction


class RecordDataSource(Protocol):
    """Read access to stored records, scoped to the rendering owner."""

    async def query(
        self,
        database_id: str,
        table_id: str,
        filters: list[Filter],
        action: QueryAction,
        column: str | None = None,
    ) -> Any:
        """Run a count/value/values query with the query API's result shapes."""
        ...

    async def find_records(
        self,
        database_id: str,
        table_id: str,
        filters: list[Filter],
    ) -> list[dict[str, Any]]:
        """Return every record of a table matching the filters."""
        ...


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class EvaluationContext:
    """Everything a calculation may read while one element renders.

    Contexts are immutable: binding a repeating row produces a new context,
    so per-row evaluations never share mutable state.

    Attributes:
        element_properties: Static properties of the element being rendered.
        elements: Screen element index (id -> element).
        element_state: Current UI state per element id (input values, active tab...).
        repeating_rows: Row currently bound to each repeating container id.
        passed_parameters: Parameters passed by the navigating screen.
        source_screen_id: Id of the screen that passed the parameters, if known.
        now: Render timestamp.
        data_source: Record read capability for database-sourced steps.
    """

    element_properties: Mapping[str, Any] = field(default_factory=dict)
    elements: Mapping[str, BaseElement] = field(default_factory=dict)
    element_state: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    repeating_rows: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    passed_parameters: Mapping[str, Any] = field(default_factory=dict)
    source_screen_id: str | None = None
    now: datetime = field(default_factory=utcnow)
    data_source: RecordDataSource | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "element_properties", _freeze(self.element_properties))
        object.__setattr__(self, "elements", _freeze(self.elements))
        object.__setattr__(
            self,
            "element_state",
            _freeze({key: _freeze(value) for key, value in self.element_state.items()}),
        )
        object.__setattr__(
            self,
            "repeating_rows",
            _freeze({key: _freeze(value) for key, value in self.repeating_rows.items()}),
        )
        object.__setattr__(self, "passed_parameters", _freeze(self.passed_parameters))

    def bind_row(self, container_id: str, row: Mapping[str, Any]) -> "EvaluationContext":
        """Return a copy of this context with ``row`` bound to a repeating container."""
        rows = dict(self.repeating_rows)
        rows[container_id] = row
        return replace(self, repeating_rows=rows)

    def for_element(self, element: BaseElement) -> "EvaluationContext":
        """Return a copy of this context owned by ``element``."""
        properties = getattr(element, "properties", None)
        values = properties.model_dump(by_alias=True) if properties is not None else {}
        return replace(self, element_properties=values)
