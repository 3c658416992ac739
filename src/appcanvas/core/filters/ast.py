"""Predicate tree produced by the filter compiler.

The tree is storage-agnostic. Storage drivers lower it to their own query
form (SQL fragments, in-process matching).
"""

from dataclasses import dataclass
from typing import Any


class _Unset:
    """Marker for a filter value that was never supplied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Filter:
    """One declarative filter: ``column <operator> value``.

    ``value`` is ``UNSET`` when the caller omitted it, which is different
    from an explicit ``None``. ``logic`` is carried but not applied.
    """

    column: str | None = None
    operator: str | None = None
    value: Any = UNSET
    logic: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Filter":
        return cls(
            column=data.get("column"),
            operator=data.get("operator"),
            value=data.get("value", UNSET),
            logic=data.get("logic"),
        )


@dataclass(frozen=True)
class Predicate:
    """Base class for all predicate nodes."""


@dataclass(frozen=True)
class MatchAll(Predicate):
    """Matches every record."""


@dataclass(frozen=True)
class Comparison(Predicate):
    """Compares one record field against a storage-form value."""

    column: str
    operator: str
    value: Any


@dataclass(frozen=True)
class And(Predicate):
    """All operands must match."""

    operands: tuple[Predicate, ...]
