"""Calculation and condition documents.

Calculations and conditions are embedded in element documents and have no
lifecycle of their own. Field names follow the camelCase keys of the stored
documents; Python code uses the snake_case attribute names.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from appcanvas.core.filters import UNSET, Filter


class DocumentModel(BaseModel):
    """Base for models parsed from element documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class StepSource(str, Enum):
    """Where a step takes its value from."""

    CUSTOM = "custom"
    ELEMENT = "element"
    DATABASE = "database"
    REPEATING_CONTAINER = "repeating_container"
    PASSED_PARAMETER = "passed_parameter"
    TIMESTAMP = "timestamp"


class StepKind(str, Enum):
    """Editor hint for whether a step seeds a value or combines with the previous result."""

    VALUE = "value"
    OPERATION = "operation"


class QueryAction(str, Enum):
    """Read shapes supported by database-sourced steps and the query API."""

    COUNT = "count"
    VALUE = "value"
    VALUES = "values"


class FilterSpec(DocumentModel):
    """Filter as stored in a document or sent to the query API."""

    id: str | None = None
    column: str | None = None
    operator: str | None = None
    value: Any = None
    logic: str | None = None

    def to_filter(self) -> Filter:
        """Convert to a compiler filter, keeping an omitted value distinct from null."""
        value = self.value if "value" in self.model_fields_set else UNSET
        return Filter(column=self.column, operator=self.operator, value=value, logic=self.logic)


class StepConfig(DocumentModel):
    """Source-specific configuration of a step."""

    source: StepSource = StepSource.CUSTOM
    value: Any = None
    element_id: str | None = None
    container_value_type: str | None = None
    database_id: str | None = None
    table_id: str | None = None
    selected_column: str | None = None
    action: QueryAction | None = None
    filters: list[FilterSpec] = Field(default_factory=list)
    repeating_container_id: str | None = None
    repeating_column: str | None = None
    passed_parameter_name: str | None = None
    passed_parameter_from_screen: str | None = None


class Step(DocumentModel):
    """One value-resolution unit of a calculation or condition.

    ``kind`` (``type`` on the wire) is kept for the editor and never read
    during evaluation: a step joins the chain through ``operation`` alone.
    """

    id: str
    kind: StepKind = Field(default=StepKind.OPERATION, alias="type")
    operation: str | None = None
    config: StepConfig = Field(default_factory=StepConfig)


class Calculation(DocumentModel):
    """Named computation attached to an element."""

    id: str
    name: str | None = None
    description: str | None = None
    label: str | None = None
    steps: list[Step] = Field(default_factory=list)


class Condition(DocumentModel):
    """Boolean counterpart of a calculation.

    The first step is the left operand and the second the right operand.
    """

    id: str
    name: str | None = None
    description: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    steps: list[Step] = Field(default_factory=list)
    operator: str | None = None

    def resolve_operator(self) -> str | None:
        """Operator from the condition, its properties, or the right operand's step."""
        if self.operator:
            return self.operator
        from_properties = self.properties.get("operator")
        if from_properties:
            return str(from_properties)
        if len(self.steps) > 1 and self.steps[1].operation:
            return self.steps[1].operation
        return None
