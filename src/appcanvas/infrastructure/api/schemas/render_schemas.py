"""Pydantic schemas for render evaluation."""

from typing import Any

from pydantic import Field

from appcanvas.domain.entities import Element
from appcanvas.infrastructure.api.schemas.common_schemas import ApiModel


class EvaluateRequest(ApiModel):
    """One element plus the render state it is evaluated in."""

    element: Element
    screen_elements: list[Element] = Field(
        default_factory=list, description="Every element of the screen, for element-sourced steps"
    )
    element_state: dict[str, dict[str, Any]] = Field(default_factory=dict)
    repeating_rows: dict[str, dict[str, Any]] = Field(default_factory=dict)
    passed_parameters: dict[str, Any] = Field(default_factory=dict)
    source_screen_id: str | None = None


class ElementEvaluation(ApiModel):
    element_id: str
    calculations: dict[str, Any] = Field(default_factory=dict)
    conditions: dict[str, bool] = Field(default_factory=dict)
    branch: int | None = None
    visible: bool = True
    text: str | None = None


class RowEvaluation(ApiModel):
    """Evaluation of a repeating container's children for one bound row."""

    row: dict[str, Any]
    children: list[ElementEvaluation] = Field(default_factory=list)


class EvaluateResult(ElementEvaluation):
    rows: list[RowEvaluation] | None = None
