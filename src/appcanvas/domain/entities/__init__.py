"""Domain entities for AppCanvas.

Element documents and the calculations and conditions embedded in them.
"""

from appcanvas.domain.entities.calculation import (
    Calculation,
    Condition,
    FilterSpec,
    QueryAction,
    Step,
    StepConfig,
    StepKind,
    StepSource,
)
from appcanvas.domain.entities.element import (
    BaseElement,
    ButtonElement,
    ContainerElement,
    Element,
    HeadingElement,
    ImageElement,
    InputElement,
    PageConfig,
    RepeatingConfig,
    TextElement,
    index_elements,
    parse_element,
    parse_elements,
)

__all__ = [
    "BaseElement",
    "ButtonElement",
    "Calculation",
    "Condition",
    "ContainerElement",
    "Element",
    "FilterSpec",
    "HeadingElement",
    "ImageElement",
    "InputElement",
    "PageConfig",
    "QueryAction",
    "RepeatingConfig",
    "Step",
    "StepConfig",
    "StepKind",
    "StepSource",
    "TextElement",
    "index_elements",
    "parse_element",
    "parse_elements",
]
