"""Element documents.

An element tree is a closed set of variants (container, text, button, input,
image, heading). Each variant carries its own property bag; all of them may
own child elements, conditions and calculations.
"""

from collections.abc import Iterable
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from appcanvas.domain.entities.calculation import Calculation, Condition, DocumentModel, FilterSpec


class ElementProperties(DocumentModel):
    """Free-form properties shared by every element (styling, layout...)."""


class ContainerProperties(ElementProperties):
    pass


class TextProperties(ElementProperties):
    value: str = ""


class HeadingProperties(ElementProperties):
    value: str = ""
    level: int = 1


class ButtonProperties(ElementProperties):
    text: str = ""


class InputProperties(ElementProperties):
    value: Any = ""
    placeholder: str = ""
    input_type: str = "text"


class ImageProperties(ElementProperties):
    src: str = ""
    alt: str = ""


class RepeatingConfig(DocumentModel):
    """Binds a repeating container to a table, optionally filtered."""

    database_id: str | None = None
    table_id: str | None = None
    filters: list[FilterSpec] = Field(default_factory=list)


class PageParameter(DocumentModel):
    id: str | None = None
    name: str = ""
    value: Any = None


class PageConfig(DocumentModel):
    """Screen embedded by a page container and the parameters passed to it."""

    selected_page_id: str | None = None
    parameters: list[PageParameter] = Field(default_factory=list)


class BaseElement(DocumentModel):
    """Fields common to every element variant."""

    id: str
    render_type: Literal["fixed", "conditional"] = "fixed"
    conditions: list[Condition] = Field(default_factory=list)
    calculations: dict[str, Calculation] = Field(default_factory=dict)
    children: list["Element"] = Field(default_factory=list)

    def get_property(self, name: str) -> Any:
        """Read a property by its document key or attribute name."""
        properties: ElementProperties = getattr(self, "properties")
        by_alias = properties.model_dump(by_alias=True)
        if name in by_alias:
            return by_alias[name]
        return properties.model_dump().get(name)


class ContainerElement(BaseElement):
    type: Literal["container"]
    properties: ContainerProperties = Field(default_factory=ContainerProperties)
    content_type: Literal["fixed", "repeating", "page"] = "fixed"
    repeating_config: RepeatingConfig | None = None
    page_config: PageConfig | None = None

    @property
    def is_repeating(self) -> bool:
        return (
            self.content_type == "repeating"
            and self.repeating_config is not None
            and bool(self.repeating_config.database_id)
            and bool(self.repeating_config.table_id)
        )


class TextElement(BaseElement):
    type: Literal["text"]
    properties: TextProperties = Field(default_factory=TextProperties)


class ButtonElement(BaseElement):
    type: Literal["button"]
    properties: ButtonProperties = Field(default_factory=ButtonProperties)


class InputElement(BaseElement):
    type: Literal["input"]
    properties: InputProperties = Field(default_factory=InputProperties)


class ImageElement(BaseElement):
    type: Literal["image"]
    properties: ImageProperties = Field(default_factory=ImageProperties)


class HeadingElement(BaseElement):
    type: Literal["heading"]
    properties: HeadingProperties = Field(default_factory=HeadingProperties)


Element = Annotated[
    Union[
        ContainerElement,
        TextElement,
        ButtonElement,
        InputElement,
        ImageElement,
        HeadingElement,
    ],
    Field(discriminator="type"),
]

for _model in (
    BaseElement,
    ContainerElement,
    TextElement,
    ButtonElement,
    InputElement,
    ImageElement,
    HeadingElement,
):
    _model.model_rebuild()

_element_adapter: TypeAdapter[Any] = TypeAdapter(Element)
_element_list_adapter: TypeAdapter[list[Any]] = TypeAdapter(list[Element])


def parse_element(data: Any) -> BaseElement:
    """Validate one element document (including its subtree)."""
    return _element_adapter.validate_python(data)


def parse_elements(data: Any) -> list[BaseElement]:
    """Validate a list of element documents."""
    return _element_list_adapter.validate_python(data)


def index_elements(elements: Iterable[BaseElement]) -> dict[str, BaseElement]:
    """Build an id -> element index over whole trees."""
    index: dict[str, BaseElement] = {}
    stack = list(elements)
    while stack:
        element = stack.pop()
        index[element.id] = element
        stack.extend(element.children)
    return index
