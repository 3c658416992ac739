"""Shared response envelope and base schema."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base for API schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(ApiModel, Generic[T]):
    """Standard response envelope."""

    success: bool = Field(default=True, description="Whether the request succeeded")
    message: str | None = Field(default=None, description="Human-readable outcome")
    data: T | None = Field(default=None, description="Response payload")


class ErrorResponse(ApiModel):
    """Body of every error response."""

    success: bool = False
    message: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error kind")
    details: list[dict] = Field(default_factory=list, description="Per-field details")
