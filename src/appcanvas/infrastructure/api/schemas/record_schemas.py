"""Pydantic schemas for record and query endpoints."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import Field

from appcanvas.core.coercion import format_datetime
from appcanvas.domain.entities import FilterSpec
from appcanvas.infrastructure.api.schemas.common_schemas import ApiModel, Envelope


def serialize_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Render a record for JSON, with dates in their stored format."""
    return {
        key: format_datetime(value) if isinstance(value, datetime) else value
        for key, value in record.items()
    }


class DeleteRecordsRequest(ApiModel):
    """Request body for bulk record deletion."""

    record_ids: list[str] = Field(..., min_length=1, description="Ids of records to delete")


class DeleteRecordsResult(ApiModel):
    deleted_count: int


class QueryRequest(ApiModel):
    """Request body for a filtered table query."""

    filters: list[FilterSpec] = Field(default_factory=list)
    action: str = Field(default="value", description="count, value or values")
    column: str | None = Field(default=None, description="Column read by value and values")


class QueryResponse(Envelope[Any]):
    """Query result plus the number of result entries."""

    record_count: int = Field(..., description="Entries in a values result, 1 otherwise")
