"""Pydantic schemas for database, table and column endpoints."""

from datetime import datetime

from pydantic import Field

from appcanvas.core.coercion import ColumnType
from appcanvas.infrastructure.api.schemas.common_schemas import ApiModel


class CreateDatabaseRequest(ApiModel):
    """Request body for creating a database."""

    name: str = Field(..., min_length=1, max_length=255, description="Database name")


class CreateTableRequest(ApiModel):
    """Request body for adding a table."""

    name: str = Field(..., min_length=1, max_length=255, description="Table name")


class CreateColumnRequest(ApiModel):
    """Request body for adding a column."""

    name: str = Field(..., min_length=1, max_length=255, description="Column name")
    type: ColumnType = Field(default=ColumnType.STRING, description="Column type")


class ColumnResponse(ApiModel):
    id: str
    name: str
    type: str
    order: int


class TableResponse(ApiModel):
    id: str
    name: str
    position: int
    columns: list[ColumnResponse] = Field(default_factory=list)


class DatabaseResponse(ApiModel):
    """A database with its tables and columns."""

    id: str
    name: str
    status: str
    namespace_id: str
    tables: list[TableResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class DatabaseListItem(ApiModel):
    """A database in a listing, without its schema."""

    id: str
    name: str
    namespace_id: str
    created_at: datetime
    updated_at: datetime
