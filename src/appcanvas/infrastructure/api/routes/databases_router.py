"""Databases API routes.

Provides endpoints for managing an owner's databases, their tables and
their columns.
"""

from fastapi import APIRouter, status

from appcanvas.core.logging import get_logger
from appcanvas.infrastructure.api.dependencies import OwnerId, Registry, Schemas
from appcanvas.infrastructure.api.schemas import (
    ColumnResponse,
    CreateColumnRequest,
    CreateDatabaseRequest,
    CreateTableRequest,
    DatabaseListItem,
    DatabaseResponse,
    Envelope,
    TableResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get("", status_code=status.HTTP_200_OK, response_model=Envelope[list[DatabaseListItem]])
async def list_databases(owner_id: OwnerId, registry: Registry) -> Envelope[list[DatabaseListItem]]:
    """List the owner's active databases, most recently updated first."""
    databases = await registry.list(owner_id)
    return Envelope(data=[DatabaseListItem.model_validate(db) for db in databases])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[DatabaseResponse],
    responses={
        400: {"description": "Validation error"},
        409: {"description": "Database name already in use"},
        503: {"description": "Storage unavailable"},
    },
)
async def create_database(
    body: CreateDatabaseRequest, owner_id: OwnerId, registry: Registry
) -> Envelope[DatabaseResponse]:
    """Create a database and allocate its storage namespace."""
    database = await registry.create(owner_id, body.name)
    return Envelope(
        message="Database created successfully",
        data=DatabaseResponse.model_validate(database),
    )


@router.get(
    "/{database_id}",
    response_model=Envelope[DatabaseResponse],
    responses={404: {"description": "Database not found"}},
)
async def get_database(
    database_id: str, owner_id: OwnerId, registry: Registry
) -> Envelope[DatabaseResponse]:
    database = await registry.get(database_id, owner_id)
    return Envelope(data=DatabaseResponse.model_validate(database))


@router.delete(
    "/{database_id}",
    response_model=Envelope[None],
    responses={
        404: {"description": "Database not found"},
        503: {"description": "Storage unavailable"},
    },
)
async def delete_database(database_id: str, owner_id: OwnerId, registry: Registry) -> Envelope[None]:
    """Drop a database's storage and delete it."""
    await registry.destroy(database_id, owner_id)
    return Envelope(message="Database deleted successfully")


@router.get("/{database_id}/tables", response_model=Envelope[list[TableResponse]])
async def list_tables(
    database_id: str, owner_id: OwnerId, registry: Registry
) -> Envelope[list[TableResponse]]:
    database = await registry.get(database_id, owner_id)
    return Envelope(data=[TableResponse.model_validate(table) for table in database.tables])


@router.post(
    "/{database_id}/tables",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[TableResponse],
    responses={
        404: {"description": "Database not found"},
        409: {"description": "Table name already in use"},
    },
)
async def add_table(
    database_id: str,
    body: CreateTableRequest,
    owner_id: OwnerId,
    registry: Registry,
    schemas: Schemas,
) -> Envelope[TableResponse]:
    database = await registry.get(database_id, owner_id)
    table = await schemas.add_table(database, body.name)
    return Envelope(message="Table created successfully", data=TableResponse.model_validate(table))


@router.delete(
    "/{database_id}/tables/{table_id}",
    response_model=Envelope[None],
    responses={404: {"description": "Database or table not found"}},
)
async def remove_table(
    database_id: str,
    table_id: str,
    owner_id: OwnerId,
    registry: Registry,
    schemas: Schemas,
) -> Envelope[None]:
    database = await registry.get(database_id, owner_id)
    await schemas.remove_table(database, table_id)
    return Envelope(message="Table deleted successfully")


@router.get("/{database_id}/tables/{table_id}/columns", response_model=Envelope[list[ColumnResponse]])
async def list_columns(
    database_id: str,
    table_id: str,
    owner_id: OwnerId,
    registry: Registry,
    schemas: Schemas,
) -> Envelope[list[ColumnResponse]]:
    """List a table's columns by creation order."""
    database = await registry.get(database_id, owner_id)
    table = schemas.store.get_table(database, table_id)
    columns = sorted(table.columns, key=lambda column: column.order)
    return Envelope(data=[ColumnResponse.model_validate(column) for column in columns])


@router.post(
    "/{database_id}/tables/{table_id}/columns",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[ColumnResponse],
    responses={
        404: {"description": "Database or table not found"},
        409: {"description": "Column name already in use"},
    },
)
async def add_column(
    database_id: str,
    table_id: str,
    body: CreateColumnRequest,
    owner_id: OwnerId,
    registry: Registry,
    schemas: Schemas,
) -> Envelope[ColumnResponse]:
    database = await registry.get(database_id, owner_id)
    column = await schemas.add_column(database, table_id, body.name, body.type.value)
    return Envelope(message="Column created successfully", data=ColumnResponse.model_validate(column))


@router.delete(
    "/{database_id}/tables/{table_id}/columns/{column_id}",
    response_model=Envelope[None],
    responses={404: {"description": "Database, table or column not found"}},
)
async def remove_column(
    database_id: str,
    table_id: str,
    column_id: str,
    owner_id: OwnerId,
    registry: Registry,
    schemas: Schemas,
) -> Envelope[None]:
    database = await registry.get(database_id, owner_id)
    await schemas.remove_column(database, table_id, column_id)
    return Envelope(message="Column deleted successfully")
