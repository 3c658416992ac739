"""Records API routes.

Provides record CRUD and filtered queries on the tables of an owner's
databases.
"""

from typing import Any

from fastapi import APIRouter, Body, status

from appcanvas.core.logging import get_logger
from appcanvas.infrastructure.api.dependencies import OwnerId, Records
from appcanvas.infrastructure.api.schemas import (
    DeleteRecordsRequest,
    DeleteRecordsResult,
    Envelope,
    QueryRequest,
    QueryResponse,
    serialize_record,
)

logger = get_logger(__name__)

router = APIRouter()

RECORDS_PATH = "/{database_id}/tables/{table_id}/records"


@router.get(RECORDS_PATH, response_model=Envelope[list[dict[str, Any]]])
async def list_records(
    database_id: str, table_id: str, owner_id: OwnerId, records: Records
) -> Envelope[list[dict[str, Any]]]:
    """List every record of a table in insertion order."""
    items = await records.list_records(owner_id, database_id, table_id)
    return Envelope(data=[serialize_record(record) for record in items])


@router.post(
    RECORDS_PATH,
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[dict[str, Any]],
    responses={404: {"description": "Database or table not found"}},
)
async def create_record(
    database_id: str,
    table_id: str,
    owner_id: OwnerId,
    records: Records,
    fields: dict[str, Any] = Body(default_factory=dict),
) -> Envelope[dict[str, Any]]:
    """Insert a record; the body maps column names to values."""
    record = await records.insert(owner_id, database_id, table_id, fields)
    return Envelope(message="Record created successfully", data=serialize_record(record))


@router.put(
    RECORDS_PATH + "/{record_id}",
    response_model=Envelope[dict[str, Any]],
    responses={404: {"description": "Database, table or record not found"}},
)
async def update_record(
    database_id: str,
    table_id: str,
    record_id: str,
    owner_id: OwnerId,
    records: Records,
    fields: dict[str, Any] = Body(default_factory=dict),
) -> Envelope[dict[str, Any]]:
    """Update the given fields of a record."""
    record = await records.update(owner_id, database_id, table_id, record_id, fields)
    return Envelope(message="Record updated successfully", data=serialize_record(record))


@router.post(RECORDS_PATH + "/delete-multiple", response_model=Envelope[DeleteRecordsResult])
async def delete_records(
    database_id: str,
    table_id: str,
    body: DeleteRecordsRequest,
    owner_id: OwnerId,
    records: Records,
) -> Envelope[DeleteRecordsResult]:
    """Delete records by id; unknown ids are ignored."""
    deleted = await records.delete_many(owner_id, database_id, table_id, body.record_ids)
    return Envelope(
        message=f"{deleted} record(s) deleted successfully",
        data=DeleteRecordsResult(deleted_count=deleted),
    )


@router.post(
    "/{database_id}/tables/{table_id}/query",
    response_model=QueryResponse,
    responses={400: {"description": "Invalid action or missing column"}},
)
async def query_table(
    database_id: str,
    table_id: str,
    body: QueryRequest,
    owner_id: OwnerId,
    records: Records,
) -> QueryResponse:
    """Run a count, value or values query over filtered records."""
    result = await records.query(
        owner_id,
        database_id,
        table_id,
        [item.to_filter() for item in body.filters],
        body.action,
        body.column,
    )
    if isinstance(result, list):
        data: Any = [serialize_record(row) for row in result]
        record_count = len(result)
    else:
        data = serialize_record(result)
        record_count = 1

    logger.debug("Query executed", table_id=table_id, action=body.action, record_count=record_count)
    return QueryResponse(data=data, record_count=record_count)
