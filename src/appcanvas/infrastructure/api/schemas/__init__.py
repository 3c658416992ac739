"""API Schemas for request/response validation."""

from appcanvas.infrastructure.api.schemas.common_schemas import ApiModel, Envelope, ErrorResponse
from appcanvas.infrastructure.api.schemas.database_schemas import (
    ColumnResponse,
    CreateColumnRequest,
    CreateDatabaseRequest,
    CreateTableRequest,
    DatabaseListItem,
    DatabaseResponse,
    TableResponse,
)
from appcanvas.infrastructure.api.schemas.record_schemas import (
    DeleteRecordsRequest,
    DeleteRecordsResult,
    QueryRequest,
    QueryResponse,
    serialize_record,
)
from appcanvas.infrastructure.api.schemas.render_schemas import (
    ElementEvaluation,
    EvaluateRequest,
    EvaluateResult,
    RowEvaluation,
)

__all__ = [
    "ApiModel",
    "ColumnResponse",
    "CreateColumnRequest",
    "CreateDatabaseRequest",
    "CreateTableRequest",
    "DatabaseListItem",
    "DatabaseResponse",
    "DeleteRecordsRequest",
    "DeleteRecordsResult",
    "ElementEvaluation",
    "Envelope",
    "ErrorResponse",
    "EvaluateRequest",
    "EvaluateResult",
    "QueryRequest",
    "QueryResponse",
    "RowEvaluation",
    "TableResponse",
    "serialize_record",
]
