"""Record service for business logic.

Resolves owner-scoped databases and tables, opens one namespace session
per operation and runs the record repository inside it.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from appcanvas.core.exceptions import ValidationFailedError
from appcanvas.core.filters import Filter, compile_filters
from appcanvas.core.logging import get_logger
from appcanvas.domain.entities import QueryAction
from appcanvas.domain.services.tenant_store_registry import TenantStoreRegistry
from appcanvas.infrastructure.persistence.metadata_store import MetadataStore
from appcanvas.infrastructure.persistence.models import DatabaseModel, TableModel
from appcanvas.infrastructure.persistence.repositories import RecordRepository

logger = get_logger(__name__)

FilterInput = Filter | Mapping[str, Any]


class RecordService:
    """Service for records of an owner's tables."""

    def __init__(self, session: AsyncSession, registry: TenantStoreRegistry) -> None:
        self.session = session
        self.registry = registry
        self.store = MetadataStore(session)

    async def resolve(
        self, owner_id: str, database_id: str, table_id: str
    ) -> tuple[DatabaseModel, TableModel]:
        """Look up an owner's active database and one of its tables.

        Raises:
            NotFoundError: If either does not exist for this owner.
        """
        database = await self.registry.get(database_id, owner_id)
        return database, self.store.get_table(database, table_id)

    async def list_records(
        self, owner_id: str, database_id: str, table_id: str
    ) -> list[dict[str, Any]]:
        """All records of a table in insertion order."""
        database, table = await self.resolve(owner_id, database_id, table_id)
        async with self.registry.acquire(database) as namespace:
            repository = RecordRepository(namespace)
            return [record async for record in repository.list(table)]

    async def insert(
        self, owner_id: str, database_id: str, table_id: str, fields: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Insert a record shaped by the table's columns."""
        database, table = await self.resolve(owner_id, database_id, table_id)
        async with self.registry.acquire(database) as namespace:
            record = await RecordRepository(namespace).insert(table, dict(fields))
        logger.info("Record inserted", database_id=database_id, table_id=table_id, record_id=record["id"])
        return record

    async def update(
        self,
        owner_id: str,
        database_id: str,
        table_id: str,
        record_id: str,
        fields: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Apply a partial update to one record."""
        database, table = await self.resolve(owner_id, database_id, table_id)
        async with self.registry.acquire(database) as namespace:
            return await RecordRepository(namespace).update(table, record_id, dict(fields))

    async def delete_many(
        self, owner_id: str, database_id: str, table_id: str, record_ids: Iterable[str]
    ) -> int:
        """Delete records by id and return how many existed."""
        database, table = await self.resolve(owner_id, database_id, table_id)
        async with self.registry.acquire(database) as namespace:
            deleted = await RecordRepository(namespace).delete_many(table, record_ids)
        logger.info("Records deleted", database_id=database_id, table_id=table_id, deleted=deleted)
        return deleted

    async def find(
        self,
        owner_id: str,
        database_id: str,
        table_id: str,
        filters: Iterable[FilterInput] | None = None,
    ) -> list[dict[str, Any]]:
        """All records of a table matching the filters."""
        database, table = await self.resolve(owner_id, database_id, table_id)
        predicate = compile_filters(filters, table.columns)
        async with self.registry.acquire(database) as namespace:
            repository = RecordRepository(namespace)
            return [record async for record in repository.find(table, predicate)]

    async def query(
        self,
        owner_id: str,
        database_id: str,
        table_id: str,
        filters: Iterable[FilterInput] | None,
        action: QueryAction | str,
        column: str | None = None,
    ) -> Any:
        """Run a filtered count/value/values query.

        Returns:
            ``{"count": n}`` for count, ``{column: value}`` (or ``{}``) for
            value, ``[{column: value}, ...]`` for values.

        Raises:
            ValidationFailedError: On an unknown action or a missing column.
        """
        try:
            action = QueryAction(action)
        except ValueError:
            raise ValidationFailedError(
                f"Invalid query action '{action}'",
                details=[{"field": "action", "allowed": [a.value for a in QueryAction]}],
            ) from None

        if action is not QueryAction.COUNT and not column:
            raise ValidationFailedError(f"Query action '{action.value}' requires a column")

        database, table = await self.resolve(owner_id, database_id, table_id)
        predicate = compile_filters(filters, table.columns)

        async with self.registry.acquire(database) as namespace:
            repository = RecordRepository(namespace)

            if action is QueryAction.COUNT:
                return {"count": await repository.count(table, predicate)}

            if action is QueryAction.VALUE:
                record = await repository.first(table, predicate)
                if record is None or column not in record:
                    return {}
                return {column: record[column]}

            return [{column: record.get(column)} async for record in repository.find(table, predicate)]


class OwnerScopedDataSource:
    """Record reads for the calculation evaluator, limited to one owner."""

    def __init__(self, service: RecordService, owner_id: str) -> None:
        self.service = service
        self.owner_id = owner_id

    async def query(
        self,
        database_id: str,
        table_id: str,
        filters: list[Filter],
        action: QueryAction,
        column: str | None = None,
    ) -> Any:
        return await self.service.query(
            self.owner_id, database_id, table_id, filters, action, column
        )

    async def find_records(
        self, database_id: str, table_id: str, filters: list[Filter]
    ) -> list[dict[str, Any]]:
        return await self.service.find(self.owner_id, database_id, table_id, filters)
