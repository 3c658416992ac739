"""Repository for records of user tables.

Records are schemaless documents in a namespace container; the write path
here is the only place the column schema is enforced.
"""

import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import aclosing
from typing import Any

from appcanvas.core.coercion import ValueCoercer
from appcanvas.core.exceptions import NotFoundError
from appcanvas.core.filters import MatchAll, Predicate
from appcanvas.core.logging import get_logger
from appcanvas.infrastructure.persistence.models import TableModel
from appcanvas.infrastructure.storage import NamespaceSession

logger = get_logger(__name__)


class RecordRepository:
    """Typed record operations on one namespace session.

    The session is owned by the caller; the repository never opens or
    closes it.
    """

    def __init__(self, session: NamespaceSession) -> None:
        """Initialize the repository with a namespace session.

        Args:
            session: An acquired namespace session.
        """
        self.session = session

    def _to_record(self, table: TableModel, document: dict[str, Any]) -> dict[str, Any]:
        types = {column.name: column.type for column in table.columns}
        return {
            key: ValueCoercer.from_storage(value, types[key]) if key in types else value
            for key, value in document.items()
        }

    async def list(self, table: TableModel) -> AsyncIterator[dict[str, Any]]:
        """Yield every record of the table in insertion order."""
        async for record in self.find(table, MatchAll()):
            yield record

    async def find(
        self, table: TableModel, predicate: Predicate, limit: int | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield the records matching a predicate in insertion order."""
        async for document in self.session.find_documents(
            table.container_name, predicate, limit=limit
        ):
            yield self._to_record(table, document)

    async def first(self, table: TableModel, predicate: Predicate) -> dict[str, Any] | None:
        """Return the first record matching a predicate, or None."""
        async with aclosing(self.find(table, predicate, limit=1)) as records:
            async for record in records:
                return record
        return None

    async def count(self, table: TableModel, predicate: Predicate) -> int:
        """Count the records matching a predicate."""
        return await self.session.count_documents(table.container_name, predicate)

    async def get(self, table: TableModel, record_id: str) -> dict[str, Any]:
        """Get one record by id.

        Raises:
            NotFoundError: If no record has this id.
        """
        document = await self.session.get_document(table.container_name, record_id)
        if document is None:
            raise NotFoundError(f"Record '{record_id}' not found")
        return self._to_record(table, document)

    async def insert(self, table: TableModel, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a record built from the table's columns.

        Every column gets the caller's value if present, else the type
        default, coerced to the column type. Unknown fields are dropped.

        Args:
            table: The target table.
            fields: Caller-supplied field values.

        Returns:
            The stored record including its generated ``id``.
        """
        document: dict[str, Any] = {}
        for column in table.columns:
            if column.name in fields:
                value = ValueCoercer.coerce(fields[column.name], column.type)
            else:
                value = ValueCoercer.default_for(column.type)
            document[column.name] = ValueCoercer.to_storage(value)

        record_id = str(uuid.uuid4())
        stored = await self.session.insert_document(table.container_name, record_id, document)
        logger.debug("Record inserted", table_id=table.id, record_id=record_id)
        return self._to_record(table, stored)

    async def update(
        self, table: TableModel, record_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply a partial update; keys not naming a column are ignored.

        Raises:
            NotFoundError: If no record has this id.
        """
        changes = {
            column.name: ValueCoercer.to_storage(
                ValueCoercer.coerce(fields[column.name], column.type)
            )
            for column in table.columns
            if column.name in fields
        }

        stored = await self.session.update_document(table.container_name, record_id, changes)
        if stored is None:
            raise NotFoundError(f"Record '{record_id}' not found")
        logger.debug("Record updated", table_id=table.id, record_id=record_id, fields=list(changes))
        return self._to_record(table, stored)

    async def delete_many(self, table: TableModel, record_ids: Iterable[str]) -> int:
        """Delete records by id; missing ids are skipped.

        Returns:
            The number of records actually deleted.
        """
        deleted = await self.session.delete_documents(table.container_name, record_ids)
        logger.debug("Records deleted", table_id=table.id, deleted=deleted)
        return deleted
