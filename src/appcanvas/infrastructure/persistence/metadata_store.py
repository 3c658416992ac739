"""Table and column definitions of logical databases.

The store edits the ORM graph of one database inside the caller's session.
It never commits: the schema service pairs every mutation with its
physical effect and decides when to commit or roll back.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from appcanvas.core.coercion import ColumnType
from appcanvas.core.exceptions import NotFoundError
from appcanvas.core.logging import get_logger
from appcanvas.infrastructure.persistence.models import ColumnModel, DatabaseModel, TableModel

logger = get_logger(__name__)


class MetadataStore:
    """Mutations of a database's table and column metadata.

    No uniqueness validation happens here.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def get_table(self, database: DatabaseModel, table_id: str) -> TableModel:
        """Find a table of the database.

        Raises:
            NotFoundError: If the database has no such table.
        """
        for table in database.tables:
            if table.id == table_id:
                return table
        raise NotFoundError(f"Table '{table_id}' not found")

    def get_column(self, table: TableModel, column_id: str) -> ColumnModel:
        """Find a column of the table.

        Raises:
            NotFoundError: If the table has no such column.
        """
        for column in table.columns:
            if column.id == column_id:
                return column
        raise NotFoundError(f"Column '{column_id}' not found")

    async def add_table(self, database: DatabaseModel, name: str) -> TableModel:
        """Append an empty table to the database."""
        position = max((table.position for table in database.tables), default=-1) + 1
        table = TableModel(
            id=str(uuid.uuid4()),
            name=name,
            position=position,
            column_order_seq=-1,
            columns=[],
        )
        database.tables.append(table)
        await self.session.flush()
        logger.debug("Table metadata added", database_id=database.id, table_id=table.id)
        return table

    async def remove_table(self, database: DatabaseModel, table_id: str) -> TableModel:
        """Remove a table with its columns and return it."""
        table = self.get_table(database, table_id)
        database.tables.remove(table)
        await self.session.flush()
        logger.debug("Table metadata removed", database_id=database.id, table_id=table_id)
        return table

    async def add_column(
        self,
        database: DatabaseModel,
        table_id: str,
        name: str,
        column_type: ColumnType | str,
    ) -> ColumnModel:
        """Append a column with the next order number of its table.

        Orders are never reused: the table remembers the highest order it
        has handed out, including orders of deleted columns.
        """
        table = self.get_table(database, table_id)
        highest = max((column.order for column in table.columns), default=-1)
        order = max(highest, table.column_order_seq) + 1

        column = ColumnModel(
            id=str(uuid.uuid4()),
            name=name,
            type=ColumnType(column_type).value,
            order=order,
        )
        table.columns.append(column)
        table.column_order_seq = order
        await self.session.flush()
        logger.debug("Column metadata added", table_id=table_id, column_id=column.id, order=order)
        return column

    async def remove_column(
        self, database: DatabaseModel, table_id: str, column_id: str
    ) -> ColumnModel:
        """Remove a column and return it."""
        table = self.get_table(database, table_id)
        column = self.get_column(table, column_id)
        table.columns.remove(column)
        await self.session.flush()
        logger.debug("Column metadata removed", table_id=table_id, column_id=column_id)
        return column
