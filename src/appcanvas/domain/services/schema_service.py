"""Schema service for business logic.

Pairs every table/column metadata mutation with its physical effect on
the database's namespace and keeps the two consistent on immediate failure.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from appcanvas.core.coercion import ColumnType, utcnow
from appcanvas.core.exceptions import ConflictError, ValidationFailedError
from appcanvas.core.logging import get_logger
from appcanvas.domain.services.tenant_store_registry import TenantStoreRegistry
from appcanvas.infrastructure.persistence.metadata_store import MetadataStore
from appcanvas.infrastructure.persistence.models import ColumnModel, DatabaseModel, TableModel

logger = get_logger(__name__)

# Record identity is exposed under this key
RESERVED_COLUMN_NAMES = frozenset({"id"})


class SchemaService:
    """Service for table and column definitions."""

    def __init__(self, session: AsyncSession, registry: TenantStoreRegistry) -> None:
        """Initialize the service.

        Args:
            session: Metadata database session.
            registry: Registry used to open namespace sessions.
        """
        self.session = session
        self.registry = registry
        self.store = MetadataStore(session)

    @staticmethod
    def _require_name(name: str | None, kind: str) -> str:
        if not name or not name.strip():
            raise ValidationFailedError(f"{kind} name is required")
        return name

    async def add_table(self, database: DatabaseModel, name: str) -> TableModel:
        """Add a table and create its container.

        Raises:
            ValidationFailedError: If the name is blank.
            ConflictError: If the database already has a table with this name.
            StorageUnavailableError: If the container cannot be created.
        """
        self._require_name(name, "Table")
        if any(table.name == name for table in database.tables):
            raise ConflictError(f"A table named '{name}' already exists")

        database_id = database.id
        table = await self.store.add_table(database, name)
        container = table.container_name
        try:
            async with self.registry.acquire(database) as namespace:
                await namespace.create_container(container)
        except Exception:
            await self.session.rollback()
            logger.error(
                "Container creation failed, table metadata rolled back",
                database_id=database_id,
                table_name=name,
            )
            raise

        database.updated_at = utcnow()
        await self.session.commit()
        logger.info("Table added", database_id=database_id, table_id=table.id, table_name=name)
        return table

    async def remove_table(self, database: DatabaseModel, table_id: str) -> None:
        """Remove a table and drop its container.

        Raises:
            NotFoundError: If the table does not exist.
            StorageUnavailableError: If the container cannot be dropped.
        """
        database_id = database.id
        table = await self.store.remove_table(database, table_id)
        container = table.container_name
        try:
            async with self.registry.acquire(database) as namespace:
                await namespace.drop_container(container)
        except Exception:
            await self.session.rollback()
            logger.error(
                "Container drop failed, table metadata rolled back",
                database_id=database_id,
                table_id=table_id,
            )
            raise

        database.updated_at = utcnow()
        await self.session.commit()
        logger.info("Table removed", database_id=database_id, table_id=table_id)

    async def add_column(
        self, database: DatabaseModel, table_id: str, name: str, column_type: str
    ) -> ColumnModel:
        """Add a column; containers are schemaless so nothing physical changes.

        Raises:
            NotFoundError: If the table does not exist.
            ValidationFailedError: If the name is blank, reserved or the type is unknown.
            ConflictError: If the table already has a column with this name.
        """
        table = self.store.get_table(database, table_id)
        self._require_name(name, "Column")
        if name in RESERVED_COLUMN_NAMES:
            raise ValidationFailedError(
                f"Column name '{name}' is reserved",
                details=[{"field": "name", "reserved": sorted(RESERVED_COLUMN_NAMES)}],
            )
        if column_type not in ColumnType.values():
            raise ValidationFailedError(
                f"Invalid column type '{column_type}'",
                details=[{"field": "type", "allowed": ColumnType.values()}],
            )
        if any(column.name == name for column in table.columns):
            raise ConflictError(f"A column named '{name}' already exists")

        column = await self.store.add_column(database, table_id, name, column_type)
        database.updated_at = utcnow()
        await self.session.commit()
        logger.info(
            "Column added",
            table_id=table_id,
            column_id=column.id,
            column_name=name,
            order=column.order,
        )
        return column

    async def remove_column(self, database: DatabaseModel, table_id: str, column_id: str) -> None:
        """Remove a column, then strip its field from stored records.

        The strip is best effort: the metadata change is already committed,
        so a failure is only logged.

        Raises:
            NotFoundError: If the table or column does not exist.
        """
        table = self.store.get_table(database, table_id)
        column = await self.store.remove_column(database, table_id, column_id)
        database.updated_at = utcnow()
        await self.session.commit()
        logger.info("Column removed", table_id=table_id, column_id=column_id)

        try:
            async with self.registry.acquire(database) as namespace:
                stripped = await namespace.unset_field(table.container_name, column.name)
        except Exception as e:
            logger.warning(
                "Could not strip removed column from records",
                table_id=table_id,
                column_name=column.name,
                error=str(e),
            )
            return

        logger.debug("Removed column stripped", table_id=table_id, records=stripped)
