"""Tenant store registry.

Owns the lifecycle of logical databases: each one is a metadata row plus
an isolated storage namespace.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from appcanvas.core.coercion import utcnow
from appcanvas.core.exceptions import (
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationFailedError,
)
from appcanvas.core.logging import get_logger
from appcanvas.domain.services.namespace_generator import NamespaceGenerator
from appcanvas.infrastructure.persistence.models import DatabaseModel
from appcanvas.infrastructure.persistence.repositories import DatabaseRepository
from appcanvas.infrastructure.storage import NamespaceSession, StorageDriver

logger = get_logger(__name__)

# Failures of the storage backend itself, as opposed to our own errors
STORAGE_ERRORS = (OSError, SQLAlchemyError)


class TenantStoreRegistry:
    """Creates, destroys and opens tenant databases."""

    def __init__(self, session: AsyncSession, driver: StorageDriver) -> None:
        """Initialize the registry.

        Args:
            session: Metadata database session.
            driver: Storage driver holding the namespaces.
        """
        self.session = session
        self.driver = driver
        self.repository = DatabaseRepository(session)

    async def create(self, owner_id: str, name: str) -> DatabaseModel:
        """Create a database and allocate its namespace.

        Args:
            owner_id: The owning user's id.
            name: Display name; must be unique among the owner's active databases.

        Returns:
            The created database.

        Raises:
            ValidationFailedError: If the name is blank.
            ConflictError: If the name or the generated namespace id is taken.
            StorageUnavailableError: If the namespace cannot be allocated.
        """
        if not name or not name.strip():
            raise ValidationFailedError("Database name is required")

        if await self.repository.active_name_exists(owner_id, name):
            raise ConflictError(f"A database named '{name}' already exists")

        namespace_id = NamespaceGenerator.generate(owner_id, name)
        database = DatabaseModel(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=name,
            status="active",
            namespace_id=namespace_id,
            tables=[],
        )

        try:
            await self.repository.create(database)
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(
                f"Namespace '{namespace_id}' is already in use"
            ) from e

        try:
            async with self.acquire(database) as namespace:
                await namespace.probe()
        except Exception:
            await self.session.rollback()
            logger.error(
                "Namespace allocation failed, database metadata rolled back",
                owner_id=owner_id,
                namespace=namespace_id,
            )
            raise

        await self.session.commit()

        logger.info(
            "Database created",
            database_id=database.id,
            owner_id=owner_id,
            namespace=database.namespace_id,
        )
        return database

    async def destroy(self, database_id: str, owner_id: str) -> None:
        """Drop a database's namespace, then its metadata.

        If the namespace cannot be dropped the database is kept with
        ``status="error"`` so the owner can retry.

        Raises:
            NotFoundError: If the owner has no such database.
            StorageUnavailableError: If the namespace drop fails.
        """
        database = await self.repository.get_by_id_for_owner(database_id, owner_id)
        if database is None:
            raise NotFoundError(f"Database '{database_id}' not found")

        try:
            await self.driver.drop_namespace(database.namespace_id)
        except STORAGE_ERRORS as e:
            database.status = "error"
            database.updated_at = utcnow()
            await self.session.commit()
            logger.error(
                "Namespace drop failed, database marked as error",
                database_id=database_id,
                namespace=database.namespace_id,
                error=str(e),
            )
            raise StorageUnavailableError(
                f"Could not drop storage of database '{database_id}'"
            ) from e

        await self.repository.delete(database)
        await self.session.commit()

        logger.info("Database destroyed", database_id=database_id, owner_id=owner_id)

    async def get(self, database_id: str, owner_id: str) -> DatabaseModel:
        """Get one of the owner's active databases.

        Raises:
            NotFoundError: If the owner has no such active database.
        """
        database = await self.repository.get_by_id_for_owner(database_id, owner_id)
        if database is None or not database.is_active:
            raise NotFoundError(f"Database '{database_id}' not found")
        return database

    async def list(self, owner_id: str) -> list[DatabaseModel]:
        """List the owner's active databases, most recently updated first."""
        return await self.repository.list_active(owner_id)

    @asynccontextmanager
    async def acquire(self, database: DatabaseModel) -> AsyncIterator[NamespaceSession]:
        """Open a namespace session for exactly one operation.

        The session is released on every exit path. Backend failures
        surface as ``StorageUnavailableError``; errors raised by the
        caller's block propagate unchanged.

        Example:
            async with registry.acquire(database) as namespace:
                await namespace.create_container("tbl_x")
        """
        try:
            async with self.driver.session(database.namespace_id) as namespace:
                yield namespace
        except STORAGE_ERRORS as e:
            logger.error(
                "Namespace session failed",
                database_id=database.id,
                namespace=database.namespace_id,
                error=str(e),
            )
            raise StorageUnavailableError(
                f"Storage of database '{database.id}' is unavailable"
            ) from e
