"""Repository for logical database metadata.

Provides owner-scoped CRUD operations for the databases table.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from appcanvas.infrastructure.persistence.models import DatabaseModel


class DatabaseRepository:
    """Repository for database metadata operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a metadata session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, database: DatabaseModel) -> DatabaseModel:
        """Add a database and flush it so constraint violations surface here."""
        self.session.add(database)
        await self.session.flush()
        return database

    async def get_by_id_for_owner(self, database_id: str, owner_id: str) -> DatabaseModel | None:
        """Get a database by id, only if the owner matches.

        Databases in any status are returned, so ``error`` databases can be
        destroyed again.

        Args:
            database_id: The database id.
            owner_id: The requesting owner.

        Returns:
            The database model if found and owned, None otherwise.
        """
        result = await self.session.execute(
            select(DatabaseModel).where(
                DatabaseModel.id == database_id,
                DatabaseModel.owner_id == owner_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_active(self, owner_id: str) -> list[DatabaseModel]:
        """List the owner's active databases, most recently updated first."""
        result = await self.session.execute(
            select(DatabaseModel)
            .where(DatabaseModel.owner_id == owner_id, DatabaseModel.status == "active")
            .order_by(DatabaseModel.updated_at.desc())
        )
        return list(result.scalars().all())

    async def active_name_exists(self, owner_id: str, name: str) -> bool:
        """Check whether the owner already has an active database with this exact name."""
        result = await self.session.execute(
            select(DatabaseModel.id)
            .where(
                DatabaseModel.owner_id == owner_id,
                DatabaseModel.name == name,
                DatabaseModel.status == "active",
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def delete(self, database: DatabaseModel) -> None:
        """Delete a database together with its tables and columns."""
        await self.session.delete(database)
        await self.session.flush()
