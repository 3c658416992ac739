"""SQLAlchemy model for the databases table.

A database is a user-owned logical database whose records live in an
isolated storage namespace.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from appcanvas.core.coercion import utcnow
from appcanvas.infrastructure.persistence.database import Base
from appcanvas.infrastructure.persistence.models.table import TableModel

DATABASE_STATUSES = ("active", "deleted", "error")


class DatabaseModel(Base):
    """SQLAlchemy model for the databases table.

    Attributes:
        id: Primary key (UUID string).
        owner_id: Id of the owning user.
        name: Display name, unique per owner among active databases.
        status: One of active, deleted, error.
        namespace_id: Storage namespace id; globally unique, never changed.
        tables: Tables in display order.
        created_at: Timestamp when the database was created.
        updated_at: Timestamp when the database was last updated.
    """

    __tablename__ = "databases"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Database ID (UUID)",
    )
    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Owning user ID",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="active",
        comment="active, deleted or error",
    )
    namespace_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Physical storage namespace",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    tables: Mapped[list[TableModel]] = relationship(
        back_populates="database",
        lazy="selectin",
        order_by=TableModel.position,
        cascade="all, delete-orphan",
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self) -> str:
        return f"<Database(id={self.id}, name={self.name}, namespace={self.namespace_id})>"
