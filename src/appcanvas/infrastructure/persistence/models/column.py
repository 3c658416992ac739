"""SQLAlchemy model for the db_columns table."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from appcanvas.infrastructure.persistence.database import Base

if TYPE_CHECKING:
    from appcanvas.infrastructure.persistence.models.table import TableModel


class ColumnModel(Base):
    """A typed column of a table.

    Attributes:
        id: Primary key (UUID string).
        table_id: Owning table.
        name: Column name, unique within its table.
        type: One of string, number, boolean, date.
        order: Creation sequence number; never reused within the table.
    """

    __tablename__ = "db_columns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    table_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("db_tables.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="string")
    order: Mapped[int] = mapped_column("order", Integer, nullable=False)

    table: Mapped["TableModel"] = relationship(back_populates="columns")

    def __repr__(self) -> str:
        return f"<Column(id={self.id}, name={self.name}, type={self.type}, order={self.order})>"
