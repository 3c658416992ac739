"""SQLAlchemy model for the db_tables table."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from appcanvas.infrastructure.persistence.database import Base
from appcanvas.infrastructure.persistence.container_builder import ContainerBuilder
from appcanvas.infrastructure.persistence.models.column import ColumnModel

if TYPE_CHECKING:
    from appcanvas.infrastructure.persistence.models.app_database import DatabaseModel


class TableModel(Base):
    """A table of a logical database.

    Records of the table are stored in the container named by
    ``container_name``, derived from the table id.

    Attributes:
        id: Primary key (UUID string).
        database_id: Owning database.
        name: Table name, unique within its database (case-sensitive).
        position: Display position within the database.
        column_order_seq: Highest column order ever handed out (-1 if none).
        columns: Columns ordered by ``order``.
    """

    __tablename__ = "db_tables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    database_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("databases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    column_order_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=-1)

    database: Mapped["DatabaseModel"] = relationship(back_populates="tables")
    columns: Mapped[list[ColumnModel]] = relationship(
        back_populates="table",
        lazy="selectin",
        order_by=ColumnModel.order,
        cascade="all, delete-orphan",
    )

    @property
    def container_name(self) -> str:
        return ContainerBuilder.generate_container_name(self.id)

    def __repr__(self) -> str:
        return f"<Table(id={self.id}, name={self.name})>"
