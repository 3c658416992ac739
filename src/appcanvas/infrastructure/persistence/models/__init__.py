"""SQLAlchemy models for the AppCanvas metadata tables.

All models inherit from the Base class defined in database.py and are
created on startup by ``init_database``.
"""

from appcanvas.infrastructure.persistence.models.column import ColumnModel
from appcanvas.infrastructure.persistence.models.table import TableModel
from appcanvas.infrastructure.persistence.models.app_database import DatabaseModel

__all__ = [
    "ColumnModel",
    "DatabaseModel",
    "TableModel",
]
