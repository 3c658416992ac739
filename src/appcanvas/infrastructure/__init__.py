"""Infrastructure layer - External dependencies and implementations.

This layer contains:
- The metadata database (SQLAlchemy)
- Tenant storage drivers (SQLite files, in-memory)
- API routes (FastAPI)
"""

from appcanvas.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    close_database,
    get_db_manager,
    get_db_session,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_manager",
    "get_db_session",
    "init_database",
    "close_database",
]
