"""Persistence repositories for metadata and record operations."""

from appcanvas.infrastructure.persistence.repositories.database_repository import (
    DatabaseRepository,
)
from appcanvas.infrastructure.persistence.repositories.record_repository import (
    RecordRepository,
)

__all__ = [
    "DatabaseRepository",
    "RecordRepository",
]
