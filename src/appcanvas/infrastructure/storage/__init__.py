"""Tenant storage drivers."""

from appcanvas.core.config import Settings
from appcanvas.infrastructure.storage.base import PROBE_CONTAINER, NamespaceSession, StorageDriver
from appcanvas.infrastructure.storage.memory_driver import InMemoryStorageDriver
from appcanvas.infrastructure.storage.sqlite_driver import SQLiteStorageDriver


def create_storage_driver(settings: Settings) -> StorageDriver:
    """Build the storage driver selected by settings."""
    if settings.storage_driver == "memory":
        return InMemoryStorageDriver()
    return SQLiteStorageDriver(settings.namespace_root, echo=settings.db_echo)


__all__ = [
    "PROBE_CONTAINER",
    "InMemoryStorageDriver",
    "NamespaceSession",
    "SQLiteStorageDriver",
    "StorageDriver",
    "create_storage_driver",
]
