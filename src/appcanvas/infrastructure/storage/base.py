"""Base abstractions for tenant storage drivers.

A driver owns physical namespaces (one per logical database). Work against
a namespace happens through a short-lived session that holds containers
(one per table) of free-form JSON documents.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable
from contextlib import AbstractAsyncContextManager
from typing import Any

from appcanvas.core.filters import Predicate

PROBE_CONTAINER = "_init"


class NamespaceSession(ABC):
    """Exclusive-use session scoped to one namespace.

    Documents are returned as dicts with their identity under ``"id"``.
    """

    @abstractmethod
    async def create_container(self, container: str) -> None:
        """Create a container (no-op if it already exists)."""
        ...

    @abstractmethod
    async def drop_container(self, container: str) -> None:
        """Drop a container; dropping an absent container is not an error."""
        ...

    @abstractmethod
    async def insert_document(
        self, container: str, document_id: str, document: dict[str, Any]
    ) -> dict[str, Any]:
        """Insert one document and return it."""
        ...

    @abstractmethod
    async def get_document(self, container: str, document_id: str) -> dict[str, Any] | None:
        """Fetch one document by identity."""
        ...

    @abstractmethod
    async def update_document(
        self, container: str, document_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Merge fields into a document; return the result or None if absent."""
        ...

    @abstractmethod
    async def delete_documents(self, container: str, document_ids: Iterable[str]) -> int:
        """Delete documents by identity; return how many existed."""
        ...

    @abstractmethod
    def find_documents(
        self, container: str, predicate: Predicate, limit: int | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        """Lazily yield matching documents in insertion order."""
        ...

    @abstractmethod
    async def count_documents(self, container: str, predicate: Predicate) -> int:
        """Count matching documents."""
        ...

    @abstractmethod
    async def unset_field(self, container: str, field: str) -> int:
        """Remove a field from every document; return how many changed."""
        ...

    async def probe(self) -> None:
        """Force physical allocation of the namespace.

        Some engines defer creating a namespace until the first write, so a
        throwaway container is created and dropped.
        """
        await self.create_container(PROBE_CONTAINER)
        await self.drop_container(PROBE_CONTAINER)


class StorageDriver(ABC):
    """Abstract base class for tenant storage drivers."""

    @abstractmethod
    def session(self, namespace: str) -> AbstractAsyncContextManager[NamespaceSession]:
        """Open a session for exactly one operation against a namespace."""
        ...

    @abstractmethod
    async def drop_namespace(self, namespace: str) -> None:
        """Drop a whole namespace; absence is not an error."""
        ...

    @abstractmethod
    async def namespace_exists(self, namespace: str) -> bool:
        """Check whether a namespace has been allocated."""
        ...
