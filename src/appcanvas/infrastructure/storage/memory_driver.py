"""In-memory storage driver for tests and development.

Namespaces are plain dicts of containers; containers map document ids to
documents. Nothing survives the process.
"""

import copy
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Any

from appcanvas.core.exceptions import InternalError
from appcanvas.core.filters import Predicate, PredicateEvaluator
from appcanvas.core.logging import get_logger
from appcanvas.infrastructure.storage.base import NamespaceSession, StorageDriver

logger = get_logger(__name__)

Container = dict[str, dict[str, Any]]


class InMemoryNamespaceSession(NamespaceSession):
    """Namespace session over a dict of containers."""

    def __init__(self, containers: dict[str, Container]) -> None:
        self.containers = containers

    def _container(self, container: str) -> Container:
        try:
            return self.containers[container]
        except KeyError:
            raise InternalError(f"No such container: {container}") from None

    async def create_container(self, container: str) -> None:
        self.containers.setdefault(container, {})

    async def drop_container(self, container: str) -> None:
        self.containers.pop(container, None)

    async def insert_document(
        self, container: str, document_id: str, document: dict[str, Any]
    ) -> dict[str, Any]:
        documents = self._container(container)
        if document_id in documents:
            raise InternalError(f"Duplicate document id: {document_id}")
        documents[document_id] = copy.deepcopy(document)
        return {**document, "id": document_id}

    async def get_document(self, container: str, document_id: str) -> dict[str, Any] | None:
        document = self._container(container).get(document_id)
        if document is None:
            return None
        return {**copy.deepcopy(document), "id": document_id}

    async def update_document(
        self, container: str, document_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        document = self._container(container).get(document_id)
        if document is None:
            return None
        document.update(copy.deepcopy(fields))
        return {**copy.deepcopy(document), "id": document_id}

    async def delete_documents(self, container: str, document_ids: Iterable[str]) -> int:
        documents = self._container(container)
        deleted = 0
        for document_id in dict.fromkeys(document_ids):
            if documents.pop(document_id, None) is not None:
                deleted += 1
        return deleted

    async def find_documents(
        self, container: str, predicate: Predicate, limit: int | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        evaluator = PredicateEvaluator(predicate)
        yielded = 0
        # Snapshot so callers may write while iterating
        for document_id, document in list(self._container(container).items()):
            if limit is not None and yielded >= limit:
                return
            if evaluator.matches(document):
                yielded += 1
                yield {**copy.deepcopy(document), "id": document_id}

    async def count_documents(self, container: str, predicate: Predicate) -> int:
        evaluator = PredicateEvaluator(predicate)
        return sum(1 for document in self._container(container).values() if evaluator.matches(document))

    async def unset_field(self, container: str, field: str) -> int:
        changed = 0
        for document in self._container(container).values():
            if field in document:
                del document[field]
                changed += 1
        return changed


class InMemoryStorageDriver(StorageDriver):
    """Keeps every namespace in process memory.

    ``active_sessions`` counts sessions currently open, which lets tests
    assert that every acquired session was released.
    """

    def __init__(self) -> None:
        self.namespaces: dict[str, dict[str, Container]] = {}
        self.active_sessions = 0

    @asynccontextmanager
    async def session(self, namespace: str) -> AsyncIterator[NamespaceSession]:
        containers = self.namespaces.setdefault(namespace, {})
        self.active_sessions += 1
        try:
            yield InMemoryNamespaceSession(containers)
        finally:
            self.active_sessions -= 1

    async def drop_namespace(self, namespace: str) -> None:
        self.namespaces.pop(namespace, None)
        logger.info("Namespace dropped", namespace=namespace)

    async def namespace_exists(self, namespace: str) -> bool:
        return namespace in self.namespaces
