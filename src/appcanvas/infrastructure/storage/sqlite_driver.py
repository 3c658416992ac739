"""SQLite storage driver: one database file per namespace.

Every session gets its own engine without pooling, runs in a single
transaction and is disposed when the session scope exits.
"""

import json
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from urllib.parse import quote

from sqlalchemy import URL, bindparam, text
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine
from sqlalchemy.pool import NullPool

from appcanvas.core.exceptions import StorageUnavailableError
from appcanvas.core.filters import Predicate, compile_to_sql
from appcanvas.core.logging import get_logger
from appcanvas.infrastructure.persistence.container_builder import ContainerBuilder
from appcanvas.infrastructure.storage.base import NamespaceSession, StorageDriver

logger = get_logger(__name__)

SQLITE_FILE_SUFFIXES = ("", "-wal", "-shm", "-journal")


def _row_to_document(row: Any) -> dict[str, Any]:
    document = json.loads(row.data) if row.data else {}
    return {**document, "id": row.id}


class SQLiteNamespaceSession(NamespaceSession):
    """Namespace session over one SQLite connection."""

    def __init__(self, connection: AsyncConnection) -> None:
        self.connection = connection

    async def create_container(self, container: str) -> None:
        ddl = ContainerBuilder.build_create_container_ddl(container)
        await self.connection.execute(text(ddl))
        logger.debug("Container created", container=container)

    async def drop_container(self, container: str) -> None:
        ddl = ContainerBuilder.build_drop_container_ddl(container)
        await self.connection.execute(text(ddl))
        logger.debug("Container dropped", container=container)

    async def insert_document(
        self, container: str, document_id: str, document: dict[str, Any]
    ) -> dict[str, Any]:
        insert_sql = f'INSERT INTO {ContainerBuilder.quote(container)} ("id", "data") VALUES (:id, :data)'
        await self.connection.execute(
            text(insert_sql), {"id": document_id, "data": json.dumps(document)}
        )
        return {**document, "id": document_id}

    async def get_document(self, container: str, document_id: str) -> dict[str, Any] | None:
        select_sql = f'SELECT "id", "data" FROM {ContainerBuilder.quote(container)} WHERE "id" = :id'
        result = await self.connection.execute(text(select_sql), {"id": document_id})
        row = result.fetchone()
        return _row_to_document(row) if row is not None else None

    async def update_document(
        self, container: str, document_id: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        current = await self.get_document(container, document_id)
        if current is None:
            return None

        current.pop("id", None)
        current.update(fields)

        update_sql = f'UPDATE {ContainerBuilder.quote(container)} SET "data" = :data WHERE "id" = :id'
        await self.connection.execute(
            text(update_sql), {"id": document_id, "data": json.dumps(current)}
        )
        return {**current, "id": document_id}

    async def delete_documents(self, container: str, document_ids: Iterable[str]) -> int:
        ids = list(dict.fromkeys(document_ids))
        if not ids:
            return 0

        delete_sql = text(
            f'DELETE FROM {ContainerBuilder.quote(container)} WHERE "id" IN :ids'
        ).bindparams(bindparam("ids", expanding=True))
        result = await self.connection.execute(delete_sql, {"ids": ids})
        return result.rowcount or 0

    async def find_documents(
        self, container: str, predicate: Predicate, limit: int | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        where, params = compile_to_sql(predicate)
        select_sql = (
            f'SELECT "id", "data" FROM {ContainerBuilder.quote(container)} '
            f"WHERE {where} ORDER BY rowid"
        )
        if limit is not None:
            select_sql += " LIMIT :row_limit"
            params = {**params, "row_limit": limit}

        result = await self.connection.stream(text(select_sql), params)
        try:
            async for row in result:
                yield _row_to_document(row)
        finally:
            await result.close()

    async def count_documents(self, container: str, predicate: Predicate) -> int:
        where, params = compile_to_sql(predicate)
        count_sql = f"SELECT COUNT(*) FROM {ContainerBuilder.quote(container)} WHERE {where}"
        result = await self.connection.execute(text(count_sql), params)
        return int(result.scalar_one())

    async def unset_field(self, container: str, field: str) -> int:
        path = '$."' + field.replace('"', '\\"') + '"'
        update_sql = (
            f'UPDATE {ContainerBuilder.quote(container)} SET "data" = json_remove("data", :path) '
            'WHERE json_type("data", :path) IS NOT NULL'
        )
        result = await self.connection.execute(text(update_sql), {"path": path})
        return result.rowcount or 0


class SQLiteStorageDriver(StorageDriver):
    """Stores each namespace in its own SQLite file under a root directory."""

    def __init__(self, root: str | Path, echo: bool = False) -> None:
        self.root = Path(root)
        self.echo = echo

    def namespace_path(self, namespace: str) -> Path:
        """Path of the SQLite file backing a namespace.

        Namespace ids embed opaque owner ids, so every character outside
        ``[A-Za-z0-9_.~-]`` is percent-encoded in the file name. The mapping
        is one-to-one and never leaves ``root``.
        """
        if not namespace:
            raise StorageUnavailableError("Namespace id is required")
        return self.root / f"{quote(namespace, safe='')}.db"

    @asynccontextmanager
    async def session(self, namespace: str) -> AsyncIterator[NamespaceSession]:
        path = self.namespace_path(namespace)
        path.parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(
            URL.create("sqlite+aiosqlite", database=str(path)),
            echo=self.echo,
            poolclass=NullPool,
        )
        try:
            async with engine.begin() as connection:
                yield SQLiteNamespaceSession(connection)
        finally:
            await engine.dispose()

    async def drop_namespace(self, namespace: str) -> None:
        path = self.namespace_path(namespace)
        for suffix in SQLITE_FILE_SUFFIXES:
            path.with_name(path.name + suffix).unlink(missing_ok=True)
        logger.info("Namespace dropped", namespace=namespace, path=str(path))

    async def namespace_exists(self, namespace: str) -> bool:
        return self.namespace_path(namespace).exists()
