"""Pytest configuration for all tests."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from appcanvas.domain.services import RecordService, SchemaService, TenantStoreRegistry
from appcanvas.infrastructure.persistence import models  # noqa: F401
from appcanvas.infrastructure.persistence.database import Base
from appcanvas.infrastructure.storage import InMemoryStorageDriver, NamespaceSession
from appcanvas.infrastructure.storage.memory_driver import InMemoryNamespaceSession

OWNER_ID = "6651f0c2a9e4b7d0aaaa1111"
OTHER_OWNER_ID = "6651f0c2a9e4b7d0bbbb2222"


class FlakyNamespaceSession(InMemoryNamespaceSession):
    """In-memory session whose listed operations fail like a broken disk."""

    def __init__(self, containers, failures: set[str]) -> None:
        super().__init__(containers)
        self.failures = failures

    def _check(self, operation: str) -> None:
        if operation in self.failures:
            raise OSError(f"{operation} failed")

    async def create_container(self, container: str) -> None:
        self._check("create_container")
        await super().create_container(container)

    async def drop_container(self, container: str) -> None:
        self._check("drop_container")
        await super().drop_container(container)

    async def unset_field(self, container: str, field: str) -> int:
        self._check("unset_field")
        return await super().unset_field(container, field)


class FlakyStorageDriver(InMemoryStorageDriver):
    """In-memory driver with switchable failures.

    Add operation names to ``failures`` to make them raise ``OSError``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.failures: set[str] = set()

    @asynccontextmanager
    async def session(self, namespace: str) -> AsyncIterator[NamespaceSession]:
        if "session" in self.failures:
            raise OSError("cannot open namespace")
        containers = self.namespaces.setdefault(namespace, {})
        self.active_sessions += 1
        try:
            yield FlakyNamespaceSession(containers, self.failures)
        finally:
            self.active_sessions -= 1

    async def drop_namespace(self, namespace: str) -> None:
        if "drop_namespace" in self.failures:
            raise OSError("cannot drop namespace")
        await super().drop_namespace(namespace)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test metadata session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def storage_driver() -> FlakyStorageDriver:
    """In-memory storage driver; healthy until failures are switched on."""
    return FlakyStorageDriver()


@pytest.fixture
def registry(db_session: AsyncSession, storage_driver: FlakyStorageDriver) -> TenantStoreRegistry:
    return TenantStoreRegistry(db_session, storage_driver)


@pytest.fixture
def schema_service(db_session: AsyncSession, registry: TenantStoreRegistry) -> SchemaService:
    return SchemaService(db_session, registry)


@pytest.fixture
def record_service(db_session: AsyncSession, registry: TenantStoreRegistry) -> RecordService:
    return RecordService(db_session, registry)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, storage_driver: FlakyStorageDriver
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database and storage dependencies."""
    from appcanvas.infrastructure.api.app import app
    from appcanvas.infrastructure.api.dependencies import get_storage_driver
    from appcanvas.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_storage_driver] = lambda: storage_driver

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Owner-Id": OWNER_ID},
    ) as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def other_owner_id() -> str:
    return OTHER_OWNER_ID
