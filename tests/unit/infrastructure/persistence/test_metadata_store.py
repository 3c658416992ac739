"""Tests for MetadataStore."""

import pytest
import pytest_asyncio

from appcanvas.core.exceptions import NotFoundError
from appcanvas.infrastructure.persistence.metadata_store import MetadataStore
from appcanvas.infrastructure.persistence.models import DatabaseModel


@pytest_asyncio.fixture
async def database(db_session, owner_id):
    database = DatabaseModel(
        id="db-1",
        owner_id=owner_id,
        name="CRM",
        namespace_id="udb_aaaa1111_crm_000001",
        tables=[],
    )
    db_session.add(database)
    await db_session.flush()
    return database


@pytest.fixture
def store(db_session):
    return MetadataStore(db_session)


class TestTables:
    @pytest.mark.asyncio
    async def test_positions_append(self, store, database):
        first = await store.add_table(database, "Leads")
        second = await store.add_table(database, "Deals")

        assert (first.position, second.position) == (0, 1)
        assert first.database_id == database.id
        assert first.column_order_seq == -1

    @pytest.mark.asyncio
    async def test_remove_table(self, store, database):
        table = await store.add_table(database, "Leads")

        removed = await store.remove_table(database, table.id)

        assert removed is table
        assert database.tables == []
        with pytest.raises(NotFoundError):
            store.get_table(database, table.id)

    @pytest.mark.asyncio
    async def test_remove_missing_table(self, store, database):
        with pytest.raises(NotFoundError):
            await store.remove_table(database, "missing")


class TestColumnOrder:
    @pytest_asyncio.fixture
    async def table(self, store, database):
        return await store.add_table(database, "Leads")

    async def add(self, store, database, table, *names):
        return [await store.add_column(database, table.id, name, "string") for name in names]

    @pytest.mark.asyncio
    async def test_orders_start_at_zero(self, store, database, table):
        columns = await self.add(store, database, table, "A", "B", "C")
        assert [c.order for c in columns] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_removed_middle_column_leaves_gap(self, store, database, table):
        _, b, _ = await self.add(store, database, table, "A", "B", "C")

        await store.remove_column(database, table.id, b.id)
        (d,) = await self.add(store, database, table, "D")

        assert d.order == 3
        assert [(c.name, c.order) for c in table.columns] == [("A", 0), ("C", 2), ("D", 3)]

    @pytest.mark.asyncio
    async def test_highest_order_is_never_reused(self, store, database, table):
        _, _, c = await self.add(store, database, table, "A", "B", "C")

        await store.remove_column(database, table.id, c.id)
        (d,) = await self.add(store, database, table, "D")

        assert d.order == 3
        assert table.column_order_seq == 3

    @pytest.mark.asyncio
    async def test_get_column(self, store, database, table):
        (a,) = await self.add(store, database, table, "A")

        assert store.get_column(table, a.id) is a
        with pytest.raises(NotFoundError):
            store.get_column(table, "missing")
        with pytest.raises(NotFoundError):
            await store.remove_column(database, table.id, "missing")
