"""Tests for RecordService."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from appcanvas.core.exceptions import NotFoundError, ValidationFailedError
from appcanvas.domain.entities import QueryAction
from appcanvas.domain.services import OwnerScopedDataSource


@pytest_asyncio.fixture
async def people(registry, schema_service, owner_id):
    """A database with a People table of every column type."""
    database = await registry.create(owner_id, "CRM")
    table = await schema_service.add_table(database, "People")
    for name, column_type in [
        ("name", "string"),
        ("age", "number"),
        ("vip", "boolean"),
        ("joined", "date"),
    ]:
        await schema_service.add_column(database, table.id, name, column_type)
    return database, table


async def seed(record_service, owner_id, people, rows):
    database, table = people
    return [await record_service.insert(owner_id, database.id, table.id, row) for row in rows]


class TestInsert:
    @pytest.mark.asyncio
    async def test_fields_are_coerced(self, record_service, owner_id, people):
        database, table = people
        record = await record_service.insert(
            owner_id,
            database.id,
            table.id,
            {"name": 42, "age": "37", "vip": "true", "joined": "2024-01-02T03:04:05Z"},
        )

        assert record["name"] == "42"
        assert record["age"] == 37.0
        assert record["vip"] is True
        assert record["joined"] == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["37abc", {}, None, float("nan")])
    async def test_unparseable_numbers_become_zero(self, record_service, owner_id, people, raw):
        database, table = people
        record = await record_service.insert(owner_id, database.id, table.id, {"age": raw})
        assert record["age"] == 0.0

    @pytest.mark.asyncio
    async def test_missing_fields_get_defaults(self, record_service, owner_id, people):
        database, table = people
        record = await record_service.insert(owner_id, database.id, table.id, {})

        assert record["name"] == ""
        assert record["age"] == 0.0
        assert record["vip"] is False
        assert isinstance(record["joined"], datetime)
        assert record["id"]

    @pytest.mark.asyncio
    async def test_unknown_fields_are_dropped(self, record_service, owner_id, people):
        database, table = people
        record = await record_service.insert(
            owner_id, database.id, table.id, {"name": "Ada", "nickname": "Countess"}
        )

        assert "nickname" not in record
        assert set(record) == {"id", "name", "age", "vip", "joined"}

    @pytest.mark.asyncio
    async def test_id_field_cannot_replace_identity(self, record_service, owner_id, people):
        database, table = people
        record = await record_service.insert(
            owner_id, database.id, table.id, {"id": "A1", "name": "Ada"}
        )

        assert record["id"] != "A1"
        updated = await record_service.update(
            owner_id, database.id, table.id, record["id"], {"id": "B2", "age": 5}
        )
        assert updated["id"] == record["id"]
        assert await record_service.delete_many(owner_id, database.id, table.id, [record["id"]]) == 1

    @pytest.mark.asyncio
    async def test_other_owner_cannot_insert(self, record_service, other_owner_id, people):
        database, table = people
        with pytest.raises(NotFoundError):
            await record_service.insert(other_owner_id, database.id, table.id, {"name": "Eve"})

    @pytest.mark.asyncio
    async def test_missing_table(self, record_service, owner_id, people):
        database, _ = people
        with pytest.raises(NotFoundError):
            await record_service.insert(owner_id, database.id, "missing", {})


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_partial_update(self, record_service, owner_id, people):
        database, table = people
        (record,) = await seed(record_service, owner_id, people, [{"name": "Ada", "age": 36}])

        updated = await record_service.update(
            owner_id, database.id, table.id, record["id"], {"age": "37", "nickname": "x"}
        )

        assert updated["age"] == 37.0
        assert updated["name"] == "Ada"
        assert "nickname" not in updated

    @pytest.mark.asyncio
    async def test_update_missing_record(self, record_service, owner_id, people):
        database, table = people
        with pytest.raises(NotFoundError):
            await record_service.update(owner_id, database.id, table.id, "missing", {"age": 1})

    @pytest.mark.asyncio
    async def test_delete_many_skips_missing_ids(self, record_service, owner_id, people):
        database, table = people
        first, second = await seed(record_service, owner_id, people, [{"name": "A"}, {"name": "B"}])

        deleted = await record_service.delete_many(
            owner_id, database.id, table.id, [first["id"], "missing", first["id"]]
        )

        assert deleted == 1
        remaining = await record_service.list_records(owner_id, database.id, table.id)
        assert [r["id"] for r in remaining] == [second["id"]]


class TestQuery:
    @pytest_asyncio.fixture
    async def seeded(self, record_service, owner_id, people):
        await seed(
            record_service,
            owner_id,
            people,
            [
                {"name": "Ada", "age": 36, "vip": True},
                {"name": "Grace", "age": 85},
                {"name": "Linus", "age": 21, "vip": True},
            ],
        )
        return people

    @pytest.mark.asyncio
    async def test_list_in_insertion_order(self, record_service, owner_id, seeded):
        database, table = seeded
        records = await record_service.list_records(owner_id, database.id, table.id)
        assert [r["name"] for r in records] == ["Ada", "Grace", "Linus"]

    @pytest.mark.asyncio
    async def test_count(self, record_service, owner_id, seeded):
        database, table = seeded
        filters = [{"column": "age", "operator": "greater_than", "value": "30"}]

        assert await record_service.query(owner_id, database.id, table.id, filters, "count") == {
            "count": 2
        }

    @pytest.mark.asyncio
    async def test_value(self, record_service, owner_id, seeded):
        database, table = seeded
        filters = [{"column": "vip", "operator": "equals", "value": "true"}]

        result = await record_service.query(
            owner_id, database.id, table.id, filters, QueryAction.VALUE, "name"
        )
        assert result == {"name": "Ada"}

    @pytest.mark.asyncio
    async def test_value_without_match(self, record_service, owner_id, seeded):
        database, table = seeded
        filters = [{"column": "name", "operator": "equals", "value": "Nobody"}]

        result = await record_service.query(owner_id, database.id, table.id, filters, "value", "name")
        assert result == {}

    @pytest.mark.asyncio
    async def test_values(self, record_service, owner_id, seeded):
        database, table = seeded
        filters = [
            {"column": "age", "operator": "less_than", "value": 50},
            {"column": "name", "operator": "contains", "value": "a"},
        ]

        result = await record_service.query(owner_id, database.id, table.id, filters, "values", "name")
        assert result == [{"name": "Ada"}]

    @pytest.mark.asyncio
    async def test_no_filters_matches_all(self, record_service, owner_id, seeded):
        database, table = seeded
        result = await record_service.query(owner_id, database.id, table.id, None, "values", "age")
        assert result == [{"age": 36.0}, {"age": 85.0}, {"age": 21.0}]

    @pytest.mark.asyncio
    async def test_invalid_action(self, record_service, owner_id, seeded):
        database, table = seeded
        with pytest.raises(ValidationFailedError) as exc_info:
            await record_service.query(owner_id, database.id, table.id, [], "sum", "age")
        assert exc_info.value.details[0]["allowed"] == ["count", "value", "values"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["value", "values"])
    async def test_action_requires_column(self, record_service, owner_id, seeded, action):
        database, table = seeded
        with pytest.raises(ValidationFailedError):
            await record_service.query(owner_id, database.id, table.id, [], action)

    @pytest.mark.asyncio
    async def test_owner_scoped_data_source(self, record_service, owner_id, other_owner_id, seeded):
        database, table = seeded
        mine = OwnerScopedDataSource(record_service, owner_id)
        theirs = OwnerScopedDataSource(record_service, other_owner_id)

        rows = await mine.find_records(database.id, table.id, [])
        assert len(rows) == 3
        assert await mine.query(database.id, table.id, [], QueryAction.COUNT) == {"count": 3}
        with pytest.raises(NotFoundError):
            await theirs.find_records(database.id, table.id, [])
