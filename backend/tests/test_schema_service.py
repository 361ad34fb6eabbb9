"""
GreenLog Backend — Schema Service Tests
=========================================

What:  Tests for table/column introspection, validated projection and
       whole-schema reset.

What we test:
    ✅ Hidden tables (alembic_version, demotable) are never listed
    ✅ Identifiers match case-insensitively and come back canonical
    ✅ Unknown tables/columns are rejected before any SQL runs
    ✅ Projection is capped at 25 rows
    ✅ Table groups cover the schema; PostgreSQL drops cascade to constraints
"""

import pytest
from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import DropTable

from greenlog.exceptions import NotFoundError, ValidationError
from greenlog.models.tables import TABLE_GROUPS, appuser, metadata
from greenlog.services.schema_service import schema_service
from greenlog.services.task_service import task_service
from greenlog.services.user_service import user_service

ALL_TABLES = [
    "appuser",
    "garden_log",
    "garden_type",
    "plant",
    "plant_family",
    "plant_info",
    "plant_log",
    "seed_type",
    "soil",
    "tasks",
    "user_has_plant",
    "user_has_task",
]


async def _create_hidden_tables(db):
    async with db.connection() as conn:
        await conn.execute(text("CREATE TABLE demotable (id INTEGER)"))
        await conn.execute(text("CREATE TABLE alembic_version (version_num VARCHAR(32))"))
        await conn.commit()


class TestIntrospection:

    @pytest.mark.asyncio
    async def test_list_tables_hides_denylisted(self, database):
        await _create_hidden_tables(database)

        assert await schema_service.list_tables(database) == ALL_TABLES

    @pytest.mark.asyncio
    async def test_list_columns_in_table_order(self, database):
        assert await schema_service.list_columns(database, "APPUSER") == [
            "user_id",
            "first_name",
            "last_name",
        ]

    @pytest.mark.asyncio
    async def test_list_columns_of_unknown_table(self, database):
        with pytest.raises(NotFoundError):
            await schema_service.list_columns(database, "no_such_table")

    @pytest.mark.asyncio
    async def test_hidden_table_has_no_columns(self, database):
        await _create_hidden_tables(database)

        with pytest.raises(NotFoundError):
            await schema_service.list_columns(database, "demotable")


class TestProjection:

    @pytest.mark.asyncio
    async def test_selected_columns_canonical_and_deduplicated(self, seeded):
        result = await schema_service.project(seeded, "AppUser", ["FIRST_NAME", "user_id", "first_name"])

        assert result["columns"] == ["first_name", "user_id"]
        assert len(result["data"]) == 10
        assert ["Ericson", 1] in result["data"]

    @pytest.mark.asyncio
    async def test_at_most_25_rows(self, database):
        for task_id in range(1, 31):
            await task_service.insert_task(database, task_id, "Daily", f"Task {task_id}")

        result = await schema_service.project(database, "tasks", ["task_id"])

        assert len(result["data"]) == 25

    @pytest.mark.asyncio
    async def test_unknown_table(self, database):
        with pytest.raises(ValidationError) as exc_info:
            await schema_service.project(database, "appuser; DROP TABLE appuser", ["user_id"])

        assert exc_info.value.field == "tableName"
        assert await user_service.count_users(database) == 0

    @pytest.mark.asyncio
    async def test_unknown_column(self, database):
        with pytest.raises(ValidationError) as exc_info:
            await schema_service.project(database, "appuser", ["user_id", "password"])

        assert exc_info.value.field == "columns"

    @pytest.mark.asyncio
    async def test_hidden_table_is_rejected(self, database):
        await _create_hidden_tables(database)

        with pytest.raises(ValidationError):
            await schema_service.project(database, "alembic_version", ["version_num"])

    @pytest.mark.asyncio
    async def test_no_columns(self, database):
        with pytest.raises(ValidationError):
            await schema_service.project(database, "appuser", [])


class TestWholeSchema:

    @pytest.mark.asyncio
    async def test_initiate_all_empties_every_table(self, seeded):
        await schema_service.initiate_all(seeded)

        assert await user_service.count_users(seeded) == 0
        assert await schema_service.list_tables(seeded) == ALL_TABLES

    @pytest.mark.asyncio
    async def test_populate_all_twice(self, seeded):
        await schema_service.populate_all(seeded)

        assert await user_service.count_users(seeded) == 10
        assert len(await task_service.list_tasks(seeded)) == 5


class TestTableDefinitions:

    def test_metadata_covers_every_visible_table(self):
        assert sorted(metadata.tables) == ALL_TABLES

    def test_groups_partition_the_schema(self):
        grouped = [t.name for name, group in TABLE_GROUPS.items() if name != "all" for t in group]
        assert sorted(grouped) == ALL_TABLES

    def test_postgresql_drop_removes_referencing_constraints(self):
        assert str(DropTable(appuser).compile(dialect=postgresql.dialect())).strip() == (
            "DROP TABLE appuser CASCADE"
        )
        assert "CASCADE" not in str(DropTable(appuser).compile(dialect=sqlite.dialect()))
