"""
GreenLog Backend — Schema Introspection & Projection
======================================================

What:  Lists the garden tables and their columns, runs a caller-chosen column
       projection, and resets / seeds the whole schema at once.
Who:   Called by routes/schema.py.

Projection safety:
    Table and column names are identifiers, which SQL cannot bind as
    parameters. They are therefore checked against the live schema metadata
    (SQLAlchemy's inspector) and only the canonical names found there are
    used; SQLAlchemy Core renders and quotes them. Caller text never reaches
    the SQL string.
"""

import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import column, inspect, select, table
from sqlalchemy.ext.asyncio import AsyncConnection

from greenlog.database import Database
from greenlog.exceptions import NotFoundError, ValidationError
from greenlog.models.tables import EXCLUDED_TABLES, TABLE_GROUPS, reset_tables
from greenlog.services.garden_service import garden_service
from greenlog.services.plant_service import plant_service
from greenlog.services.queries import rows_to_lists
from greenlog.services.task_service import task_service
from greenlog.services.user_service import user_service

logger = logging.getLogger(__name__)

PROJECTION_LIMIT = 25


async def _table_names(conn: AsyncConnection) -> Dict[str, str]:
    """lowercase name → canonical name, for every visible table."""
    names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    return {name.lower(): name for name in names if name.lower() not in EXCLUDED_TABLES}


async def _column_names(conn: AsyncConnection, table_name: str) -> List[str]:
    columns = await conn.run_sync(
        lambda sync_conn: inspect(sync_conn).get_columns(table_name)
    )
    return [col["name"] for col in columns]


class SchemaService:
    """
    Whole-schema operations.

    Responsibilities:
        - list_tables(): visible table names, sorted
        - list_columns(): column names of one table, in table order
        - project(): first 25 rows of chosen columns of one table
        - initiate_all() / populate_all(): reset and seed every table
    """

    async def list_tables(self, db: Database) -> List[str]:
        async with db.connection() as conn:
            tables = await _table_names(conn)
        return sorted(tables.values())

    async def list_columns(self, db: Database, table_name: str) -> List[str]:
        """
        Raises:
            NotFoundError: no visible table with that name
        """
        async with db.connection() as conn:
            canonical = (await _table_names(conn)).get(table_name.lower())
            if canonical is None:
                raise NotFoundError(resource="table", resource_id=table_name)
            return await _column_names(conn, canonical)

    async def project(
        self, db: Database, table_name: str, columns: Sequence[str]
    ) -> Dict[str, Any]:
        """
        SELECT <columns> FROM <table> LIMIT 25, with both validated first.

        Returns:
            {"columns": [canonical column names], "data": [[...], ...]}

        Raises:
            ValidationError: unknown table, unknown column, or no columns
        """
        if not columns:
            raise ValidationError(message="Select at least one column", field="columns")

        async with db.connection() as conn:
            canonical_table = (await _table_names(conn)).get(table_name.lower())
            if canonical_table is None:
                raise ValidationError(
                    message=f"Unknown table '{table_name}'", field="tableName"
                )

            available = {name.lower(): name for name in await _column_names(conn, canonical_table)}
            selected: List[str] = []
            for requested in columns:
                canonical = available.get(requested.lower())
                if canonical is None:
                    raise ValidationError(
                        message=f"Unknown column '{requested}' for table '{canonical_table}'",
                        field="columns",
                    )
                if canonical not in selected:
                    selected.append(canonical)

            statement = (
                select(*[column(name) for name in selected])
                .select_from(table(canonical_table))
                .limit(PROJECTION_LIMIT)
            )
            result = await conn.execute(statement)
            rows = rows_to_lists(result)

        return {"columns": selected, "data": rows}

    async def initiate_all(self, db: Database) -> bool:
        """Drop and recreate every table of the schema."""
        async with db.connection() as conn:
            await reset_tables(conn, TABLE_GROUPS["all"])
        logger.info("Full schema reset")
        return True

    async def populate_all(self, db: Database) -> bool:
        """Seed every table, parents before children."""
        await user_service.populate(db)
        await task_service.populate(db)
        await plant_service.populate(db)
        await garden_service.populate(db)
        return True


schema_service = SchemaService()
