"""
GreenLog Backend — Relational Schema
======================================

What:  SQLAlchemy Core tables for everything the application reads and
       writes, plus the named groups of tables the "initiate" endpoints
       reset together.
Why:   The schema is a fixed contract. The services build their statements
       from these Table objects, the reset operations create and drop them
       through `metadata`, and Alembic compares migrations against it.
How:   Core `Table` objects on one `MetaData` (the services work on
       connections, not ORM sessions). Identifiers are unquoted lowercase so
       they read the same in PostgreSQL and SQLite.

Foreign keys:
    Link tables cascade deletes from both parents. Lookup references
    (family, seed type, soil, garden type) are set to NULL when the lookup
    row goes away.
"""

from typing import Dict, Sequence, Tuple

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.schema import DropTable

metadata = MetaData()

# ── Users & Tasks ─────────────────────────────────────────────────────────
appuser = Table(
    "appuser",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=False),
    Column("first_name", String(20)),
    Column("last_name", String(20)),
)

tasks = Table(
    "tasks",
    metadata,
    Column("task_id", Integer, primary_key=True, autoincrement=False),
    Column("frequency", String(20)),
    Column("details", String(200)),
)

user_has_task = Table(
    "user_has_task",
    metadata,
    Column(
        "user_id",
        Integer,
        ForeignKey("appuser.user_id", ondelete="CASCADE"),
        primary_key=True,
        autoincrement=False,
    ),
    Column(
        "task_id",
        Integer,
        ForeignKey("tasks.task_id", ondelete="CASCADE"),
        primary_key=True,
        autoincrement=False,
    ),
)

# ── Plants ────────────────────────────────────────────────────────────────
plant_family = Table(
    "plant_family",
    metadata,
    Column("family_name", String(50), primary_key=True),
    Column("common_traits", String(200)),
)

seed_type = Table(
    "seed_type",
    metadata,
    Column("seed_type", String(30), primary_key=True),
    Column("germination_days", Integer),
)

plant_info = Table(
    "plant_info",
    metadata,
    Column("species", String(50), primary_key=True),
    Column("family_name", String(50), ForeignKey("plant_family.family_name", ondelete="SET NULL")),
    Column("seed_type", String(30), ForeignKey("seed_type.seed_type", ondelete="SET NULL")),
    Column("sunlight", String(20)),
)

# pH comes back as float on every driver
soil = Table(
    "soil",
    metadata,
    Column("soil_id", Integer, primary_key=True, autoincrement=False),
    Column("soil_type", String(30)),
    Column("ph", Numeric(3, 1, asdecimal=False)),
)

# No foreign key to plant_info: a plant may name a species not catalogued yet
plant = Table(
    "plant",
    metadata,
    Column("plant_id", Integer, primary_key=True, autoincrement=False),
    Column("species", String(50), primary_key=True),
    Column("name", String(50)),
)

plant_log = Table(
    "plant_log",
    metadata,
    Column("log_id", Integer, primary_key=True, autoincrement=False),
    Column("plant_id", Integer, nullable=False),
    Column("species", String(50), nullable=False),
    Column("planting_date", Date),
    Column("growth_stage", String(20)),
    Column("harvest_date", Date),
    Column("soil_id", Integer, ForeignKey("soil.soil_id", ondelete="SET NULL")),
    ForeignKeyConstraint(
        ["plant_id", "species"], ["plant.plant_id", "plant.species"], ondelete="CASCADE"
    ),
)

user_has_plant = Table(
    "user_has_plant",
    metadata,
    Column(
        "user_id",
        Integer,
        ForeignKey("appuser.user_id", ondelete="CASCADE"),
        primary_key=True,
        autoincrement=False,
    ),
    Column("plant_id", Integer, primary_key=True, autoincrement=False),
    Column("species", String(50), primary_key=True),
    ForeignKeyConstraint(
        ["plant_id", "species"], ["plant.plant_id", "plant.species"], ondelete="CASCADE"
    ),
)

# ── Garden ────────────────────────────────────────────────────────────────
garden_type = Table(
    "garden_type",
    metadata,
    Column("garden_type", String(30), primary_key=True),
    Column("description", String(200)),
)

garden_log = Table(
    "garden_log",
    metadata,
    Column("log_id", Integer, primary_key=True, autoincrement=False),
    Column(
        "user_id", Integer, ForeignKey("appuser.user_id", ondelete="CASCADE"), nullable=False
    ),
    Column("garden_type", String(30), ForeignKey("garden_type.garden_type", ondelete="SET NULL")),
    Column("log_date", Date),
    Column("notes", String(200)),
)

# ── Groups ────────────────────────────────────────────────────────────────
TABLE_GROUPS: Dict[str, Tuple[Table, ...]] = {
    "appusers": (appuser,),
    "tasks": (tasks, user_has_task),
    "plants": (plant_family, seed_type, plant_info, soil, plant, plant_log, user_has_plant),
    "garden": (garden_type, garden_log),
    "all": tuple(metadata.sorted_tables),
}

# Tables that live in the same database but are not part of the garden schema
# (migration bookkeeping, the course's demo table). Hidden from introspection.
EXCLUDED_TABLES = frozenset({"alembic_version", "demotable"})


@compiles(DropTable, "postgresql")
def _drop_table_cascade(element, compiler, **kw):
    """
    PostgreSQL refuses to drop a table other tables still reference.

    CASCADE removes only the referencing constraints; the rows in those
    tables stay.
    """
    return compiler.visit_drop_table(element, **kw) + " CASCADE"


async def reset_tables(conn: AsyncConnection, tables: Sequence[Table]) -> None:
    """
    Drop (if present) then recreate `tables`, and commit.

    Only the given tables lose their rows. On SQLite, dropping a referenced
    table with foreign keys enforced deletes the referencing rows elsewhere,
    so enforcement is switched off for the reset. The pragma is ignored
    inside a transaction; it runs before the first statement and again after
    the commit.
    """
    tables = list(tables)
    sqlite = conn.dialect.name == "sqlite"
    if sqlite:
        await conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
    try:
        await conn.run_sync(
            lambda sync_conn: metadata.drop_all(sync_conn, tables=tables, checkfirst=True)
        )
        await conn.run_sync(lambda sync_conn: metadata.create_all(sync_conn, tables=tables))
        await conn.commit()
    finally:
        if sqlite:
            await conn.rollback()
            await conn.exec_driver_sql("PRAGMA foreign_keys=ON")
            await conn.commit()
