"""
GreenLog Backend — Garden Service
===================================

What:  Garden types, users' garden logs and the soil reference table.
Who:   Called by routes/garden.py.

Seeding note:
    Garden logs belong to users, so populate() expects the seed users to be
    present (POST /populate-appusers first). A missing user is a foreign-key
    violation, which aborts the batch instead of being skipped.
"""

import logging
from datetime import date
from typing import Any, List, Optional

from sqlalchemy import insert, select

from greenlog.database import Database
from greenlog.models.tables import TABLE_GROUPS, garden_log, garden_type, reset_tables, soil
from greenlog.services.queries import insert_seed_rows, rows_to_lists

logger = logging.getLogger(__name__)

SEED_GARDEN_TYPES = [
    ("Raised Bed", "Framed beds filled with amended soil"),
    ("Container", "Pots and planters on patios or balconies"),
    ("Greenhouse", "Enclosed, climate-controlled growing space"),
    ("Community Plot", "Shared allotment in a community garden"),
]

SEED_GARDEN_LOGS = [
    (1, 1, "Raised Bed", date(2024, 4, 2), "Planted tomato starts"),
    (2, 1, "Raised Bed", date(2024, 5, 10), "Added mulch around tomatoes"),
    (3, 2, "Container", date(2024, 4, 12), "Sowed basil in window boxes"),
    (4, 3, "Greenhouse", date(2024, 3, 28), "Cucumber seedlings transplanted"),
    (5, 4, "Community Plot", date(2024, 5, 3), "Harvested kale"),
]

class GardenService:
    """Data operations for `garden_type`, `garden_log` and `soil`."""

    async def list_soils(self, db: Database) -> List[List[Any]]:
        async with db.connection() as conn:
            result = await conn.execute(select(soil))
            return rows_to_lists(result)

    async def list_garden_types(self, db: Database) -> List[List[Any]]:
        async with db.connection() as conn:
            result = await conn.execute(select(garden_type))
            return rows_to_lists(result)

    async def list_garden_logs(self, db: Database) -> List[List[Any]]:
        async with db.connection() as conn:
            result = await conn.execute(select(garden_log))
            return rows_to_lists(result)

    async def initiate(self, db: Database) -> bool:
        async with db.connection() as conn:
            await reset_tables(conn, TABLE_GROUPS["garden"])
        logger.info("garden tables reset")
        return True

    async def populate(self, db: Database) -> bool:
        async with db.connection() as conn:
            inserted = await insert_seed_rows(
                conn,
                insert(garden_type),
                ({"garden_type": g, "description": d} for g, d in SEED_GARDEN_TYPES),
            )
            inserted += await insert_seed_rows(
                conn,
                insert(garden_log),
                (
                    {
                        "log_id": log_id,
                        "user_id": user_id,
                        "garden_type": kind,
                        "log_date": log_date,
                        "notes": notes,
                    }
                    for log_id, user_id, kind, log_date, notes in SEED_GARDEN_LOGS
                ),
            )
        logger.info("Seeded %d new garden row(s)", inserted)
        return True

    async def insert_garden_log(
        self,
        db: Database,
        log_id: int,
        user_id: int,
        kind: Optional[str],
        log_date: Optional[date],
        notes: Optional[str] = None,
    ) -> bool:
        """`kind` is the garden type name; None leaves it unset."""
        async with db.connection() as conn:
            result = await conn.execute(
                insert(garden_log).values(
                    log_id=log_id,
                    user_id=user_id,
                    garden_type=kind,
                    log_date=log_date,
                    notes=notes,
                )
            )
            await conn.commit()
            return result.rowcount > 0


garden_service = GardenService()
