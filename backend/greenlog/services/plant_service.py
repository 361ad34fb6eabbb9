"""
GreenLog Backend — Plant Service
==================================

What:  Plants, their growth logs and the lookup tables describing them
       (families, seed types, species info, soils).
Who:   Called by routes/plants.py.

Atomic writes:
    insert_plant writes the plant and, when given, its first log entry on one
    connection with a single commit, so a rejected log (unknown soil,
    duplicate log id) leaves no orphan plant behind.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, func, insert, select, update

from greenlog.database import Database
from greenlog.models.tables import (
    TABLE_GROUPS,
    plant,
    plant_family,
    plant_info,
    plant_log,
    reset_tables,
    seed_type,
    soil,
    user_has_plant,
)
from greenlog.services.queries import contains_text, insert_seed_rows, rows_to_lists, supplied

logger = logging.getLogger(__name__)

# ── Seed Data ─────────────────────────────────────────────────────────────
# Inserted in this order; later batches reference earlier ones.
SEED_FAMILIES = [
    ("Solanaceae", "Nightshades: tomatoes, peppers, potatoes"),
    ("Brassicaceae", "Cabbage family, cool-season crops"),
    ("Lamiaceae", "Mint family, aromatic herbs"),
    ("Cucurbitaceae", "Gourd family, vining crops"),
    ("Asteraceae", "Daisy family: lettuces and sunflowers"),
]

SEED_SEED_TYPES = [
    ("Heirloom", 7),
    ("Hybrid", 6),
    ("Organic", 8),
    ("Open-pollinated", 7),
]

SEED_PLANT_INFO = [
    ("Tomato", "Solanaceae", "Heirloom", "Full sun"),
    ("Pepper", "Solanaceae", "Hybrid", "Full sun"),
    ("Basil", "Lamiaceae", "Organic", "Full sun"),
    ("Kale", "Brassicaceae", "Open-pollinated", "Partial shade"),
    ("Cucumber", "Cucurbitaceae", "Hybrid", "Full sun"),
    ("Lettuce", "Asteraceae", "Organic", "Partial shade"),
]

SEED_SOILS = [
    (1, "Loam", Decimal("6.5")),
    (2, "Clay", Decimal("7.2")),
    (3, "Sandy", Decimal("6.0")),
    (4, "Peat", Decimal("5.5")),
    (5, "Silt", Decimal("6.8")),
]

SEED_PLANTS = [
    (1, "Tomato", "Cherry Tomato"),
    (2, "Tomato", "Beefsteak"),
    (3, "Basil", "Genovese Basil"),
    (4, "Kale", "Lacinato Kale"),
    (5, "Cucumber", "Marketmore"),
    (6, "Lettuce", "Butterhead"),
    (7, "Pepper", "Bell Pepper"),
]

SEED_PLANT_LOGS = [
    (1, 1, "Tomato", date(2024, 3, 15), "Fruiting", None, 1),
    (2, 2, "Tomato", date(2024, 3, 20), "Flowering", None, 1),
    (3, 3, "Basil", date(2024, 4, 1), "Vegetative", None, 3),
    (4, 4, "Kale", date(2024, 2, 10), "Harvested", date(2024, 5, 1), 2),
    (5, 5, "Cucumber", date(2024, 4, 15), "Seedling", None, 1),
    (6, 6, "Lettuce", date(2024, 3, 1), "Harvested", date(2024, 4, 20), 5),
    (7, 7, "Pepper", date(2024, 4, 5), "Vegetative", None, 4),
]

class PlantService:
    """
    Data operations for `plant`, `plant_log` and the plant lookup tables.

    Responsibilities:
        - list plants and plant logs
        - reset / seed the plant tables
        - insert a plant (optionally with its first log), rename, delete
        - search plants; per-soil and per-family reports
    """

    async def list_plants(self, db: Database) -> List[List[Any]]:
        async with db.connection() as conn:
            result = await conn.execute(select(plant))
            return rows_to_lists(result)

    async def list_plant_logs(self, db: Database) -> List[List[Any]]:
        async with db.connection() as conn:
            result = await conn.execute(select(plant_log))
            return rows_to_lists(result)

    async def initiate(self, db: Database) -> bool:
        async with db.connection() as conn:
            await reset_tables(conn, TABLE_GROUPS["plants"])
        logger.info("plant tables reset")
        return True

    async def populate(self, db: Database) -> bool:
        """Seed lookups, then plants, then their logs."""
        batches = [
            (
                plant_family,
                [{"family_name": f, "common_traits": t} for f, t in SEED_FAMILIES],
            ),
            (
                seed_type,
                [{"seed_type": s, "germination_days": d} for s, d in SEED_SEED_TYPES],
            ),
            (
                plant_info,
                [
                    {"species": sp, "family_name": fam, "seed_type": st, "sunlight": sun}
                    for sp, fam, st, sun in SEED_PLANT_INFO
                ],
            ),
            (
                soil,
                [{"soil_id": i, "soil_type": t, "ph": ph} for i, t, ph in SEED_SOILS],
            ),
            (
                plant,
                [{"plant_id": i, "species": sp, "name": n} for i, sp, n in SEED_PLANTS],
            ),
            (
                plant_log,
                [
                    {
                        "log_id": log_id,
                        "plant_id": plant_id,
                        "species": species,
                        "planting_date": planted,
                        "growth_stage": stage,
                        "harvest_date": harvested,
                        "soil_id": soil_id,
                    }
                    for log_id, plant_id, species, planted, stage, harvested, soil_id in SEED_PLANT_LOGS
                ],
            ),
        ]
        inserted = 0
        async with db.connection() as conn:
            for target, rows in batches:
                inserted += await insert_seed_rows(conn, insert(target), rows)
        logger.info("Seeded %d new plant row(s)", inserted)
        return True

    async def insert_plant(
        self,
        db: Database,
        plant_id: int,
        species: str,
        name: str,
        log: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Insert a plant and, if `log` is given, its first growth log.

        Args:
            log: {"log_id", "planting_date", "growth_stage", "harvest_date", "soil_id"}

        Raises:
            ConstraintViolationError: duplicate plant/log id or unknown soil;
                nothing is written in that case
        """
        async with db.connection() as conn:
            result = await conn.execute(
                insert(plant).values(plant_id=plant_id, species=species, name=name)
            )
            if log is not None:
                await conn.execute(
                    insert(plant_log).values(
                        log_id=log["log_id"],
                        plant_id=plant_id,
                        species=species,
                        planting_date=log.get("planting_date"),
                        growth_stage=log.get("growth_stage"),
                        harvest_date=log.get("harvest_date"),
                        soil_id=log.get("soil_id"),
                    )
                )
            await conn.commit()
            return result.rowcount > 0

    async def update_plant_name(self, db: Database, old_name: str, new_name: str) -> bool:
        async with db.connection() as conn:
            result = await conn.execute(
                update(plant).where(plant.c.name == old_name).values(name=new_name)
            )
            await conn.commit()
            return result.rowcount > 0

    async def delete_plant(self, db: Database, plant_id: int, species: str) -> bool:
        """Owner links → growth logs → the plant. True if the plant existed."""
        async with db.connection() as conn:
            for target in (user_has_plant, plant_log, plant):
                result = await conn.execute(
                    delete(target).where(
                        target.c.plant_id == plant_id, target.c.species == species
                    )
                )
            await conn.commit()
            return result.rowcount > 0

    async def search_plants(
        self,
        db: Database,
        name: Optional[str] = None,
        species: Optional[str] = None,
        family_name: Optional[str] = None,
        growth_stage: Optional[str] = None,
        soil_id: Optional[int] = None,
    ) -> List[List[Any]]:
        """
        Plants joined with their species info and logs.

        Row: [plant_id, species, name, family_name, growth_stage, soil_id].
        A plant with several logs appears once per distinct stage/soil.
        """
        joined = plant.outerjoin(plant_info, plant.c.species == plant_info.c.species).outerjoin(
            plant_log,
            and_(plant.c.plant_id == plant_log.c.plant_id, plant.c.species == plant_log.c.species),
        )
        query = (
            select(
                plant.c.plant_id,
                plant.c.species,
                plant.c.name,
                plant_info.c.family_name,
                plant_log.c.growth_stage,
                plant_log.c.soil_id,
            )
            .distinct()
            .select_from(joined)
        )

        for column, value in (
            (plant.c.name, name),
            (plant.c.species, species),
            (plant_info.c.family_name, family_name),
        ):
            value = supplied(value)
            if value:
                query = query.where(contains_text(column, value))
        growth_stage = supplied(growth_stage)
        if growth_stage:
            query = query.where(plant_log.c.growth_stage == growth_stage)
        if soil_id is not None:
            query = query.where(plant_log.c.soil_id == soil_id)

        async with db.connection() as conn:
            result = await conn.execute(query.order_by(plant.c.plant_id, plant.c.species))
            return rows_to_lists(result)

    async def count_plants_by_soil(self, db: Database) -> List[List[Any]]:
        """[soil_type, number of plant logs in that soil]; soils without logs count 0."""
        query = (
            select(soil.c.soil_type, func.count(plant_log.c.log_id))
            .select_from(soil.outerjoin(plant_log))
            .group_by(soil.c.soil_type)
            .order_by(soil.c.soil_type)
        )
        async with db.connection() as conn:
            result = await conn.execute(query)
            return rows_to_lists(result)

    async def families_with_min_plants(self, db: Database, min_plants: int = 1) -> List[List[Any]]:
        """[family_name, plant count] for families with at least `min_plants` plants."""
        query = (
            select(plant_info.c.family_name, func.count())
            .select_from(plant.join(plant_info, plant.c.species == plant_info.c.species))
            .group_by(plant_info.c.family_name)
            .having(func.count() >= min_plants)
            .order_by(plant_info.c.family_name)
        )
        async with db.connection() as conn:
            result = await conn.execute(query)
            return rows_to_lists(result)


plant_service = PlantService()
