"""
GreenLog Backend — Plant & Garden Service Tests
=================================================

What:  Tests for PlantService and GardenService against a real SQLite database.

What we test:
    ✅ Seeding plants (lookups → plants → logs) and idempotency
    ✅ insert_plant writes plant + first log atomically
    ✅ Rename / delete by natural key
    ✅ Plant search filters and the soil / family reports
    ✅ Garden logs reference existing users
"""

from datetime import date

import pytest

from greenlog.exceptions import ConstraintViolationError
from greenlog.services.garden_service import garden_service
from greenlog.services.plant_service import plant_service


def _ids(rows):
    return sorted({row[0] for row in rows})


class TestPlantWrites:

    @pytest.mark.asyncio
    async def test_populate_is_idempotent(self, database):
        await plant_service.populate(database)
        await plant_service.populate(database)

        assert len(await plant_service.list_plants(database)) == 7
        assert len(await plant_service.list_plant_logs(database)) == 7

    @pytest.mark.asyncio
    async def test_insert_plant_with_first_log(self, seeded):
        log = {
            "log_id": 50,
            "planting_date": date(2024, 6, 1),
            "growth_stage": "Seedling",
            "harvest_date": None,
            "soil_id": 2,
        }

        assert await plant_service.insert_plant(seeded, 8, "Kale", "Red Russian", log=log) is True

        assert [8, "Kale", "Red Russian"] in await plant_service.list_plants(seeded)
        rows = await plant_service.search_plants(seeded, name="red russian")
        assert rows == [[8, "Kale", "Red Russian", "Brassicaceae", "Seedling", 2]]

    @pytest.mark.asyncio
    async def test_insert_plant_without_log(self, seeded):
        await plant_service.insert_plant(seeded, 9, "Basil", "Thai Basil")

        rows = await plant_service.search_plants(seeded, name="thai")
        assert rows == [[9, "Basil", "Thai Basil", "Lamiaceae", None, None]]

    @pytest.mark.asyncio
    async def test_rejected_log_leaves_no_plant(self, seeded):
        log = {"log_id": 51, "planting_date": date(2024, 6, 1), "growth_stage": "Seedling", "soil_id": 99}

        with pytest.raises(ConstraintViolationError):
            await plant_service.insert_plant(seeded, 10, "Tomato", "Roma", log=log)

        assert await plant_service.search_plants(seeded, name="roma") == []

    @pytest.mark.asyncio
    async def test_duplicate_log_id_leaves_no_plant(self, seeded):
        log = {"log_id": 1, "planting_date": date(2024, 6, 1), "growth_stage": "Seedling"}

        with pytest.raises(ConstraintViolationError) as exc_info:
            await plant_service.insert_plant(seeded, 11, "Tomato", "San Marzano", log=log)

        assert exc_info.value.unique is True
        assert await plant_service.search_plants(seeded, name="marzano") == []

    @pytest.mark.asyncio
    async def test_update_plant_name(self, seeded):
        assert await plant_service.update_plant_name(seeded, "Beefsteak", "Brandywine") is True
        assert await plant_service.update_plant_name(seeded, "Beefsteak", "Anything") is False
        assert [2, "Tomato", "Brandywine"] in await plant_service.list_plants(seeded)

    @pytest.mark.asyncio
    async def test_delete_plant_removes_logs(self, seeded):
        assert await plant_service.delete_plant(seeded, 1, "Tomato") is True

        assert 1 not in _ids(await plant_service.list_plants(seeded))
        assert all(row[1] != 1 for row in await plant_service.list_plant_logs(seeded))
        assert await plant_service.delete_plant(seeded, 1, "Tomato") is False

    @pytest.mark.asyncio
    async def test_delete_needs_matching_species(self, seeded):
        assert await plant_service.delete_plant(seeded, 1, "Basil") is False
        assert 1 in _ids(await plant_service.list_plants(seeded))


class TestPlantSearch:

    @pytest.mark.asyncio
    async def test_no_filters_returns_every_plant(self, seeded):
        assert _ids(await plant_service.search_plants(seeded)) == [1, 2, 3, 4, 5, 6, 7]

    @pytest.mark.asyncio
    async def test_species_partial(self, seeded):
        rows = await plant_service.search_plants(seeded, species="tom")
        assert rows == [
            [1, "Tomato", "Cherry Tomato", "Solanaceae", "Fruiting", 1],
            [2, "Tomato", "Beefsteak", "Solanaceae", "Flowering", 1],
        ]

    @pytest.mark.asyncio
    async def test_family_partial(self, seeded):
        assert _ids(await plant_service.search_plants(seeded, family_name="SOLAN")) == [1, 2, 7]

    @pytest.mark.asyncio
    async def test_growth_stage_exact(self, seeded):
        assert _ids(await plant_service.search_plants(seeded, growth_stage="Harvested")) == [4, 6]

    @pytest.mark.asyncio
    async def test_soil_exact(self, seeded):
        assert _ids(await plant_service.search_plants(seeded, soil_id=1)) == [1, 2, 5]

    @pytest.mark.asyncio
    async def test_no_match_is_empty(self, seeded):
        assert await plant_service.search_plants(seeded, name="zucchini") == []


class TestPlantReports:

    @pytest.mark.asyncio
    async def test_plants_per_soil(self, seeded):
        assert await plant_service.count_plants_by_soil(seeded) == [
            ["Clay", 1],
            ["Loam", 3],
            ["Peat", 1],
            ["Sandy", 1],
            ["Silt", 1],
        ]

    @pytest.mark.asyncio
    async def test_families_with_min_plants(self, seeded):
        assert await plant_service.families_with_min_plants(seeded, 2) == [["Solanaceae", 3]]
        assert len(await plant_service.families_with_min_plants(seeded, 1)) == 5


class TestGarden:

    @pytest.mark.asyncio
    async def test_seeded_reference_tables(self, seeded):
        assert len(await garden_service.list_garden_types(seeded)) == 4
        assert len(await garden_service.list_garden_logs(seeded)) == 5
        soils = await garden_service.list_soils(seeded)
        assert [1, "Loam", 6.5] in soils

    @pytest.mark.asyncio
    async def test_insert_garden_log(self, seeded):
        assert await garden_service.insert_garden_log(
            seeded, 6, 2, "Container", date(2024, 6, 3), "Repotted basil"
        ) is True

        logs = await garden_service.list_garden_logs(seeded)
        assert [6, 2, "Container"] in [row[:3] for row in logs]

    @pytest.mark.asyncio
    async def test_garden_log_for_unknown_user(self, seeded):
        with pytest.raises(ConstraintViolationError) as exc_info:
            await garden_service.insert_garden_log(seeded, 7, 999, "Container", date(2024, 6, 3))

        assert exc_info.value.unique is False

    @pytest.mark.asyncio
    async def test_populate_garden_requires_users(self, database):
        with pytest.raises(ConstraintViolationError):
            await garden_service.populate(database)

        # Garden types went in before the first log failed.
        assert len(await garden_service.list_garden_types(database)) == 4
