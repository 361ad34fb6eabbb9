"""
GreenLog Backend — Plant Route Handlers
=========================================

What:  Plants, plant logs, plant search and the per-soil / per-family reports.
How:   Thin handlers over PlantService; see routes/users.py for the shared
       not-found policy.
Who:   Called by the browser client's plant panel.

Search parameters:
    Query values arrive as strings. soilID is parsed here so that "abc"
    gives a 400 instead of a silent no-match; growthStage must be one of
    the GrowthStage values or blank.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query

from greenlog.database import Database, get_database
from greenlog.exceptions import NotFoundError, ValidationError
from greenlog.schemas.common import (
    ERROR_RESPONSES,
    DataResponse,
    ErrorResponse,
    ReportResponse,
    SuccessResponse,
)
from greenlog.schemas.plants import DeletePlantRequest, GrowthStage, InsertPlantRequest
from greenlog.schemas.users import RenameRequest
from greenlog.services.plant_service import plant_service
from greenlog.services.queries import parse_optional_int

router = APIRouter(tags=["Plants"], responses=ERROR_RESPONSES)

_GROWTH_STAGES = {stage.value for stage in GrowthStage}


@router.get("/plants", response_model=DataResponse, summary="All plants")
async def list_plants(db: Database = Depends(get_database)) -> DataResponse:
    return DataResponse(data=await plant_service.list_plants(db))


@router.get("/plant-logs", response_model=DataResponse, summary="All plant growth logs")
async def list_plant_logs(db: Database = Depends(get_database)) -> DataResponse:
    return DataResponse(data=await plant_service.list_plant_logs(db))


@router.post(
    "/initiate-plants",
    response_model=SuccessResponse,
    summary="Drop and recreate the plant tables and their lookups",
)
async def initiate_plants(db: Database = Depends(get_database)) -> SuccessResponse:
    await plant_service.initiate(db)
    return SuccessResponse()


@router.post(
    "/populate-plants",
    response_model=SuccessResponse,
    summary="Insert sample families, seed types, soils, plants and logs",
)
async def populate_plants(db: Database = Depends(get_database)) -> SuccessResponse:
    await plant_service.populate(db)
    return SuccessResponse()


@router.post(
    "/insert-plant",
    response_model=SuccessResponse,
    summary="Insert a plant, optionally with its first growth log",
)
async def insert_plant(
    body: InsertPlantRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    await plant_service.insert_plant(db, body.plant_id, body.species, body.name, log=body.log())
    return SuccessResponse()


@router.post(
    "/update-name-plant",
    response_model=SuccessResponse,
    responses={404: {"description": "No plant has that name", "model": ErrorResponse}},
    summary="Rename plants by name",
)
async def update_name_plant(
    body: RenameRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    if not await plant_service.update_plant_name(db, body.old_name, body.new_name):
        raise NotFoundError(resource="plant", resource_id=body.old_name)
    return SuccessResponse()


@router.post(
    "/delete-plant",
    response_model=SuccessResponse,
    responses={404: {"description": "Plant not found", "model": ErrorResponse}},
    summary="Delete a plant with its logs and owner links",
)
async def delete_plant(
    body: DeletePlantRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    if not await plant_service.delete_plant(db, body.plant_id, body.species):
        raise NotFoundError(resource="plant", resource_id=f"{body.plant_id}/{body.species}")
    return SuccessResponse()


@router.get(
    "/search-plant",
    response_model=List[List[Any]],
    summary="Search plants",
    description=(
        "Rows are [plantID, species, name, familyName, growthStage, soilID]. "
        "name, species and familyName match case-insensitive substrings; "
        "growthStage and soilID match exactly."
    ),
)
async def search_plant(
    name: Optional[str] = Query(default=None),
    species: Optional[str] = Query(default=None),
    family_name: Optional[str] = Query(default=None, alias="familyName"),
    growth_stage: Optional[str] = Query(default=None, alias="growthStage"),
    soil_id: Optional[str] = Query(default=None, alias="soilID"),
    db: Database = Depends(get_database),
) -> List[List[Any]]:
    if growth_stage and growth_stage.strip() and growth_stage.strip() not in _GROWTH_STAGES:
        raise ValidationError(
            message=f"growthStage must be one of: {', '.join(sorted(_GROWTH_STAGES))}",
            field="growthStage",
        )
    return await plant_service.search_plants(
        db,
        name=name,
        species=species,
        family_name=family_name,
        growth_stage=growth_stage.strip() if growth_stage else None,
        soil_id=parse_optional_int(soil_id, "soilID"),
    )


@router.get(
    "/count-plants-by-soil",
    response_model=ReportResponse,
    summary="Plant logs per soil type",
)
async def count_plants_by_soil(db: Database = Depends(get_database)) -> ReportResponse:
    return ReportResponse(data=await plant_service.count_plants_by_soil(db))


@router.get(
    "/plant-families",
    response_model=ReportResponse,
    summary="Plant families with at least minPlants plants",
)
async def plant_families(
    min_plants: int = Query(default=1, ge=1, alias="minPlants"),
    db: Database = Depends(get_database),
) -> ReportResponse:
    return ReportResponse(data=await plant_service.families_with_min_plants(db, min_plants))
