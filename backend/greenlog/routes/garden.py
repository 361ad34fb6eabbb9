"""
GreenLog Backend — Garden Route Handlers
==========================================

What:  Soils, garden types and garden logs.
Who:   Called by the browser client's garden panel.
"""

from fastapi import APIRouter, Depends

from greenlog.database import Database, get_database
from greenlog.schemas.common import ERROR_RESPONSES, DataResponse, SuccessResponse
from greenlog.schemas.garden import InsertGardenLogRequest
from greenlog.services.garden_service import garden_service

router = APIRouter(tags=["Garden"], responses=ERROR_RESPONSES)


@router.get("/soils", response_model=DataResponse, summary="All soils")
async def list_soils(db: Database = Depends(get_database)) -> DataResponse:
    return DataResponse(data=await garden_service.list_soils(db))


@router.get("/garden-types", response_model=DataResponse, summary="All garden types")
async def list_garden_types(db: Database = Depends(get_database)) -> DataResponse:
    return DataResponse(data=await garden_service.list_garden_types(db))


@router.get("/garden-logs", response_model=DataResponse, summary="All garden logs")
async def list_garden_logs(db: Database = Depends(get_database)) -> DataResponse:
    return DataResponse(data=await garden_service.list_garden_logs(db))


@router.post(
    "/initiate-garden",
    response_model=SuccessResponse,
    summary="Drop and recreate garden_type and garden_log",
)
async def initiate_garden(db: Database = Depends(get_database)) -> SuccessResponse:
    await garden_service.initiate(db)
    return SuccessResponse()


@router.post(
    "/populate-garden",
    response_model=SuccessResponse,
    summary="Insert sample garden types and logs",
    description="Garden logs reference the sample users; populate app users first.",
)
async def populate_garden(db: Database = Depends(get_database)) -> SuccessResponse:
    await garden_service.populate(db)
    return SuccessResponse()


@router.post(
    "/insert-garden-log",
    response_model=SuccessResponse,
    summary="Insert one garden log",
    description="An unknown userID or gardenType, or a duplicate logID, responds 409.",
)
async def insert_garden_log(
    body: InsertGardenLogRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    await garden_service.insert_garden_log(
        db, body.log_id, body.user_id, body.garden_type, body.log_date, body.notes
    )
    return SuccessResponse()
