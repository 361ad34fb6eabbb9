"""
GreenLog Backend — Schema Route Handlers
==========================================

What:  Table/column introspection, column projection and whole-schema
       initiate/populate.
Who:   Called by the browser client's projection panel and setup buttons.
"""

from fastapi import APIRouter, Depends

from greenlog.database import Database, get_database
from greenlog.schemas.common import ERROR_RESPONSES, ErrorResponse, SuccessResponse
from greenlog.schemas.schema import (
    ColumnsResponse,
    ProjectionRequest,
    ProjectionResponse,
    TablesResponse,
)
from greenlog.services.schema_service import schema_service

router = APIRouter(tags=["Schema"], responses=ERROR_RESPONSES)


@router.get("/all-tables", response_model=TablesResponse, summary="Visible table names")
async def all_tables(db: Database = Depends(get_database)) -> TablesResponse:
    return TablesResponse(tables=await schema_service.list_tables(db))


@router.get(
    "/table-columns/{table_name}",
    response_model=ColumnsResponse,
    responses={404: {"description": "Unknown table", "model": ErrorResponse}},
    summary="Column names of a table",
)
async def table_columns(table_name: str, db: Database = Depends(get_database)) -> ColumnsResponse:
    return ColumnsResponse(columns=await schema_service.list_columns(db, table_name))


@router.post(
    "/projection",
    response_model=ProjectionResponse,
    summary="Show chosen columns of a table",
    description="Returns at most 25 rows. Unknown tables or columns respond 400.",
)
async def projection(
    body: ProjectionRequest, db: Database = Depends(get_database)
) -> ProjectionResponse:
    result = await schema_service.project(db, body.table_name, body.columns)
    return ProjectionResponse(columns=result["columns"], data=result["data"])


@router.post("/initiate-all", response_model=SuccessResponse, summary="Reset every table")
async def initiate_all(db: Database = Depends(get_database)) -> SuccessResponse:
    await schema_service.initiate_all(db)
    return SuccessResponse()


@router.post("/populate-all", response_model=SuccessResponse, summary="Seed every table")
async def populate_all(db: Database = Depends(get_database)) -> SuccessResponse:
    await schema_service.populate_all(db)
    return SuccessResponse()
