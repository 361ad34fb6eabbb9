"""
GreenLog Backend — Task Route Handlers
========================================

What:  GET /tasks plus the task table's initiate/populate/insert/delete.
Who:   Called by the browser client's task panel.
"""

from fastapi import APIRouter, Depends

from greenlog.database import Database, get_database
from greenlog.exceptions import NotFoundError
from greenlog.schemas.common import ERROR_RESPONSES, DataResponse, ErrorResponse, SuccessResponse
from greenlog.schemas.tasks import DeleteTaskRequest, InsertTaskRequest
from greenlog.services.task_service import task_service

router = APIRouter(tags=["Tasks"], responses=ERROR_RESPONSES)


@router.get("/tasks", response_model=DataResponse, summary="All tasks")
async def list_tasks(db: Database = Depends(get_database)) -> DataResponse:
    return DataResponse(data=await task_service.list_tasks(db))


@router.post(
    "/initiate-tasks",
    response_model=SuccessResponse,
    summary="Drop and recreate tasks and user_has_task",
)
async def initiate_tasks(db: Database = Depends(get_database)) -> SuccessResponse:
    await task_service.initiate(db)
    return SuccessResponse()


@router.post("/populate-tasks", response_model=SuccessResponse, summary="Insert the sample tasks")
async def populate_tasks(db: Database = Depends(get_database)) -> SuccessResponse:
    await task_service.populate(db)
    return SuccessResponse()


@router.post("/insert-task", response_model=SuccessResponse, summary="Insert one task")
async def insert_task(
    body: InsertTaskRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    await task_service.insert_task(db, body.task_id, body.frequency, body.details)
    return SuccessResponse()


@router.post(
    "/delete-task",
    response_model=SuccessResponse,
    responses={404: {"description": "Task not found", "model": ErrorResponse}},
    summary="Delete a task and its user assignments",
)
async def delete_task(
    body: DeleteTaskRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    if not await task_service.delete_task(db, body.task_id):
        raise NotFoundError(resource="task", resource_id=body.task_id)
    return SuccessResponse()
