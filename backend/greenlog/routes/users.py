"""
GreenLog Backend — App User Route Handlers
============================================

What:  Every endpoint over app users and their task assignments.
How:   Parse the body/query, call UserService with the injected Database
       handle, wrap the result. Failures are typed exceptions handled by the
       global handlers in main.py, so no handler here catches anything.
Who:   Called by the browser client's user and task panels.

Not-found policy:
    Rename and delete report False when no row matched; that is turned into
    NotFoundError (404) here rather than a {"success": true} that did nothing.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query

from greenlog.database import Database, get_database
from greenlog.exceptions import NotFoundError
from greenlog.schemas.common import (
    ERROR_RESPONSES,
    CountResponse,
    DataResponse,
    ErrorResponse,
    ReportResponse,
    SuccessResponse,
)
from greenlog.schemas.users import (
    AssignTaskRequest,
    DeleteUserRequest,
    InsertUserRequest,
    RenameUserRequest,
    TaskLoadResponse,
    UserTask,
    UserTasksResponse,
)
from greenlog.services.queries import parse_optional_int
from greenlog.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"], responses=ERROR_RESPONSES)


# ── Table Maintenance ─────────────────────────────────────────────────────

@router.get("/appusers", response_model=DataResponse, summary="All app users")
async def list_appusers(db: Database = Depends(get_database)) -> DataResponse:
    return DataResponse(data=await user_service.list_users(db))


@router.post(
    "/initiate-appusers",
    response_model=SuccessResponse,
    summary="Drop and recreate the appuser table",
)
async def initiate_appusers(db: Database = Depends(get_database)) -> SuccessResponse:
    await user_service.initiate(db)
    return SuccessResponse()


@router.post(
    "/populate-appusers",
    response_model=SuccessResponse,
    summary="Insert the sample users",
    description="Idempotent: users that already exist are skipped.",
)
async def populate_appusers(db: Database = Depends(get_database)) -> SuccessResponse:
    await user_service.populate(db)
    return SuccessResponse()


# ── Single-Row Mutations ──────────────────────────────────────────────────

@router.post(
    "/insert-appuser",
    response_model=SuccessResponse,
    summary="Insert one user",
    description="A duplicate userID responds 409.",
)
async def insert_appuser(
    body: InsertUserRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    await user_service.insert_user(db, body.user_id, body.first_name, body.last_name)
    return SuccessResponse()


@router.post(
    "/update-name-appuser",
    response_model=SuccessResponse,
    responses={404: {"description": "No user has that first name", "model": ErrorResponse}},
    summary="Rename users by first name",
)
async def update_name_appuser(
    body: RenameUserRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    if not await user_service.update_first_name(db, body.old_name, body.new_name):
        raise NotFoundError(resource="user", resource_id=body.old_name)
    return SuccessResponse()


@router.post(
    "/delete-appuser",
    response_model=SuccessResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Delete a user with its task links, plant links and garden logs",
)
async def delete_appuser(
    body: DeleteUserRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    if not await user_service.delete_user(db, body.user_id):
        raise NotFoundError(resource="user", resource_id=body.user_id)
    return SuccessResponse()


# ── Search & Reports ──────────────────────────────────────────────────────

@router.get(
    "/search-user",
    response_model=List[List[Any]],
    summary="Search users",
    description=(
        "Every supplied filter must match. userID matches exactly; firstName "
        "and lastName match case-insensitive substrings. Blank filters are "
        "ignored, so no filters returns every user."
    ),
)
async def search_user(
    user_id: Optional[str] = Query(default=None, alias="userID"),
    first_name: Optional[str] = Query(default=None, alias="firstName"),
    last_name: Optional[str] = Query(default=None, alias="lastName"),
    db: Database = Depends(get_database),
) -> List[List[Any]]:
    return await user_service.search_users(
        db,
        user_id=parse_optional_int(user_id, "userID"),
        first_name=first_name,
        last_name=last_name,
    )


@router.get("/count-appusers", response_model=CountResponse, summary="Number of users")
async def count_appusers(db: Database = Depends(get_database)) -> CountResponse:
    return CountResponse(count=await user_service.count_users(db))


@router.get(
    "/count-AppUsersFrequency",
    response_model=ReportResponse,
    summary="Users per task frequency",
)
async def count_appusers_frequency(db: Database = Depends(get_database)) -> ReportResponse:
    return ReportResponse(data=await user_service.count_users_by_frequency(db))


@router.get(
    "/task-load",
    response_model=TaskLoadResponse,
    summary="Users carrying at least minTasks tasks",
)
async def task_load(
    min_tasks: int = Query(default=1, ge=1, alias="minTasks"),
    db: Database = Depends(get_database),
) -> TaskLoadResponse:
    report = await user_service.task_load_report(db, min_tasks=min_tasks)
    return TaskLoadResponse(average=report["average"], users=report["users"])


# ── Task Assignments ──────────────────────────────────────────────────────

@router.get(
    "/api/user-tasks/{user_id}",
    response_model=UserTasksResponse,
    summary="Tasks assigned to a user",
)
async def get_user_tasks(user_id: int, db: Database = Depends(get_database)) -> UserTasksResponse:
    tasks = await user_service.get_user_tasks(db, user_id)
    return UserTasksResponse(tasks=[UserTask(**task) for task in tasks])


@router.post(
    "/insert-user-task",
    response_model=SuccessResponse,
    summary="Assign a task to a user",
    description=(
        "Creates the task first when taskID is unknown. Assigning the same "
        "task to the same user twice responds 409."
    ),
)
async def insert_user_task(
    body: AssignTaskRequest, db: Database = Depends(get_database)
) -> SuccessResponse:
    await user_service.assign_task(
        db, body.user_id, body.task_id, frequency=body.frequency, details=body.details
    )
    logger.info("Assigned task %s to user %s", body.task_id, body.user_id)
    return SuccessResponse()
