"""
GreenLog Backend — User & User-Task Schemas
=============================================

What:  Request bodies and responses for the appuser endpoints.
How:   Field names on the wire are the camelCase names the browser client
       sends (userID, firstName, ...); Python code uses snake_case through
       Pydantic aliases. populate_by_name lets tests build models either way.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class InsertUserRequest(BaseModel):
    user_id: int = Field(alias="userID", description="New user's id (primary key)")
    first_name: str = Field(alias="firstName", min_length=1, max_length=20)
    last_name: str = Field(alias="lastName", min_length=1, max_length=20)

    model_config = {"populate_by_name": True}


class RenameRequest(BaseModel):
    """
    What:  Natural-key rename body.
    Who:   POST /update-name-plant; users get RenameUserRequest.

    Every row whose name equals `oldName` exactly is renamed.
    """
    old_name: str = Field(alias="oldName", min_length=1)
    new_name: str = Field(alias="newName", min_length=1, max_length=50)

    model_config = {"populate_by_name": True}

    @field_validator("old_name", "new_name")
    @classmethod
    def strip_blank(cls, v: str) -> str:
        """Rejects names made only of whitespace."""
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v


class RenameUserRequest(RenameRequest):
    """First names are VARCHAR(20), so the new name is capped to fit."""
    new_name: str = Field(alias="newName", min_length=1, max_length=20)


class DeleteUserRequest(BaseModel):
    user_id: int = Field(alias="userID")

    model_config = {"populate_by_name": True}


class AssignTaskRequest(BaseModel):
    """
    What:  Links a user to a task.
    Who:   POST /insert-user-task.

    frequency/details are only used when taskID does not exist yet and the
    task has to be created first.
    """
    user_id: int = Field(alias="userID")
    task_id: int = Field(alias="taskID")
    frequency: Optional[str] = Field(default=None, max_length=20)
    details: Optional[str] = Field(default=None, max_length=200)

    model_config = {"populate_by_name": True}


class UserTask(BaseModel):
    task_id: int = Field(alias="taskID")
    frequency: Optional[str] = None
    details: Optional[str] = None

    model_config = {"populate_by_name": True}


class UserTasksResponse(BaseModel):
    success: bool = True
    tasks: List[UserTask]


class TaskLoadResponse(BaseModel):
    """
    What:  Users with at least `minTasks` tasks plus their average load.
    Who:   GET /task-load.

    average is null when no user reaches the threshold.
    """
    success: bool = True
    average: Optional[float] = Field(description="Mean task count of the listed users")
    users: List[List[Any]] = Field(description="[userID, firstName, lastName, taskCount] rows")
