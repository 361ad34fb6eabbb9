"""
GreenLog Backend — Task Schemas
=================================

What:  Request bodies for POST /insert-task and POST /delete-task.
"""

from typing import Optional

from pydantic import BaseModel, Field


class InsertTaskRequest(BaseModel):
    task_id: int = Field(alias="taskID")
    frequency: str = Field(min_length=1, max_length=20, description="e.g. Daily, Weekly")
    details: Optional[str] = Field(default=None, max_length=200)

    model_config = {"populate_by_name": True}


class DeleteTaskRequest(BaseModel):
    task_id: int = Field(alias="taskID")

    model_config = {"populate_by_name": True}
