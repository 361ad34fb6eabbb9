"""
GreenLog Backend — Garden Log Schemas
=======================================

What:  Request body for POST /insert-garden-log.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class InsertGardenLogRequest(BaseModel):
    log_id: int = Field(alias="logID")
    user_id: int = Field(alias="userID", description="Owner; must be an existing user")
    garden_type: Optional[str] = Field(default=None, alias="gardenType", max_length=30)
    log_date: date = Field(alias="logDate", description="ISO 8601 date, e.g. 2024-05-01")
    notes: Optional[str] = Field(default=None, max_length=200)

    model_config = {"populate_by_name": True}
