"""
GreenLog Backend — Introspection & Projection Schemas
=======================================================

What:  Request/response models for /all-tables, /table-columns and /projection.
"""

from typing import Any, List

from pydantic import BaseModel, Field


class TablesResponse(BaseModel):
    success: bool = True
    tables: List[str] = Field(description="Visible table names, sorted")


class ColumnsResponse(BaseModel):
    success: bool = True
    columns: List[str] = Field(description="Column names in table order")


class ProjectionRequest(BaseModel):
    """
    What:  Which table and which of its columns to show.
    Who:   POST /projection.

    Names are matched case-insensitively against the live schema; anything
    that is not a real table/column is rejected with 400.
    """
    table_name: str = Field(alias="tableName", min_length=1)
    columns: List[str] = Field(min_length=1, description="Column names to select")

    model_config = {"populate_by_name": True}


class ProjectionResponse(BaseModel):
    success: bool = True
    columns: List[str] = Field(description="Canonical names of the selected columns")
    data: List[List[Any]] = Field(description="Up to 25 rows")
