"""
GreenLog Backend — Plant Schemas
==================================

What:  Request bodies for the plant endpoints and the growth-stage enum.
Who:   routes/plants.py.

Insert shape:
    POST /insert-plant carries the plant itself plus, optionally, its first
    growth log. The log part is all-or-nothing: once logID is given the
    planting date and growth stage are required too, and the whole pair is
    written in one transaction.
"""

from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class GrowthStage(str, Enum):
    """Stages a plant log can record. Filters on stage match exactly."""
    SEEDLING = "Seedling"
    VEGETATIVE = "Vegetative"
    FLOWERING = "Flowering"
    FRUITING = "Fruiting"
    HARVESTED = "Harvested"


class InsertPlantRequest(BaseModel):
    plant_id: int = Field(alias="plantID")
    species: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=50)

    # ── First growth log (optional) ──────────────────────────────────────
    log_id: Optional[int] = Field(default=None, alias="logID")
    planting_date: Optional[date] = Field(default=None, alias="plantingDate")
    growth_stage: Optional[GrowthStage] = Field(default=None, alias="growthStage")
    harvest_date: Optional[date] = Field(default=None, alias="harvestDate")
    soil_id: Optional[int] = Field(default=None, alias="soilID")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_log_fields(self) -> "InsertPlantRequest":
        """A log needs its id, planting date and stage; harvest can't precede planting."""
        log_fields = (self.planting_date, self.growth_stage, self.harvest_date, self.soil_id)
        if self.log_id is None:
            if any(value is not None for value in log_fields):
                raise ValueError("logID is required when plant log fields are given")
            return self
        if self.planting_date is None or self.growth_stage is None:
            raise ValueError("plantingDate and growthStage are required with logID")
        if self.harvest_date is not None and self.harvest_date < self.planting_date:
            raise ValueError("harvestDate must not be before plantingDate")
        return self

    def log(self) -> Optional[Dict[str, Any]]:
        """The log part in the shape PlantService.insert_plant expects, or None."""
        if self.log_id is None:
            return None
        return {
            "log_id": self.log_id,
            "planting_date": self.planting_date,
            "growth_stage": self.growth_stage.value if self.growth_stage else None,
            "harvest_date": self.harvest_date,
            "soil_id": self.soil_id,
        }


class DeletePlantRequest(BaseModel):
    """Plants are keyed by (plantID, species)."""
    plant_id: int = Field(alias="plantID")
    species: str = Field(min_length=1)

    model_config = {"populate_by_name": True}
