"""
Pydantic schemas for project monitoring records: baseline measurements,
field activities and MRV (measurement, reporting, verification) data.

`project_id` points at a project but is not checked against the projects
collection.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Field teams report some measurements as numbers and some as text ("n/a", "12-15").
Measurement = Union[float, str, None]


def _all_finite(value: Any) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, dict):
        return all(_all_finite(v) for v in value.values())
    if isinstance(value, list):
        return all(_all_finite(v) for v in value)
    return True


class _CreateModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, allow_inf_nan=False)

    project_id: str = Field(..., min_length=1, max_length=200, alias="projectId")


class BaselineCreate(_CreateModel):
    species_composition: Measurement = Field(default=None, alias="speciesComposition")
    tree_density: Measurement = Field(default=None, alias="treeDensity")
    canopy_cover: Measurement = Field(default=None, alias="canopyCover")
    avg_tree_height: Measurement = Field(default=None, alias="avgTreeHeight")
    soil_organic_carbon: Measurement = Field(default=None, alias="soilOrganicCarbon")
    soil_bulk_density: Measurement = Field(default=None, alias="soilBulkDensity")
    sampling_date: dt.date = Field(..., alias="samplingDate")
    sampling_method: str | None = Field(default=None, alias="samplingMethod")
    lab_certification: str | None = Field(default=None, alias="labCertification")
    carbon_stock: float | None = Field(default=None, alias="carbonStock")


class BaselineRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: str
    project_id: str
    species_composition: Measurement = None
    tree_density: Measurement = None
    canopy_cover: Measurement = None
    avg_tree_height: Measurement = None
    soil_organic_carbon: Measurement = None
    soil_bulk_density: Measurement = None
    sampling_date: dt.date
    sampling_method: str | None = None
    lab_certification: str | None = None
    carbon_stock: float | None = None
    created_at: dt.datetime


class ActivityCreate(_CreateModel):
    activity_type: str = Field(..., min_length=1, max_length=200, alias="activityType")
    date: dt.date
    species: str | None = None
    saplings_planted: int | None = Field(default=None, ge=0, alias="saplingsPlanted")
    area_covered: float | None = Field(default=None, ge=0, alias="areaCovered")
    maintenance_notes: str | None = Field(default=None, alias="maintenanceNotes")
    crew: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    photos: list[str] = Field(default_factory=list)
    status: str = Field(default="planned", min_length=1, max_length=50)


class ActivityRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: str
    project_id: str
    activity_type: str
    date: dt.date
    species: str | None = None
    saplings_planted: int | None = None
    area_covered: float | None = None
    maintenance_notes: str | None = None
    crew: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    photos: list[str] = Field(default_factory=list)
    status: str = "planned"
    created_at: dt.datetime


class MrvCreate(_CreateModel):
    date: dt.date
    type: str = Field(..., min_length=1, max_length=200)
    source: str | None = None
    ndvi: float | None = None
    evi: float | None = None
    carbon_stock: float | None = Field(default=None, alias="carbonStock")
    change_detection: Union[str, dict[str, Any], None] = Field(default=None, alias="changeDetection")
    status: str = Field(default="pending", min_length=1, max_length=50)

    @field_validator("change_detection")
    @classmethod
    def _finite_change_detection(cls, value: Any) -> Any:
        if isinstance(value, dict) and not _all_finite(value):
            raise ValueError("changeDetection must not contain NaN or Infinity")
        return value


class MrvRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: str
    project_id: str
    date: dt.date
    type: str
    source: str | None = None
    ndvi: float | None = None
    evi: float | None = None
    carbon_stock: float | None = None
    change_detection: Union[str, dict[str, Any], None] = None
    status: str = "pending"
    created_at: dt.datetime
