"""
Pydantic schemas for project endpoints.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, allow_inf_nan=False)

    id: str = Field(..., min_length=1, max_length=200, alias="projectId")
    name: str = Field(..., min_length=1, max_length=500, alias="projectName")
    latitude: float
    longitude: float
    ecosystem_type: str = Field(..., min_length=1, max_length=200, alias="ecosystemType")
    land_ownership: str | None = Field(default=None, alias="landOwnership")
    governance: str | None = None
    implementing_agency: str = Field(..., min_length=1, max_length=500, alias="implementingAgency")
    description: str | None = None
    area_hectares: float | None = Field(default=None, ge=0, alias="areaHectares")
    establishment_date: date | None = Field(default=None, alias="establishmentDate")


class Project(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: str
    name: str
    latitude: float
    longitude: float
    ecosystem_type: str
    land_ownership: str | None = None
    governance: str | None = None
    implementing_agency: str
    description: str | None = None
    area_hectares: float | None = None
    establishment_date: date | None = None
    status: Literal["draft", "submitted"] = "draft"
    created_at: datetime
