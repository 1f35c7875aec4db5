from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator


GradingSystemType = Literal["CBC", "8-4-4"]


class GradingSystemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    system_type: GradingSystemType = "8-4-4"


class GradingSystemOut(BaseModel):
    id: uuid.UUID
    name: str
    system_type: GradingSystemType
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class GradeBandIn(BaseModel):
    grade_label: str = Field(min_length=1, max_length=10)
    min_percentage: float = Field(ge=0, le=100)
    max_percentage: float = Field(ge=0, le=100)
    grade_points: float = Field(default=0, ge=0)
    remarks: str = ""

    @model_validator(mode="after")
    def _check_range(self):
        if self.min_percentage > self.max_percentage:
            raise ValueError("min_percentage must not exceed max_percentage")
        return self


class GradeBandOut(GradeBandIn):
    id: uuid.UUID
    grading_system_id: uuid.UUID

    class Config:
        from_attributes = True


class GradeScaleSaveRequest(BaseModel):
    bands: list[GradeBandIn]


class GradeScaleSaveResponse(BaseModel):
    ok: bool = True
    bands: list[GradeBandOut]
    warnings: list[str] = Field(default_factory=list)


class GradeScaleValidationOut(BaseModel):
    valid: bool
    error: str | None = None
    lower_label: str | None = None
    upper_label: str | None = None
    warnings: list[str] = Field(default_factory=list)


class GradeLookupOut(BaseModel):
    percentage: float
    grade_label: str
    grading_system_id: uuid.UUID | None = None
