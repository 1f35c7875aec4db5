from __future__ import annotations

import uuid
from datetime import datetime, time
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


DayOfWeek = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
TimetableStatus = Literal["draft", "published", "locked"]


def _naive_time(value: time | None) -> time | None:
    # Sessions are local wall-clock times; offset-aware values cannot be compared with stored ones.
    if value is not None and value.tzinfo is not None:
        raise ValueError("time must not carry a timezone offset")
    return value


class SessionBase(BaseModel):
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    subject: str = Field(min_length=1)
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    room: str | None = None
    notes: str | None = None
    week_number: int | None = Field(default=None, ge=1, le=53)

    _local_times = field_validator("start_time", "end_time")(_naive_time)

    @model_validator(mode="after")
    def _check_time_order(self):
        # Zero-length sessions never overlap anything, so they'd slip past conflict checks.
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class SessionCreate(SessionBase):
    pass


class SessionUpdate(BaseModel):
    teacher_id: uuid.UUID | None = None
    subject: str | None = Field(default=None, min_length=1)
    day_of_week: DayOfWeek | None = None
    start_time: time | None = None
    end_time: time | None = None
    room: str | None = None
    notes: str | None = None
    week_number: int | None = Field(default=None, ge=1, le=53)

    # Version the client last saw; stale values are rejected.
    version: int | None = Field(default=None, ge=1)

    _local_times = field_validator("start_time", "end_time")(_naive_time)


class SessionOut(SessionBase):
    id: uuid.UUID
    status: TimetableStatus
    created_by: uuid.UUID | None = None
    version: int
    created_at: datetime
    updated_at: datetime

    teacher_name: str | None = None
    class_name: str | None = None

    class Config:
        from_attributes = True


class ConflictCheckRequest(BaseModel):
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    exclude_id: uuid.UUID | None = None
    subject: str | None = None

    _local_times = field_validator("start_time", "end_time")(_naive_time)

    @model_validator(mode="after")
    def _check_time_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class ConflictOut(BaseModel):
    conflict_type: Literal["teacher_conflict", "class_conflict"]
    conflict_message: str
    conflicting_session_id: uuid.UUID
    subject: str | None = None
    day_of_week: DayOfWeek
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    conflicts: list[ConflictOut] = Field(default_factory=list)


class TimetableMetadataOut(BaseModel):
    class_id: uuid.UUID
    academic_year: str | None = None
    term: str | None = None
    status: TimetableStatus = "draft"
    published_at: datetime | None = None
    published_by: uuid.UUID | None = None
    locked_at: datetime | None = None
    locked_by: uuid.UUID | None = None

    class Config:
        from_attributes = True


class TimetableMetadataUpdate(BaseModel):
    academic_year: str | None = Field(default=None, max_length=20)
    term: str | None = Field(default=None, max_length=40)


class StatusChangeOut(BaseModel):
    ok: bool = True
    class_id: uuid.UUID
    previous_status: TimetableStatus
    status: TimetableStatus
    affected_sessions: int


class TimetableSummaryOut(BaseModel):
    class_id: uuid.UUID
    status: TimetableStatus
    draft: int = 0
    published: int = 0
    locked: int = 0
