from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Index, Integer, Text, Time, Uuid
from sqlalchemy.sql import func

from models.base import Base


DAYS_OF_WEEK: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TIMETABLE_STATUSES: tuple[str, ...] = ("draft", "published", "locked")

DAY_OF_WEEK = Enum(*DAYS_OF_WEEK, name="day_of_week")
TIMETABLE_STATUS = Enum(*TIMETABLE_STATUSES, name="timetable_status")


class TimetableSession(Base):
    __tablename__ = "timetable_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid(as_uuid=True), nullable=False)
    teacher_id = Column(Uuid(as_uuid=True), nullable=False)
    subject = Column(Text, nullable=False)
    day_of_week = Column(DAY_OF_WEEK, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    room = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    week_number = Column(Integer, nullable=True)
    status = Column(TIMETABLE_STATUS, nullable=False, default="draft")
    created_by = Column(Uuid(as_uuid=True), nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_timetable_sessions_time_order"),
        Index("ix_timetable_sessions_class_day", "class_id", "day_of_week"),
        Index("ix_timetable_sessions_teacher_day", "teacher_id", "day_of_week"),
    )
