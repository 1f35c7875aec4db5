from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Text, Uuid
from sqlalchemy.sql import func

from models.base import Base
from models.timetable_session import TIMETABLE_STATUS


class TimetableMetadata(Base):
    __tablename__ = "timetable_metadata"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid(as_uuid=True), nullable=False, unique=True)
    academic_year = Column(Text, nullable=True)
    term = Column(Text, nullable=True)
    status = Column(TIMETABLE_STATUS, nullable=False, default="draft")
    published_at = Column(DateTime(timezone=True), nullable=True)
    published_by = Column(Uuid(as_uuid=True), nullable=True)
    locked_at = Column(DateTime(timezone=True), nullable=True)
    locked_by = Column(Uuid(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
