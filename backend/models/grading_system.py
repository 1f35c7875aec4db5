from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, Text, Uuid
from sqlalchemy.sql import func

from models.base import Base


GRADING_SYSTEM_TYPE = Enum(
    "CBC",
    "8-4-4",
    name="grading_system_type",
)


class GradingSystem(Base):
    __tablename__ = "grading_systems"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    system_type = Column(GRADING_SYSTEM_TYPE, nullable=False, default="8-4-4")
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
