from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Text, Uuid

from models.base import Base


class GradingScale(Base):
    __tablename__ = "grading_scales"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    grading_system_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("grading_systems.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    grade_label = Column(Text, nullable=False)
    min_percentage = Column(Float, nullable=False)
    max_percentage = Column(Float, nullable=False)
    grade_points = Column(Float, nullable=False, default=0)
    remarks = Column(Text, nullable=False, default="")

    __table_args__ = (
        CheckConstraint("min_percentage >= 0 and max_percentage <= 100", name="ck_grading_scales_range"),
        CheckConstraint("min_percentage <= max_percentage", name="ck_grading_scales_order"),
    )
