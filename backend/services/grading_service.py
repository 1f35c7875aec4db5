from __future__ import annotations

import logging
import uuid
from typing import Iterable

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from models.grading_scale import GradingScale
from models.grading_system import GradingSystem
from services.grade_scale import (
    CBC_DEFAULT_BANDS,
    GradeBand,
    GradeBandError,
    GradeBandGap,
    find_grade_band_gaps,
    grade_for_percentage,
    validate_grade_bands,
)


logger = logging.getLogger(__name__)


class GradeScaleValidationError(ValueError):
    def __init__(self, error: GradeBandError) -> None:
        super().__init__(error.message)
        self.error = error


def list_systems(db: Session) -> list[GradingSystem]:
    return list(db.execute(select(GradingSystem).order_by(GradingSystem.created_at.desc())).scalars().all())


def get_active_system(db: Session) -> GradingSystem | None:
    return db.execute(select(GradingSystem).where(GradingSystem.is_active.is_(True))).scalars().first()


def list_scales(db: Session, system_id: uuid.UUID) -> list[GradingScale]:
    q = (
        select(GradingScale)
        .where(GradingScale.grading_system_id == system_id)
        .order_by(GradingScale.min_percentage.desc())
    )
    return list(db.execute(q).scalars().all())


def _scale_rows(system_id: uuid.UUID, bands: Iterable[GradeBand]) -> list[GradingScale]:
    return [
        GradingScale(
            grading_system_id=system_id,
            grade_label=b.grade_label,
            min_percentage=float(b.min_percentage),
            max_percentage=float(b.max_percentage),
            grade_points=float(b.grade_points),
            remarks=b.remarks or "",
        )
        for b in bands
    ]


def create_system(db: Session, *, name: str, system_type: str) -> GradingSystem:
    system = GradingSystem(name=name, system_type=system_type, is_active=False)
    db.add(system)
    db.flush()

    if system_type == "CBC":
        db.add_all(_scale_rows(system.id, CBC_DEFAULT_BANDS))

    db.commit()
    db.refresh(system)
    logger.info("Created grading system id=%s type=%s", str(system.id), system_type)
    return system


def activate_system(db: Session, system: GradingSystem) -> GradingSystem:
    db.execute(update(GradingSystem).where(GradingSystem.id != system.id).values(is_active=False))
    system.is_active = True
    db.commit()
    db.refresh(system)
    logger.info("Activated grading system id=%s name=%r", str(system.id), system.name)
    return system


def replace_scales(
    db: Session, system_id: uuid.UUID, bands: list[GradeBand]
) -> tuple[list[GradingScale], list[GradeBandGap]]:
    """Validate and replace a system's full band set in one transaction.

    Raises GradeScaleValidationError (and writes nothing) when two bands overlap.
    """

    error = validate_grade_bands(bands)
    if error is not None:
        logger.info("Rejected grade scale for system_id=%s: %s", str(system_id), error.message)
        raise GradeScaleValidationError(error)

    gaps = find_grade_band_gaps(bands)
    for gap in gaps:
        logger.debug("Grade scale gap system_id=%s: %s", str(system_id), gap.message)

    db.execute(delete(GradingScale).where(GradingScale.grading_system_id == system_id))
    db.add_all(_scale_rows(system_id, bands))
    db.commit()
    return list_scales(db, system_id), gaps


def grade_with_active_system(db: Session, percentage: float) -> tuple[str, GradingSystem | None]:
    system = get_active_system(db)
    bands = list_scales(db, system.id) if system is not None else []
    return grade_for_percentage(percentage, bands), system
