from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.deps import require_admin
from core.database import get_db
from models.grading_system import GradingSystem
from schemas.grading import (
    GradeBandIn,
    GradeBandOut,
    GradeLookupOut,
    GradeScaleSaveRequest,
    GradeScaleSaveResponse,
    GradeScaleValidationOut,
    GradingSystemCreate,
    GradingSystemOut,
)
from services.grade_scale import GradeBand, find_grade_band_gaps, validate_grade_bands
from services.grading_service import (
    GradeScaleValidationError,
    activate_system,
    create_system,
    grade_with_active_system,
    list_scales,
    list_systems,
    replace_scales,
)


router = APIRouter()


def _get_system(db: Session, system_id: uuid.UUID) -> GradingSystem:
    system = db.get(GradingSystem, system_id)
    if system is None:
        raise HTTPException(status_code=404, detail="GRADING_SYSTEM_NOT_FOUND")
    return system


def _to_bands(rows: list[GradeBandIn]) -> list[GradeBand]:
    return [
        GradeBand(
            grade_label=r.grade_label.strip(),
            min_percentage=r.min_percentage,
            max_percentage=r.max_percentage,
            grade_points=r.grade_points,
            remarks=r.remarks.strip(),
        )
        for r in rows
    ]


def _checked_bands(rows: list[GradeBandIn]) -> list[GradeBand]:
    bands = _to_bands(rows)
    if any(not b.grade_label for b in bands):
        raise HTTPException(status_code=400, detail="INVALID_GRADE_LABEL")
    return bands


@router.get("/systems", response_model=list[GradingSystemOut])
def get_systems(
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[GradingSystemOut]:
    return list_systems(db)


@router.post("/systems", response_model=GradingSystemOut, status_code=201)
def post_system(
    payload: GradingSystemCreate,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> GradingSystemOut:
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="INVALID_NAME")
    return create_system(db, name=name, system_type=payload.system_type)


@router.post("/systems/{system_id}/activate", response_model=GradingSystemOut)
def post_activate_system(
    system_id: uuid.UUID,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> GradingSystemOut:
    return activate_system(db, _get_system(db, system_id))


@router.get("/systems/{system_id}/scales", response_model=list[GradeBandOut])
def get_scales(
    system_id: uuid.UUID,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[GradeBandOut]:
    _get_system(db, system_id)
    return list_scales(db, system_id)


@router.put("/systems/{system_id}/scales", response_model=GradeScaleSaveResponse)
def put_scales(
    system_id: uuid.UUID,
    payload: GradeScaleSaveRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> GradeScaleSaveResponse:
    _get_system(db, system_id)
    bands = _checked_bands(payload.bands)

    try:
        rows, gaps = replace_scales(db, system_id, bands)
    except GradeScaleValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail={
                "code": exc.error.code,
                "errors": [exc.error.message],
                "labels": [exc.error.lower_label, exc.error.upper_label],
            },
        )

    return GradeScaleSaveResponse(
        bands=[GradeBandOut.model_validate(r) for r in rows],
        warnings=[g.message for g in gaps],
    )


@router.post("/scales/validate", response_model=GradeScaleValidationOut)
def post_validate_scales(
    payload: GradeScaleSaveRequest,
    _admin=Depends(require_admin),
) -> GradeScaleValidationOut:
    bands = _checked_bands(payload.bands)
    error = validate_grade_bands(bands)
    warnings = [g.message for g in find_grade_band_gaps(bands)]
    if error is None:
        return GradeScaleValidationOut(valid=True, warnings=warnings)
    return GradeScaleValidationOut(
        valid=False,
        error=error.message,
        lower_label=error.lower_label,
        upper_label=error.upper_label,
        warnings=warnings,
    )


@router.get("/grade", response_model=GradeLookupOut)
def get_grade(
    percentage: float = Query(ge=0, le=100),
    db: Session = Depends(get_db),
) -> GradeLookupOut:
    label, system = grade_with_active_system(db, percentage)
    return GradeLookupOut(
        percentage=percentage,
        grade_label=label,
        grading_system_id=system.id if system is not None else None,
    )
