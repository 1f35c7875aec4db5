from __future__ import annotations

import logging
import uuid
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from api.deps import get_current_user, is_admin, require_admin
from core.database import get_db
from models.profile import Profile
from models.timetable_metadata import TimetableMetadata
from models.timetable_session import TimetableSession
from schemas.timetable import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ConflictOut,
    DayOfWeek,
    SessionCreate,
    SessionOut,
    SessionUpdate,
    StatusChangeOut,
    TimetableMetadataOut,
    TimetableMetadataUpdate,
    TimetableStatus,
    TimetableSummaryOut,
)
from services.conflict_detection import ConflictCandidate, ConflictDescription
from services.timetable_service import (
    StatusChange,
    TimetableStateError,
    class_status,
    ensure_class_editable,
    ensure_session_editable,
    find_conflicts,
    get_metadata,
    lock_class_timetable,
    lookup_names,
    publish_class_timetable,
    sort_sessions,
    status_counts,
    unlock_class_timetable,
    unpublish_class_timetable,
)


logger = logging.getLogger(__name__)


router = APIRouter()

_REQUIRED_SESSION_FIELDS = {"teacher_id", "subject", "day_of_week", "start_time", "end_time"}


def _state_error(exc: TimetableStateError) -> HTTPException:
    return HTTPException(status_code=409, detail={"code": exc.code, "errors": [exc.message]})


def _conflict_error(conflicts: list[ConflictDescription]) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "code": "SCHEDULING_CONFLICT",
            "errors": [c.conflict_message for c in conflicts],
            "conflicts": [ConflictOut(**asdict(c)).model_dump(mode="json") for c in conflicts],
        },
    )


def _sessions_to_out(db: Session, sessions: list[TimetableSession]) -> list[SessionOut]:
    teacher_names, class_names = lookup_names(db, sessions)
    out: list[SessionOut] = []
    for s in sort_sessions(sessions):
        row = SessionOut.model_validate(s)
        row.teacher_name = teacher_names.get(str(s.teacher_id), "Unknown Teacher")
        row.class_name = class_names.get(str(s.class_id), "Unknown Class")
        out.append(row)
    return out


def _get_session(db: Session, session_id: uuid.UUID) -> TimetableSession:
    session = db.get(TimetableSession, session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="SESSION_NOT_FOUND")
    return session


def _status_change_out(change: StatusChange) -> StatusChangeOut:
    return StatusChangeOut(
        class_id=change.class_id,
        previous_status=change.previous_status,
        status=change.status,
        affected_sessions=change.affected_sessions,
    )


@router.get("/sessions", response_model=list[SessionOut])
def list_sessions(
    class_id: uuid.UUID | None = Query(default=None),
    teacher_id: uuid.UUID | None = Query(default=None),
    status: TimetableStatus | None = Query(default=None),
    day_of_week: DayOfWeek | None = Query(default=None),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[SessionOut]:
    q = select(TimetableSession)
    if class_id is not None:
        q = q.where(TimetableSession.class_id == class_id)
    if teacher_id is not None:
        q = q.where(TimetableSession.teacher_id == teacher_id)
    if status is not None:
        q = q.where(TimetableSession.status == status)
    if day_of_week is not None:
        q = q.where(TimetableSession.day_of_week == day_of_week)
    # Drafts are only visible to timetable editors.
    if not is_admin(current_user):
        q = q.where(TimetableSession.status != "draft")

    rows = list(db.execute(q).scalars().all())
    return _sessions_to_out(db, rows)


@router.post("/sessions", response_model=SessionOut, status_code=201)
def create_session(
    payload: SessionCreate,
    admin: Profile = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SessionOut:
    try:
        ensure_class_editable(db, payload.class_id)
    except TimetableStateError as exc:
        raise _state_error(exc)

    data = payload.model_dump()
    data["subject"] = str(data["subject"]).strip()
    if not data["subject"]:
        raise HTTPException(status_code=400, detail="INVALID_SUBJECT")

    conflicts = find_conflicts(
        db,
        ConflictCandidate(
            class_id=payload.class_id,
            teacher_id=payload.teacher_id,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
            subject=data["subject"],
        ),
    )
    if conflicts:
        raise _conflict_error(conflicts)

    session = TimetableSession(**data, status="draft", created_by=admin.id)
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("Created timetable session id=%s class_id=%s", str(session.id), str(session.class_id))
    return _sessions_to_out(db, [session])[0]


@router.patch("/sessions/{session_id}", response_model=SessionOut)
def update_session(
    session_id: uuid.UUID,
    payload: SessionUpdate,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> SessionOut:
    session = _get_session(db, session_id)
    try:
        ensure_session_editable(db, session)
    except TimetableStateError as exc:
        raise _state_error(exc)

    updates = payload.model_dump(exclude_unset=True)
    expected_version = updates.pop("version", None)
    if expected_version is not None and int(expected_version) != int(session.version):
        raise HTTPException(
            status_code=409,
            detail={
                "code": "SESSION_VERSION_MISMATCH",
                "errors": ["Session was changed by someone else; reload and retry."],
            },
        )

    for field in _REQUIRED_SESSION_FIELDS:
        if field in updates and updates[field] is None:
            raise HTTPException(status_code=422, detail=f"{field.upper()}_REQUIRED")
    if "subject" in updates:
        updates["subject"] = str(updates["subject"]).strip()
        if not updates["subject"]:
            raise HTTPException(status_code=400, detail="INVALID_SUBJECT")

    merged = {
        field: updates.get(field, getattr(session, field))
        for field in ("teacher_id", "subject", "day_of_week", "start_time", "end_time")
    }
    if merged["start_time"] >= merged["end_time"]:
        raise HTTPException(status_code=422, detail="INVALID_TIME_RANGE")

    conflicts = find_conflicts(
        db,
        ConflictCandidate(
            class_id=session.class_id,
            teacher_id=merged["teacher_id"],
            day_of_week=merged["day_of_week"],
            start_time=merged["start_time"],
            end_time=merged["end_time"],
            exclude_id=session.id,
            subject=merged["subject"],
        ),
    )
    if conflicts:
        raise _conflict_error(conflicts)

    for k, v in updates.items():
        setattr(session, k, v)

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        raise HTTPException(
            status_code=409,
            detail={
                "code": "SESSION_VERSION_MISMATCH",
                "errors": ["Session was changed by someone else; reload and retry."],
            },
        )
    db.refresh(session)
    return _sessions_to_out(db, [session])[0]


@router.delete("/sessions/{session_id}")
def delete_session(
    session_id: uuid.UUID,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    session = _get_session(db, session_id)
    try:
        ensure_session_editable(db, session)
    except TimetableStateError as exc:
        raise _state_error(exc)

    db.delete(session)
    db.commit()
    logger.info("Deleted timetable session id=%s", str(session_id))
    return {"ok": True}


@router.post("/conflicts/check", response_model=ConflictCheckResponse)
def check_conflicts(
    payload: ConflictCheckRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> ConflictCheckResponse:
    conflicts = find_conflicts(
        db,
        ConflictCandidate(
            class_id=payload.class_id,
            teacher_id=payload.teacher_id,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
            exclude_id=payload.exclude_id,
            subject=payload.subject,
        ),
    )
    return ConflictCheckResponse(
        has_conflicts=bool(conflicts),
        conflicts=[ConflictOut(**asdict(c)) for c in conflicts],
    )


@router.get("/classes/{class_id}/metadata", response_model=TimetableMetadataOut)
def get_class_metadata(
    class_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> TimetableMetadataOut:
    meta = get_metadata(db, class_id)
    if meta is None:
        return TimetableMetadataOut(class_id=class_id)
    return TimetableMetadataOut.model_validate(meta)


@router.put("/classes/{class_id}/metadata", response_model=TimetableMetadataOut)
def put_class_metadata(
    class_id: uuid.UUID,
    payload: TimetableMetadataUpdate,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
) -> TimetableMetadataOut:
    meta = get_metadata(db, class_id)
    if meta is None:
        meta = TimetableMetadata(class_id=class_id, status="draft")
        db.add(meta)

    meta.academic_year = (payload.academic_year or "").strip() or None
    meta.term = (payload.term or "").strip() or None
    db.commit()
    db.refresh(meta)
    return TimetableMetadataOut.model_validate(meta)


@router.get("/classes/{class_id}/summary", response_model=TimetableSummaryOut)
def get_class_summary(
    class_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> TimetableSummaryOut:
    counts = status_counts(db, class_id)
    return TimetableSummaryOut(class_id=class_id, status=class_status(db, class_id), **counts)


@router.post("/classes/{class_id}/publish", response_model=StatusChangeOut)
def publish_timetable(
    class_id: uuid.UUID,
    admin: Profile = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StatusChangeOut:
    try:
        return _status_change_out(publish_class_timetable(db, class_id, actor_id=admin.id))
    except TimetableStateError as exc:
        raise _state_error(exc)


@router.post("/classes/{class_id}/unpublish", response_model=StatusChangeOut)
def unpublish_timetable(
    class_id: uuid.UUID,
    admin: Profile = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StatusChangeOut:
    try:
        return _status_change_out(unpublish_class_timetable(db, class_id, actor_id=admin.id))
    except TimetableStateError as exc:
        raise _state_error(exc)


@router.post("/classes/{class_id}/lock", response_model=StatusChangeOut)
def lock_timetable(
    class_id: uuid.UUID,
    admin: Profile = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StatusChangeOut:
    try:
        return _status_change_out(lock_class_timetable(db, class_id, actor_id=admin.id))
    except TimetableStateError as exc:
        raise _state_error(exc)


@router.post("/classes/{class_id}/unlock", response_model=StatusChangeOut)
def unlock_timetable(
    class_id: uuid.UUID,
    admin: Profile = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StatusChangeOut:
    try:
        return _status_change_out(unlock_class_timetable(db, class_id, actor_id=admin.id))
    except TimetableStateError as exc:
        raise _state_error(exc)
