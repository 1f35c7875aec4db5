from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from models.class_group import ClassGroup
from models.profile import Profile
from models.timetable_metadata import TimetableMetadata
from models.timetable_session import DAYS_OF_WEEK, TimetableSession
from services.conflict_detection import ConflictCandidate, ConflictDescription, detect_conflicts


logger = logging.getLogger(__name__)


class TimetableStateError(RuntimeError):
    """Raised when a class timetable's status forbids the requested change."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class StatusChange:
    class_id: uuid.UUID
    previous_status: str
    status: str
    affected_sessions: int


def day_index(day_of_week: str) -> int:
    try:
        return DAYS_OF_WEEK.index(day_of_week)
    except ValueError:
        return len(DAYS_OF_WEEK)


def sort_sessions(sessions: Iterable[TimetableSession]) -> list[TimetableSession]:
    return sorted(sessions, key=lambda s: (day_index(s.day_of_week), s.start_time))


def find_conflicts(db: Session, candidate: ConflictCandidate) -> list[ConflictDescription]:
    """Load same-day sessions sharing the candidate's teacher or class and run the detector."""

    q = (
        select(TimetableSession)
        .where(TimetableSession.day_of_week == candidate.day_of_week)
        .where(
            or_(
                TimetableSession.teacher_id == candidate.teacher_id,
                TimetableSession.class_id == candidate.class_id,
            )
        )
    )
    existing = db.execute(q).scalars().all()
    conflicts = detect_conflicts(candidate, existing)
    if conflicts:
        logger.info(
            "Timetable conflicts detected class_id=%s teacher_id=%s day=%s count=%d",
            str(candidate.class_id),
            str(candidate.teacher_id),
            candidate.day_of_week,
            len(conflicts),
        )
    return conflicts


def get_metadata(db: Session, class_id: uuid.UUID) -> TimetableMetadata | None:
    return db.execute(select(TimetableMetadata).where(TimetableMetadata.class_id == class_id)).scalars().first()


def _get_or_create_metadata(db: Session, class_id: uuid.UUID) -> TimetableMetadata:
    meta = get_metadata(db, class_id)
    if meta is None:
        meta = TimetableMetadata(class_id=class_id, status="draft")
        db.add(meta)
        db.flush()
    return meta


def class_status(db: Session, class_id: uuid.UUID) -> str:
    meta = get_metadata(db, class_id)
    return str(meta.status) if meta is not None else "draft"


def ensure_class_editable(db: Session, class_id: uuid.UUID) -> None:
    if class_status(db, class_id) == "locked":
        raise TimetableStateError("TIMETABLE_LOCKED", "Class timetable is locked; unlock it before editing.")


def ensure_session_editable(db: Session, session: TimetableSession) -> None:
    if str(session.status) == "locked":
        raise TimetableStateError("SESSION_LOCKED", "Session is locked; unlock the class timetable first.")
    ensure_class_editable(db, session.class_id)


def status_counts(db: Session, class_id: uuid.UUID) -> dict[str, int]:
    counts = {"draft": 0, "published": 0, "locked": 0}
    rows = db.execute(select(TimetableSession.status).where(TimetableSession.class_id == class_id)).all()
    for (status,) in rows:
        counts[str(status)] = counts.get(str(status), 0) + 1
    return counts


def _sessions_with_status(db: Session, class_id: uuid.UUID, status: str) -> list[TimetableSession]:
    q = (
        select(TimetableSession)
        .where(TimetableSession.class_id == class_id)
        .where(TimetableSession.status == status)
    )
    return list(db.execute(q).scalars().all())


def _move_sessions(db: Session, class_id: uuid.UUID, *, from_status: str, to_status: str) -> int:
    # Row by row so the ORM bumps each session's version stamp.
    rows = _sessions_with_status(db, class_id, from_status)
    for s in rows:
        s.status = to_status
    return len(rows)


def publish_class_timetable(db: Session, class_id: uuid.UUID, *, actor_id: uuid.UUID | None) -> StatusChange:
    meta = _get_or_create_metadata(db, class_id)
    previous = str(meta.status)
    if previous == "locked":
        raise TimetableStateError("TIMETABLE_LOCKED", "Class timetable is locked; unlock it before publishing.")

    affected = _move_sessions(db, class_id, from_status="draft", to_status="published")
    if affected == 0:
        raise TimetableStateError("NO_DRAFT_SESSIONS", "No draft sessions to publish.")

    meta.status = "published"
    meta.published_at = datetime.now(timezone.utc)
    meta.published_by = actor_id
    db.commit()
    logger.info("Published timetable class_id=%s sessions=%d", str(class_id), affected)
    return StatusChange(class_id=class_id, previous_status=previous, status="published", affected_sessions=affected)


def unpublish_class_timetable(db: Session, class_id: uuid.UUID, *, actor_id: uuid.UUID | None) -> StatusChange:
    meta = _get_or_create_metadata(db, class_id)
    previous = str(meta.status)
    if previous != "published":
        raise TimetableStateError(
            "INVALID_STATUS_TRANSITION", f"Only a published timetable can be unpublished (current: {previous})."
        )

    affected = _move_sessions(db, class_id, from_status="published", to_status="draft")
    meta.status = "draft"
    meta.published_at = None
    meta.published_by = None
    db.commit()
    logger.info("Unpublished timetable class_id=%s sessions=%d actor=%s", str(class_id), affected, str(actor_id))
    return StatusChange(class_id=class_id, previous_status=previous, status="draft", affected_sessions=affected)


def lock_class_timetable(db: Session, class_id: uuid.UUID, *, actor_id: uuid.UUID | None) -> StatusChange:
    meta = _get_or_create_metadata(db, class_id)
    previous = str(meta.status)
    if previous != "published":
        raise TimetableStateError(
            "INVALID_STATUS_TRANSITION", f"Only a published timetable can be locked (current: {previous})."
        )

    affected = _move_sessions(db, class_id, from_status="published", to_status="locked")
    meta.status = "locked"
    meta.locked_at = datetime.now(timezone.utc)
    meta.locked_by = actor_id
    db.commit()
    logger.info("Locked timetable class_id=%s sessions=%d", str(class_id), affected)
    return StatusChange(class_id=class_id, previous_status=previous, status="locked", affected_sessions=affected)


def unlock_class_timetable(db: Session, class_id: uuid.UUID, *, actor_id: uuid.UUID | None) -> StatusChange:
    meta = _get_or_create_metadata(db, class_id)
    previous = str(meta.status)
    if previous != "locked":
        raise TimetableStateError(
            "INVALID_STATUS_TRANSITION", f"Only a locked timetable can be unlocked (current: {previous})."
        )

    affected = _move_sessions(db, class_id, from_status="locked", to_status="published")
    meta.status = "published"
    meta.locked_at = None
    meta.locked_by = None
    db.commit()
    logger.info("Unlocked timetable class_id=%s sessions=%d actor=%s", str(class_id), affected, str(actor_id))
    return StatusChange(class_id=class_id, previous_status=previous, status="published", affected_sessions=affected)


def lookup_names(db: Session, sessions: list[TimetableSession]) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve teacher and class display names for a batch of sessions."""

    teacher_ids = {s.teacher_id for s in sessions}
    class_ids = {s.class_id for s in sessions}

    teacher_names: dict[str, str] = {}
    if teacher_ids:
        for pid, full_name in db.execute(
            select(Profile.id, Profile.full_name).where(Profile.id.in_(teacher_ids))
        ).all():
            if full_name:
                teacher_names[str(pid)] = str(full_name)

    class_names: dict[str, str] = {}
    if class_ids:
        for cid, name in db.execute(select(ClassGroup.id, ClassGroup.name).where(ClassGroup.id.in_(class_ids))).all():
            class_names[str(cid)] = str(name)

    return teacher_names, class_names
