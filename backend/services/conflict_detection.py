from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Any, Iterable


TEACHER_CONFLICT = "teacher_conflict"
CLASS_CONFLICT = "class_conflict"


@dataclass(frozen=True)
class ConflictCandidate:
    """A proposed (or edited) timetable session to check before saving."""

    class_id: Any
    teacher_id: Any
    day_of_week: str
    start_time: time
    end_time: time
    exclude_id: Any | None = None
    subject: str | None = None


@dataclass(frozen=True)
class ConflictDescription:
    conflict_type: str
    conflict_message: str
    conflicting_session_id: Any
    subject: str | None
    day_of_week: str
    start_time: time
    end_time: time


def _same_id(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return str(a) == str(b)


def _hhmm(t: time) -> str:
    return t.strftime("%H:%M") if hasattr(t, "strftime") else str(t)


def time_ranges_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open overlap test: [start_a, end_a) and [start_b, end_b) share an instant."""

    return start_a < end_b and start_b < end_a


def detect_conflicts(candidate: ConflictCandidate, existing_sessions: Iterable[Any]) -> list[ConflictDescription]:
    """Return every stored session the candidate would collide with.

    `existing_sessions` may hold ORM rows or any objects exposing `id`, `class_id`,
    `teacher_id`, `day_of_week`, `start_time`, `end_time` and `subject`. Pass the
    full set when teacher clashes across classes matter. An empty result means the
    candidate is safe to save. Never raises for well-typed input.
    """

    conflicts: list[ConflictDescription] = []
    requested = f"{candidate.subject or 'the requested session'} ({_hhmm(candidate.start_time)}-{_hhmm(candidate.end_time)})"

    for s in existing_sessions:
        if _same_id(s.id, candidate.exclude_id):
            continue
        if s.day_of_week != candidate.day_of_week:
            continue
        if not time_ranges_overlap(candidate.start_time, candidate.end_time, s.start_time, s.end_time):
            continue

        existing = f"{s.subject} ({_hhmm(s.start_time)}-{_hhmm(s.end_time)})"

        if _same_id(s.teacher_id, candidate.teacher_id):
            conflicts.append(
                ConflictDescription(
                    conflict_type=TEACHER_CONFLICT,
                    conflict_message=(
                        f"Teacher is double-booked on {s.day_of_week}: {existing} overlaps {requested}"
                    ),
                    conflicting_session_id=s.id,
                    subject=s.subject,
                    day_of_week=s.day_of_week,
                    start_time=s.start_time,
                    end_time=s.end_time,
                )
            )

        if _same_id(s.class_id, candidate.class_id):
            conflicts.append(
                ConflictDescription(
                    conflict_type=CLASS_CONFLICT,
                    conflict_message=f"Class already has a session on {s.day_of_week}: {existing}",
                    conflicting_session_id=s.id,
                    subject=s.subject,
                    day_of_week=s.day_of_week,
                    start_time=s.start_time,
                    end_time=s.end_time,
                )
            )

    return conflicts
