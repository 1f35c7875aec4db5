# tests/test_conflict_detection.py

import uuid
from dataclasses import dataclass
from datetime import time

from services.conflict_detection import (
    CLASS_CONFLICT,
    TEACHER_CONFLICT,
    ConflictCandidate,
    detect_conflicts,
    time_ranges_overlap,
)


@dataclass
class Row:
    id: str
    class_id: str
    teacher_id: str
    day_of_week: str
    start_time: time
    end_time: time
    subject: str = "Mathematics"


def candidate(**overrides):
    fields = dict(
        class_id="c2",
        teacher_id="t1",
        day_of_week="Monday",
        start_time=time(9, 30),
        end_time=time(10, 30),
        subject="Physics",
    )
    fields.update(overrides)
    return ConflictCandidate(**fields)


def maths_monday():
    return Row("s1", "c1", "t1", "Monday", time(9, 0), time(10, 0))


def test_overlap_same_teacher_reports_one_teacher_conflict():
    conflicts = detect_conflicts(candidate(), [maths_monday()])

    assert len(conflicts) == 1
    assert conflicts[0].conflict_type == TEACHER_CONFLICT
    assert conflicts[0].conflicting_session_id == "s1"
    assert "Mathematics" in conflicts[0].conflict_message
    assert "Physics" in conflicts[0].conflict_message
    assert "09:00-10:00" in conflicts[0].conflict_message
    assert "09:30-10:30" in conflicts[0].conflict_message


def test_adjacent_sessions_do_not_conflict():
    assert detect_conflicts(candidate(start_time=time(10, 0), end_time=time(11, 0)), [maths_monday()]) == []
    assert detect_conflicts(candidate(start_time=time(8, 0), end_time=time(9, 0)), [maths_monday()]) == []


def test_different_days_never_conflict():
    same_times = candidate(class_id="c1", day_of_week="Tuesday", start_time=time(9, 0), end_time=time(10, 0))

    assert detect_conflicts(same_times, [maths_monday()]) == []


def test_session_never_conflicts_with_itself_when_excluded():
    editing = candidate(class_id="c1", start_time=time(9, 0), end_time=time(10, 0), exclude_id="s1")

    assert detect_conflicts(editing, [maths_monday()]) == []


def test_exclude_id_matches_across_id_types():
    sid = uuid.uuid4()
    row = Row(sid, "c1", "t1", "Monday", time(9, 0), time(10, 0))

    assert detect_conflicts(candidate(exclude_id=str(sid)), [row]) == []


def test_teacher_rule_is_symmetric():
    a = Row("a", "c1", "t1", "Monday", time(9, 0), time(10, 0))
    b = Row("b", "c2", "t1", "Monday", time(9, 30), time(10, 30))

    a_vs_b = detect_conflicts(
        ConflictCandidate(a.class_id, a.teacher_id, a.day_of_week, a.start_time, a.end_time), [b]
    )
    b_vs_a = detect_conflicts(
        ConflictCandidate(b.class_id, b.teacher_id, b.day_of_week, b.start_time, b.end_time), [a]
    )

    assert [c.conflict_type for c in a_vs_b] == [TEACHER_CONFLICT]
    assert [c.conflict_type for c in b_vs_a] == [TEACHER_CONFLICT]


def test_same_class_different_teacher_reports_class_conflict():
    conflicts = detect_conflicts(candidate(class_id="c1", teacher_id="t2"), [maths_monday()])

    assert [c.conflict_type for c in conflicts] == [CLASS_CONFLICT]
    assert conflicts[0].conflict_message.startswith("Class already has a session")


def test_same_class_and_teacher_reports_both_conflicts():
    conflicts = detect_conflicts(candidate(class_id="c1"), [maths_monday()])

    assert sorted(c.conflict_type for c in conflicts) == [CLASS_CONFLICT, TEACHER_CONFLICT]


def test_unrelated_teacher_and_class_do_not_conflict():
    assert detect_conflicts(candidate(class_id="c9", teacher_id="t9"), [maths_monday()]) == []


def test_zero_duration_candidate_overlaps_nothing():
    instant = candidate(start_time=time(9, 30), end_time=time(9, 30))

    assert detect_conflicts(instant, [maths_monday()]) == []


def test_collects_every_conflict():
    rows = [
        maths_monday(),
        Row("s2", "c2", "t3", "Monday", time(10, 0), time(11, 0), subject="English"),
        Row("s3", "c3", "t1", "Monday", time(10, 15), time(10, 45), subject="Chemistry"),
    ]

    conflicts = detect_conflicts(candidate(), rows)

    assert [(c.conflict_type, c.conflicting_session_id) for c in conflicts] == [
        (TEACHER_CONFLICT, "s1"),
        (CLASS_CONFLICT, "s2"),
        (TEACHER_CONFLICT, "s3"),
    ]


def test_detection_is_idempotent():
    rows = [maths_monday()]
    cand = candidate(class_id="c1")

    assert detect_conflicts(cand, rows) == detect_conflicts(cand, rows)


def test_time_ranges_overlap_half_open():
    assert time_ranges_overlap(time(9), time(10), time(9, 59), time(11))
    assert not time_ranges_overlap(time(9), time(10), time(10), time(11))
    assert time_ranges_overlap(time(8), time(12), time(9), time(10))
