from __future__ import annotations

from datetime import date, datetime

import pytest

from src.campus_attendance.campus_attendance.attendance.service import attendance_rate, compute_stats
from src.campus_attendance.campus_attendance.core.enums import AttendanceStatus, BulkOutcome
from src.campus_attendance.campus_attendance.core.exceptions import ConflictError, ValidationError

from tests.fakes import add_student, add_teacher


@pytest.mark.parametrize(
    "present,total,expected",
    [(0, 0, 0), (1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13), (5, 5, 100)],
)
def test_attendance_rate_rounds_half_up(present, total, expected):
    assert attendance_rate(present, total) == expected


def test_self_mark_defaults_to_present(container, fixed_now):
    student = add_student(container)

    container.attendance_service.mark_self(student.user_id, now=fixed_now)

    record = container.attendance_repo.get_for_student_and_date(student.user_id, fixed_now.date())
    assert record.status == AttendanceStatus.PRESENT
    assert record.check_in_time == fixed_now


def test_second_self_mark_same_day_conflicts(container, fixed_now):
    student = add_student(container)
    container.attendance_service.mark_self(student.user_id, status="late", now=fixed_now)

    with pytest.raises(ConflictError):
        container.attendance_service.mark_self(student.user_id, now=fixed_now.replace(hour=15))

    record = container.attendance_repo.get_for_student_and_date(student.user_id, fixed_now.date())
    assert record.status == AttendanceStatus.LATE


def test_self_mark_rejects_unknown_status(container, fixed_now):
    student = add_student(container)

    with pytest.raises(ValidationError):
        container.attendance_service.mark_self(student.user_id, status="holiday", now=fixed_now)


def test_bulk_mark_creates_updates_and_fails_per_entry(container, fixed_now):
    teacher = add_teacher(container)
    asha = add_student(container)
    ben = add_student(container, name="Ben", email="ben@college.edu", roll_number="CS002")
    other = add_student(container, name="Eve", email="eve@college.edu", roll_number="EE001", department="Electrical")
    container.attendance_service.mark_self(asha.user_id, now=fixed_now)
    remarked_at = fixed_now.replace(hour=14)

    result = container.attendance_service.mark_bulk(
        teacher,
        [
            {"student_id": asha.user_id, "status": "absent"},
            {"student_id": ben.user_id, "status": "late", "date": "2025-03-04"},
            {"student_id": 9999, "status": "present"},
            {"student_id": other.user_id},
            {"student_id": "abc"},
            "garbage",
        ],
        now=remarked_at,
    )

    assert [r.outcome for r in result.results] == [
        BulkOutcome.UPDATED,
        BulkOutcome.CREATED,
        BulkOutcome.FAILED,
        BulkOutcome.FAILED,
        BulkOutcome.FAILED,
        BulkOutcome.FAILED,
    ]
    assert (result.created, result.updated, result.failed) == (1, 1, 4)
    assert result.results[2].reason == "Student not found"
    assert result.results[3].reason == "Student is not in your department"

    updated = container.attendance_repo.get_for_student_and_date(asha.user_id, fixed_now.date())
    assert updated.status == AttendanceStatus.ABSENT
    assert updated.marked_by_teacher_id == teacher.user_id
    assert updated.check_in_time == remarked_at
    assert container.attendance_repo.get_for_student_and_date(ben.user_id, date(2025, 3, 4)) is not None


def test_bulk_mark_requires_entries(container, fixed_now):
    teacher = add_teacher(container)

    with pytest.raises(ValidationError):
        container.attendance_service.mark_bulk(teacher, [], now=fixed_now)


def test_list_own_returns_history_with_stats(container):
    student = add_student(container)
    for day, status in [(3, "present"), (4, "absent"), (5, "present")]:
        container.attendance_service.mark_self(student.user_id, status=status, now=datetime(2025, 3, day, 9))

    rows, stats = container.attendance_service.list_own(student.user_id, start_date=date(2025, 3, 4))

    assert [r.attendance_date.day for r in rows] == [5, 4]
    assert stats.to_dict() == {"total": 2, "present": 1, "absent": 1, "late": 0, "attendance_rate": 50}


def test_department_view_is_scoped_unless_student_requested(container, fixed_now):
    teacher = add_teacher(container)
    asha = add_student(container)
    eve = add_student(container, name="Eve", email="eve@college.edu", roll_number="EE001", department="Electrical")
    container.attendance_service.mark_self(asha.user_id, now=fixed_now)
    container.attendance_service.mark_self(eve.user_id, status="late", now=fixed_now)

    scoped = container.attendance_service.list_department(teacher)
    assert [r.student_id for r in scoped["rows"]] == [asha.user_id]
    assert scoped["total"] == 1

    single = container.attendance_service.list_department(teacher, student_id=eve.user_id)
    assert [r.student_id for r in single["rows"]] == [eve.user_id]

    stats = container.attendance_service.department_stats(teacher)
    assert (stats.total, stats.present, stats.attendance_rate) == (1, 1, 100)


def test_roster_lists_department_students(container):
    teacher = add_teacher(container)
    add_student(container)
    add_student(container, name="Eve", email="eve@college.edu", roll_number="EE001", department="Electrical")

    roster = container.attendance_service.list_roster(teacher)

    assert [s.roll_number for s in roster] == ["CS001"]


def test_compute_stats_counts_each_status():
    class _R:
        def __init__(self, status):
            self.status = status

    stats = compute_stats([_R(AttendanceStatus.PRESENT), _R(AttendanceStatus.LATE), _R(AttendanceStatus.LATE)])

    assert (stats.total, stats.present, stats.late, stats.attendance_rate) == (3, 1, 2, 33)
