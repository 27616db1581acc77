from __future__ import annotations

from datetime import date, datetime

import pytest

from src.campus_attendance.campus_attendance.core.enums import LeaveStatus
from src.campus_attendance.campus_attendance.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.campus_attendance.campus_attendance.leaves.model import LeaveQuery

from tests.fakes import add_student, add_teacher

TODAY = date(2025, 3, 5)


def _apply(container, student, start=date(2025, 3, 10), end=date(2025, 3, 12), reason="medical"):
    return container.leave_service.apply(
        student.user_id, start_date=start, end_date=end, reason=reason, today=TODAY
    )


def test_leave_lifecycle_apply_approve_then_delete_conflicts(container, fixed_now):
    student = add_student(container)
    teacher = add_teacher(container)

    leave_id = _apply(container, student)
    row = container.leave_service.get_row(leave_id)
    assert row.status == LeaveStatus.PENDING
    assert row.duration_days == 3

    status = container.leave_service.review(leave_id, teacher, decision="approved", remarks="ok", now=fixed_now)
    assert status == LeaveStatus.APPROVED

    row = container.leave_service.get_row(leave_id)
    assert row.status == LeaveStatus.APPROVED
    assert row.reviewed_at == fixed_now
    assert row.reviewer_remarks == "ok"
    assert row.to_dict()["reviewed_by"] == {"id": teacher.user_id, "name": "Dr. Rao"}

    with pytest.raises(ConflictError):
        container.leave_service.delete(leave_id, student.user_id)


@pytest.mark.parametrize(
    "start,end,reason",
    [
        (date(2025, 3, 12), date(2025, 3, 10), "medical"),
        (date(2025, 3, 4), date(2025, 3, 6), "medical"),
        (date(2025, 3, 10), date(2025, 3, 12), "  "),
        (None, date(2025, 3, 12), "medical"),
    ],
)
def test_apply_rejects_invalid_ranges(container, start, end, reason):
    student = add_student(container)

    with pytest.raises(ValidationError):
        _apply(container, student, start=start, end=end, reason=reason)


def test_single_day_leave_starting_today_is_allowed(container):
    student = add_student(container)

    leave_id = _apply(container, student, start=TODAY, end=TODAY)

    assert container.leave_service.get_row(leave_id).duration_days == 1


def test_second_review_conflicts(container, fixed_now):
    student = add_student(container)
    teacher = add_teacher(container)
    leave_id = _apply(container, student)
    container.leave_service.review(leave_id, teacher, decision="rejected", now=fixed_now)

    with pytest.raises(ConflictError):
        container.leave_service.review(leave_id, teacher, decision="approved", now=fixed_now)

    assert container.leave_service.get_row(leave_id).status == LeaveStatus.REJECTED


def test_review_rules(container, fixed_now):
    student = add_student(container)
    teacher = add_teacher(container)
    outsider = add_teacher(
        container, identifier="TCH_ELE_001", name="Dr. Sen", email="sen@college.edu", department="Electrical"
    )
    leave_id = _apply(container, student)

    with pytest.raises(ValidationError):
        container.leave_service.review(leave_id, teacher, decision="pending", now=fixed_now)
    with pytest.raises(NotFoundError):
        container.leave_service.review(999, teacher, decision="approved", now=fixed_now)
    with pytest.raises(AuthorizationError):
        container.leave_service.review(leave_id, outsider, decision="approved", now=fixed_now)


def test_delete_rules(container):
    asha = add_student(container)
    ben = add_student(container, name="Ben", email="ben@college.edu", roll_number="CS002")
    leave_id = _apply(container, asha)

    with pytest.raises(AuthorizationError):
        container.leave_service.delete(leave_id, ben.user_id)
    with pytest.raises(NotFoundError):
        container.leave_service.delete(999, asha.user_id)

    container.leave_service.delete(leave_id, asha.user_id)
    assert container.leaves_repo.get_by_id(leave_id) is None


def test_list_mine_includes_stats(container, fixed_now):
    student = add_student(container)
    teacher = add_teacher(container)
    first = _apply(container, student)
    _apply(container, student, start=date(2025, 4, 1), end=date(2025, 4, 2), reason="family")
    container.leave_service.review(first, teacher, decision="approved", now=fixed_now)

    rows, stats = container.leave_service.list_mine(student.user_id)
    assert len(rows) == 2
    assert stats.to_dict() == {"total": 2, "pending": 1, "approved": 1, "rejected": 0}

    rows, stats = container.leave_service.list_mine(student.user_id, status="approved")
    assert [r.leave_id for r in rows] == [first]


def test_review_queue_is_department_scoped_and_pending_first(container, fixed_now):
    teacher = add_teacher(container)
    asha = add_student(container)
    eve = add_student(container, name="Eve", email="eve@college.edu", roll_number="EE001", department="Electrical")
    decided = _apply(container, asha)
    pending = _apply(container, asha, start=date(2025, 5, 1), end=date(2025, 5, 1))
    _apply(container, eve)
    newest_decided = _apply(container, asha, start=date(2025, 6, 1), end=date(2025, 6, 2))
    container.leave_service.review(decided, teacher, decision="approved", now=fixed_now)
    container.leave_service.review(newest_decided, teacher, decision="rejected", now=datetime(2025, 3, 6))

    queue = container.leave_service.list_for_review(teacher)

    assert [r.leave_id for r in queue["rows"]] == [pending, newest_decided, decided]
    assert queue["total"] == 3


def test_decided_leave_conflicts_even_after_applicant_changes_department(container, fixed_now):
    student = add_student(container)
    teacher = add_teacher(container)
    leave_id = _apply(container, student)
    container.leave_service.review(leave_id, teacher, decision="approved", now=fixed_now)
    container.profile_service.update_profile(student, department="Electrical")

    with pytest.raises(ConflictError):
        container.leave_service.review(leave_id, teacher, decision="rejected", now=fixed_now)


def test_overlong_reason_and_remarks_are_rejected(container, fixed_now):
    student = add_student(container)
    teacher = add_teacher(container)

    with pytest.raises(ValidationError):
        _apply(container, student, reason="x" * 1001)
    assert container.leaves_repo.count_rows(LeaveQuery(student_id=student.user_id)) == 0

    leave_id = _apply(container, student, reason="x" * 1000)
    with pytest.raises(ValidationError):
        container.leave_service.review(leave_id, teacher, decision="approved", remarks="r" * 1001, now=fixed_now)
    assert container.leave_service.get_row(leave_id).status == LeaveStatus.PENDING
