from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local, parse_optional_date
from ..common.validators import clamp_page, optional_text
from ..core.constants import (
    DEFAULT_DEPARTMENT_LIMIT,
    DEFAULT_HISTORY_LIMIT,
    MAX_ATTENDANCE_REMARKS_LENGTH,
    MAX_PAGE_LIMIT,
)
from ..core.enums import AttendanceStatus, BulkOutcome, Role
from ..core.exceptions import ConflictError, DomainError, DuplicateError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceQuery, AttendanceRow, AttendanceStats, BulkEntryResult, BulkMarkResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def attendance_rate(present: int, total: int) -> int:
    """Present share in whole percent, halves rounded up; 0 when nothing was recorded."""
    if total <= 0:
        return 0
    return (present * 200 + total) // (2 * total)


def stats_from_counts(counts: Mapping[AttendanceStatus, int]) -> AttendanceStats:
    present = int(counts.get(AttendanceStatus.PRESENT, 0))
    absent = int(counts.get(AttendanceStatus.ABSENT, 0))
    late = int(counts.get(AttendanceStatus.LATE, 0))
    total = present + absent + late
    return AttendanceStats(
        total=total,
        present=present,
        absent=absent,
        late=late,
        attendance_rate=attendance_rate(present, total),
    )


def compute_stats(records: Iterable[Any]) -> AttendanceStats:
    counts: dict[AttendanceStatus, int] = {}
    for r in records:
        counts[r.status] = counts.get(r.status, 0) + 1
    return stats_from_counts(counts)


def parse_status(value: Any, *, default: Optional[AttendanceStatus] = None) -> Optional[AttendanceStatus]:
    if value is None or value == "":
        return default
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Invalid status (expected one of: {allowed})")


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def mark_self(
        self,
        student_id: int,
        *,
        status: Optional[str] = None,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        now = now or now_local()
        today = now.date()
        att_status = parse_status(status, default=AttendanceStatus.PRESENT)

        # The (student_id, attendance_date) unique key is the authority; no pre-check.
        try:
            return self._attendance.create(
                student_id=int(student_id),
                attendance_date=today,
                status=att_status,
                check_in_time=now,
                remarks=optional_text(remarks, "Remarks", MAX_ATTENDANCE_REMARKS_LENGTH),
            )
        except DuplicateError:
            raise ConflictError("Attendance already marked for today.")

    def _mark_one(self, teacher: User, index: int, entry: Any, *, now: datetime) -> BulkEntryResult:
        if not isinstance(entry, Mapping):
            return BulkEntryResult(index, None, None, BulkOutcome.FAILED, "Malformed entry")

        try:
            student_id = int(entry.get("student_id"))
        except (TypeError, ValueError):
            return BulkEntryResult(index, None, None, BulkOutcome.FAILED, "Invalid student id")

        day: Optional[date] = None
        try:
            att_status = parse_status(entry.get("status"), default=AttendanceStatus.PRESENT)
            day = parse_optional_date(entry.get("date"), "date") or now.date()

            student = self._users.get_by_id(student_id)
            if not student or student.role != Role.STUDENT:
                return BulkEntryResult(index, student_id, day, BulkOutcome.FAILED, "Student not found")
            if student.department != teacher.department:
                return BulkEntryResult(index, student_id, day, BulkOutcome.FAILED, "Student is not in your department")

            created = self._attendance.upsert_mark(
                student_id=student_id,
                attendance_date=day,
                status=att_status,
                marked_by_teacher_id=teacher.user_id,
                check_in_time=now,
            )
        except DomainError as e:
            return BulkEntryResult(index, student_id, day, BulkOutcome.FAILED, str(e))
        except Exception:
            logger.exception("Bulk mark failed for student %s on %s", student_id, day)
            return BulkEntryResult(index, student_id, day, BulkOutcome.FAILED, "Internal error")

        outcome = BulkOutcome.CREATED if created else BulkOutcome.UPDATED
        return BulkEntryResult(index, student_id, day, outcome)

    def mark_bulk(self, teacher: User, entries: Sequence[Any], *, now: Optional[datetime] = None) -> BulkMarkResult:
        """Mark or correct many students; each entry succeeds or fails on its own."""

        if not entries:
            raise ValidationError("Please select at least one student")

        now = now or now_local()
        result = BulkMarkResult()
        for index, entry in enumerate(entries):
            result.results.append(self._mark_one(teacher, index, entry, now=now))

        logger.info(
            "Teacher %s bulk-marked attendance: created=%d updated=%d failed=%d",
            teacher.user_id,
            result.created,
            result.updated,
            result.failed,
        )
        return result

    def list_own(
        self,
        student_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> tuple[Sequence[AttendanceRow], AttendanceStats]:
        _, limit = clamp_page(1, limit, default_limit=DEFAULT_HISTORY_LIMIT, max_limit=MAX_PAGE_LIMIT)
        rows = self._attendance.list_rows(
            AttendanceQuery(student_id=int(student_id), start_date=start_date, end_date=end_date, limit=limit)
        )
        return rows, compute_stats(rows)

    def list_department(
        self,
        teacher: User,
        *,
        student_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        roll_number: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_DEPARTMENT_LIMIT,
    ) -> dict:
        page, limit = clamp_page(page, limit, default_limit=DEFAULT_DEPARTMENT_LIMIT, max_limit=MAX_PAGE_LIMIT)
        query = AttendanceQuery(
            student_id=student_id,
            # A specific student lifts the department scope.
            department=None if student_id is not None else teacher.department,
            start_date=start_date,
            end_date=end_date,
            status=parse_status(status),
            roll_number=optional_text(roll_number, "roll_number"),
            limit=limit,
            offset=(page - 1) * limit,
        )
        return {
            "rows": self._attendance.list_rows(query),
            "total": self._attendance.count_rows(query),
            "page": page,
            "limit": limit,
        }

    def department_stats(
        self,
        teacher: User,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceStats:
        counts = self._attendance.count_by_status(
            AttendanceQuery(department=teacher.department, start_date=start_date, end_date=end_date)
        )
        return stats_from_counts(counts)

    def list_roster(self, teacher: User) -> Sequence[User]:
        return self._users.list_students(department=teacher.department)
