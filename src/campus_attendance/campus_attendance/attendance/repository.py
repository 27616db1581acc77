from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceQuery, AttendanceRecord, AttendanceRow


class AttendanceRepository(Protocol):
    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        check_in_time: datetime,
        remarks: Optional[str] = None,
    ) -> int:
        """Raises DuplicateError when the student already has a record that day."""

        raise NotImplementedError

    def upsert_mark(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        marked_by_teacher_id: int,
        check_in_time: datetime,
    ) -> bool:
        """Teacher mark: overwrite the day's record in place. Returns True if a row was created."""

        raise NotImplementedError

    def list_rows(self, query: AttendanceQuery) -> Sequence[AttendanceRow]:
        raise NotImplementedError

    def count_rows(self, query: AttendanceQuery) -> int:
        raise NotImplementedError

    def count_by_status(self, query: AttendanceQuery) -> dict[AttendanceStatus, int]:
        raise NotImplementedError
