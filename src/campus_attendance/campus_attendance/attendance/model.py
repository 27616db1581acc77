from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import fmt_date, fmt_datetime
from ..core.enums import AttendanceStatus, BulkOutcome


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one calendar day."""

    attendance_id: int
    student_id: int
    attendance_date: date
    status: AttendanceStatus
    check_in_time: datetime
    remarks: Optional[str] = None
    marked_by_teacher_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model for listings (record joined with the student)."""

    attendance_id: int
    student_id: int
    student_name: str
    email: str
    roll_number: Optional[str]
    department: Optional[str]
    attendance_date: date
    status: AttendanceStatus
    check_in_time: datetime
    remarks: Optional[str] = None
    marked_by_teacher_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "student": {
                "id": self.student_id,
                "name": self.student_name,
                "email": self.email,
                "roll_number": self.roll_number,
                "department": self.department,
            },
            "date": fmt_date(self.attendance_date),
            "status": self.status.value,
            "check_in_time": fmt_datetime(self.check_in_time),
            "remarks": self.remarks,
            "marked_by": self.marked_by_teacher_id,
        }


@dataclass(frozen=True)
class AttendanceQuery:
    student_id: Optional[int] = None
    department: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None
    roll_number: Optional[str] = None
    limit: int = 100
    offset: int = 0


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    absent: int
    late: int
    attendance_rate: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "attendance_rate": self.attendance_rate,
        }


@dataclass(frozen=True)
class BulkEntryResult:
    index: int
    student_id: Optional[int]
    attendance_date: Optional[date]
    outcome: BulkOutcome
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "student_id": self.student_id,
            "date": fmt_date(self.attendance_date),
            "outcome": self.outcome.value,
            "reason": self.reason,
        }


@dataclass
class BulkMarkResult:
    results: list[BulkEntryResult] = field(default_factory=list)

    def count(self, outcome: BulkOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def created(self) -> int:
        return self.count(BulkOutcome.CREATED)

    @property
    def updated(self) -> int:
        return self.count(BulkOutcome.UPDATED)

    @property
    def failed(self) -> int:
        return self.count(BulkOutcome.FAILED)

    def to_dict(self) -> dict:
        return {
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }
