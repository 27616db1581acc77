from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import fmt_date, fmt_datetime
from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveApplication:
    leave_id: int
    student_id: int
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    created_at: Optional[datetime] = None
    reviewer_remarks: Optional[str] = None
    reviewed_by_teacher_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING


@dataclass(frozen=True)
class LeaveRow:
    """Read-model for listings (application joined with applicant and reviewer)."""

    leave_id: int
    student_id: int
    student_name: str
    email: str
    roll_number: Optional[str]
    department: Optional[str]
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    created_at: Optional[datetime] = None
    reviewer_remarks: Optional[str] = None
    reviewed_by_teacher_id: Optional[int] = None
    reviewer_name: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> dict:
        return {
            "id": self.leave_id,
            "student": {
                "id": self.student_id,
                "name": self.student_name,
                "email": self.email,
                "roll_number": self.roll_number,
                "department": self.department,
            },
            "start_date": fmt_date(self.start_date),
            "end_date": fmt_date(self.end_date),
            "duration": self.duration_days,
            "reason": self.reason,
            "status": self.status.value,
            "reviewer_remarks": self.reviewer_remarks,
            "reviewed_by": (
                {"id": self.reviewed_by_teacher_id, "name": self.reviewer_name}
                if self.reviewed_by_teacher_id
                else None
            ),
            "reviewed_at": fmt_datetime(self.reviewed_at),
            "created_at": fmt_datetime(self.created_at),
        }


@dataclass(frozen=True)
class LeaveQuery:
    student_id: Optional[int] = None
    leave_id: Optional[int] = None
    department: Optional[str] = None
    status: Optional[LeaveStatus] = None
    pending_first: bool = False
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True)
class LeaveStats:
    total: int
    pending: int
    approved: int
    rejected: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "pending": self.pending,
            "approved": self.approved,
            "rejected": self.rejected,
        }
