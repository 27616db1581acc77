from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveApplication, LeaveQuery, LeaveRow


class LeaveRepository(Protocol):
    def create(self, *, student_id: int, start_date: date, end_date: date, reason: str) -> int:
        raise NotImplementedError

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        remarks: Optional[str] = None,
    ) -> bool:
        """Apply a decision only while the application is still pending."""

        raise NotImplementedError

    def delete_pending(self, *, leave_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def list_rows(self, query: LeaveQuery) -> Sequence[LeaveRow]:
        raise NotImplementedError

    def count_rows(self, query: LeaveQuery) -> int:
        raise NotImplementedError
