from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import clamp_page, optional_text, require_non_empty
from ..core.constants import (
    DEFAULT_MY_LEAVES_LIMIT,
    DEFAULT_REVIEW_LIMIT,
    MAX_LEAVE_REASON_LENGTH,
    MAX_PAGE_LIMIT,
    MAX_REVIEW_REMARKS_LENGTH,
)
from ..core.enums import LeaveStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import LeaveApplication, LeaveQuery, LeaveRow, LeaveStats
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

DECISIONS = {LeaveStatus.APPROVED, LeaveStatus.REJECTED}


def compute_leave_stats(rows: Iterable[Any]) -> LeaveStats:
    counts = {status: 0 for status in LeaveStatus}
    for r in rows:
        counts[r.status] += 1
    return LeaveStats(
        total=sum(counts.values()),
        pending=counts[LeaveStatus.PENDING],
        approved=counts[LeaveStatus.APPROVED],
        rejected=counts[LeaveStatus.REJECTED],
    )


def parse_leave_status(value: Any) -> Optional[LeaveStatus]:
    if value is None or value == "":
        return None
    try:
        return LeaveStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Invalid leave status")


class LeaveService:
    """Use cases: students apply/withdraw, teachers of the same department decide.

    Status moves pending -> approved | rejected exactly once.
    """

    def __init__(self, leaves: LeaveRepository, users: UserRepository):
        self._leaves = leaves
        self._users = users

    def apply(
        self,
        student_id: int,
        *,
        start_date: Optional[date],
        end_date: Optional[date],
        reason: str,
        today: Optional[date] = None,
    ) -> int:
        if not start_date or not end_date:
            raise ValidationError("Please provide start date, end date, and reason.")
        reason = require_non_empty(reason, "Reason", MAX_LEAVE_REASON_LENGTH)
        today = today or now_local().date()

        if start_date > end_date:
            raise ValidationError("Start date cannot be after end date.")
        if start_date < today:
            raise ValidationError("Cannot apply for leave in the past.")

        leave_id = self._leaves.create(
            student_id=int(student_id),
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        logger.info("Student %s applied for leave %s (%s..%s)", student_id, leave_id, start_date, end_date)
        return leave_id

    def _get(self, leave_id: int) -> LeaveApplication:
        leave = self._leaves.get_by_id(int(leave_id))
        if not leave:
            raise NotFoundError("Leave application not found.")
        return leave

    def get_row(self, leave_id: int) -> LeaveRow:
        rows = self._leaves.list_rows(LeaveQuery(leave_id=int(leave_id), limit=1))
        if not rows:
            raise NotFoundError("Leave application not found.")
        return rows[0]

    def review(
        self,
        leave_id: int,
        teacher: User,
        *,
        decision: Any,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveStatus:
        status = parse_leave_status(decision)
        if status not in DECISIONS:
            raise ValidationError("Please provide valid status (approved or rejected).")
        remarks = optional_text(remarks, "Remarks", MAX_REVIEW_REMARKS_LENGTH)

        leave = self._get(leave_id)
        # Decided applications conflict regardless of department.
        if not leave.is_pending:
            raise ConflictError(f"Leave application is already {leave.status.value}.")
        applicant = self._users.get_by_id(leave.student_id)
        if not applicant or applicant.department != teacher.department:
            raise AuthorizationError("Access denied. This student is not in your department.")

        decided = self._leaves.decide(
            leave_id=leave.leave_id,
            status=status,
            reviewed_by=teacher.user_id,
            reviewed_at=now or now_local(),
            remarks=remarks,
        )
        if not decided:
            # Another reviewer got there first.
            raise ConflictError("Leave application is already decided.")

        logger.info("Teacher %s %s leave %s", teacher.user_id, status.value, leave.leave_id)
        return status

    def delete(self, leave_id: int, student_id: int) -> None:
        leave = self._get(leave_id)
        if leave.student_id != int(student_id):
            raise AuthorizationError("Access denied. You can only delete your own leave applications.")
        if not leave.is_pending:
            raise ConflictError("Cannot delete leave application that is already processed.")
        if not self._leaves.delete_pending(leave_id=leave.leave_id, student_id=int(student_id)):
            raise ConflictError("Cannot delete leave application that is already processed.")

    def list_mine(
        self,
        student_id: int,
        *,
        status: Optional[str] = None,
        limit: int = DEFAULT_MY_LEAVES_LIMIT,
    ) -> tuple[Sequence[LeaveRow], LeaveStats]:
        _, limit = clamp_page(1, limit, default_limit=DEFAULT_MY_LEAVES_LIMIT, max_limit=MAX_PAGE_LIMIT)
        rows = self._leaves.list_rows(
            LeaveQuery(student_id=int(student_id), status=parse_leave_status(status), limit=limit)
        )
        return rows, compute_leave_stats(rows)

    def list_for_review(
        self,
        teacher: User,
        *,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_REVIEW_LIMIT,
    ) -> dict:
        page, limit = clamp_page(page, limit, default_limit=DEFAULT_REVIEW_LIMIT, max_limit=MAX_PAGE_LIMIT)
        query = LeaveQuery(
            department=teacher.department,
            status=parse_leave_status(status),
            pending_first=True,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return {
            "rows": self._leaves.list_rows(query),
            "total": self._leaves.count_rows(query),
            "page": page,
            "limit": limit,
        }
