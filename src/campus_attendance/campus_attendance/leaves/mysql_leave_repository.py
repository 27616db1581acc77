from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where_clause
from .model import LeaveApplication, LeaveQuery, LeaveRow
from .repository import LeaveRepository


def _filters(query: LeaveQuery) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []

    if query.student_id is not None:
        clauses.append("l.student_id=%s")
        params.append(int(query.student_id))
    if query.leave_id is not None:
        clauses.append("l.leave_id=%s")
        params.append(int(query.leave_id))
    if query.department is not None:
        clauses.append("u.department=%s")
        params.append(query.department)
    if query.status is not None:
        clauses.append("l.status=%s")
        params.append(query.status.value)

    return where_clause(clauses), params


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, student_id: int, start_date: date, end_date: date, reason: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_applications(student_id, start_date, end_date, reason, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(student_id), start_date, end_date, reason, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_id, student_id, start_date, end_date, reason, status, created_at,
                       reviewer_remarks, reviewed_by_teacher_id, reviewed_at
                FROM leave_applications
                WHERE leave_id=%s
                """,
                (int(leave_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveApplication(
                leave_id=int(r["leave_id"]),
                student_id=int(r["student_id"]),
                start_date=r["start_date"],
                end_date=r["end_date"],
                reason=r["reason"],
                status=LeaveStatus(r["status"]),
                created_at=r.get("created_at"),
                reviewer_remarks=r.get("reviewer_remarks"),
                reviewed_by_teacher_id=r.get("reviewed_by_teacher_id"),
                reviewed_at=r.get("reviewed_at"),
            )

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        remarks: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_applications
                SET status=%s, reviewed_by_teacher_id=%s, reviewed_at=%s, reviewer_remarks=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    reviewed_at,
                    remarks,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def delete_pending(self, *, leave_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leave_applications WHERE leave_id=%s AND student_id=%s AND status=%s",
                (int(leave_id), int(student_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_rows(self, query: LeaveQuery) -> Sequence[LeaveRow]:
        where, params = _filters(query)
        order = "(l.status='pending') DESC, l.created_at DESC" if query.pending_first else "l.created_at DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT l.leave_id, l.student_id, u.display_name, u.email, u.roll_number, u.department,
                       l.start_date, l.end_date, l.reason, l.status, l.created_at,
                       l.reviewer_remarks, l.reviewed_by_teacher_id, r.display_name AS reviewer_name,
                       l.reviewed_at
                FROM leave_applications l
                JOIN users u ON u.user_id = l.student_id
                LEFT JOIN users r ON r.user_id = l.reviewed_by_teacher_id
                WHERE {where}
                ORDER BY {order}, l.leave_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(query.limit), int(query.offset)]),
            )
            return [
                LeaveRow(
                    leave_id=int(r["leave_id"]),
                    student_id=int(r["student_id"]),
                    student_name=r["display_name"],
                    email=r["email"],
                    roll_number=r.get("roll_number"),
                    department=r.get("department"),
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                    reason=r["reason"],
                    status=LeaveStatus(r["status"]),
                    created_at=r.get("created_at"),
                    reviewer_remarks=r.get("reviewer_remarks"),
                    reviewed_by_teacher_id=r.get("reviewed_by_teacher_id"),
                    reviewer_name=r.get("reviewer_name"),
                    reviewed_at=r.get("reviewed_at"),
                )
                for r in fetchall(cur)
            ]

    def count_rows(self, query: LeaveQuery) -> int:
        where, params = _filters(query)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM leave_applications l
                JOIN users u ON u.user_id = l.student_id
                WHERE {where}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0
