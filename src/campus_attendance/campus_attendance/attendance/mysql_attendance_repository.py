from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where_clause
from .model import AttendanceQuery, AttendanceRecord, AttendanceRow
from .repository import AttendanceRepository


def _filters(query: AttendanceQuery) -> tuple[str, list[object]]:
    clauses = ["u.role=%s"]
    params: list[object] = [Role.STUDENT.value]

    if query.student_id is not None:
        clauses.append("a.student_id=%s")
        params.append(int(query.student_id))
    if query.department is not None:
        clauses.append("u.department=%s")
        params.append(query.department)
    if query.start_date is not None:
        clauses.append("a.attendance_date>=%s")
        params.append(query.start_date)
    if query.end_date is not None:
        clauses.append("a.attendance_date<=%s")
        params.append(query.end_date)
    if query.status is not None:
        clauses.append("a.status=%s")
        params.append(query.status.value)
    if query.roll_number:
        clauses.append("u.roll_number=%s")
        params.append(query.roll_number)

    return where_clause(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, attendance_date, status, check_in_time, remarks, marked_by_teacher_id
                FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s
                """,
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceRecord(
                attendance_id=int(r["attendance_id"]),
                student_id=int(r["student_id"]),
                attendance_date=r["attendance_date"],
                status=AttendanceStatus(r["status"]),
                check_in_time=r["check_in_time"],
                remarks=r.get("remarks"),
                marked_by_teacher_id=r.get("marked_by_teacher_id"),
            )

    def create(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        check_in_time: datetime,
        remarks: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, attendance_date, status, check_in_time, remarks)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(student_id), attendance_date, status.value, check_in_time, remarks),
            )
            return int(cur.lastrowid)

    def upsert_mark(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        marked_by_teacher_id: int,
        check_in_time: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, attendance_date, status, check_in_time, marked_by_teacher_id)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    check_in_time=VALUES(check_in_time),
                    marked_by_teacher_id=VALUES(marked_by_teacher_id)
                """,
                (int(student_id), attendance_date, status.value, check_in_time, int(marked_by_teacher_id)),
            )
            # MySQL: 1 = inserted, 2 = existing row updated, 0 = existing row unchanged.
            return cur.rowcount == 1

    def list_rows(self, query: AttendanceQuery) -> Sequence[AttendanceRow]:
        where, params = _filters(query)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.attendance_id, a.student_id, u.display_name, u.email, u.roll_number, u.department,
                       a.attendance_date, a.status, a.check_in_time, a.remarks, a.marked_by_teacher_id
                FROM attendance_records a
                JOIN users u ON u.user_id = a.student_id
                WHERE {where}
                ORDER BY a.attendance_date DESC, u.roll_number
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(query.limit), int(query.offset)]),
            )
            return [
                AttendanceRow(
                    attendance_id=int(r["attendance_id"]),
                    student_id=int(r["student_id"]),
                    student_name=r["display_name"],
                    email=r["email"],
                    roll_number=r.get("roll_number"),
                    department=r.get("department"),
                    attendance_date=r["attendance_date"],
                    status=AttendanceStatus(r["status"]),
                    check_in_time=r["check_in_time"],
                    remarks=r.get("remarks"),
                    marked_by_teacher_id=r.get("marked_by_teacher_id"),
                )
                for r in fetchall(cur)
            ]

    def count_rows(self, query: AttendanceQuery) -> int:
        where, params = _filters(query)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM attendance_records a
                JOIN users u ON u.user_id = a.student_id
                WHERE {where}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def count_by_status(self, query: AttendanceQuery) -> dict[AttendanceStatus, int]:
        where, params = _filters(query)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.status, COUNT(*) AS total
                FROM attendance_records a
                JOIN users u ON u.user_id = a.student_id
                WHERE {where}
                GROUP BY a.status
                """,
                tuple(params),
            )
            return {AttendanceStatus(r["status"]): int(r["total"]) for r in fetchall(cur)}
