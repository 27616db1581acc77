from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, ok, page_count
from ..core.exceptions import ValidationError
from ..container import Container
from ..users.guards import current_user


def _optional_int(value, field_name: str):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    guards = container.guards
    service = container.attendance_service

    @app.route(f"{prefix}/attendance", methods=["POST"], endpoint="mark_attendance")
    @guards.student_required
    def mark_attendance():
        body = json_body()
        service.mark_self(current_user().user_id, status=body.get("status"), remarks=body.get("remarks"))
        rows, _ = service.list_own(current_user().user_id, limit=1)
        return ok(
            {"attendance": rows[0].to_dict() if rows else None},
            message="Attendance marked successfully.",
            status=201,
        )

    @app.route(f"{prefix}/attendance", methods=["GET"], endpoint="my_attendance")
    @guards.student_required
    def my_attendance():
        args = request.args
        rows, stats = service.list_own(
            current_user().user_id,
            start_date=parse_optional_date(args.get("start_date"), "start_date"),
            end_date=parse_optional_date(args.get("end_date"), "end_date"),
            limit=_optional_int(args.get("limit"), "limit") or 30,
        )
        return ok(
            {"attendance": [r.to_dict() for r in rows], "stats": stats.to_dict()},
            count=len(rows),
        )

    @app.route(f"{prefix}/attendance/all", methods=["GET"], endpoint="department_attendance")
    @guards.teacher_required
    def department_attendance():
        args = request.args
        result = service.list_department(
            current_user(),
            student_id=_optional_int(args.get("student_id"), "student_id"),
            start_date=parse_optional_date(args.get("start_date"), "start_date"),
            end_date=parse_optional_date(args.get("end_date"), "end_date"),
            status=args.get("status"),
            roll_number=args.get("roll_number"),
            page=args.get("page") or 1,
            limit=args.get("limit") or 100,
        )
        rows = result["rows"]
        return ok(
            {"attendance": [r.to_dict() for r in rows]},
            count=len(rows),
            total=result["total"],
            page=result["page"],
            pages=page_count(result["total"], result["limit"]),
        )

    @app.route(f"{prefix}/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @guards.teacher_required
    def attendance_stats():
        args = request.args
        stats = service.department_stats(
            current_user(),
            start_date=parse_optional_date(args.get("start_date"), "start_date"),
            end_date=parse_optional_date(args.get("end_date"), "end_date"),
        )
        counts = stats.to_dict()
        breakdown = [{"status": key, "count": counts[key]} for key in ("present", "absent", "late")]
        return ok({"total": stats.total, "breakdown": breakdown, "attendance_rate": stats.attendance_rate})

    @app.route(f"{prefix}/attendance/students", methods=["GET"], endpoint="attendance_roster")
    @guards.teacher_required
    def attendance_roster():
        students = service.list_roster(current_user())
        return ok(
            {"students": [s.public_dict() for s in students], "department": current_user().department},
            count=len(students),
        )

    @app.route(f"{prefix}/attendance/bulk", methods=["POST"], endpoint="bulk_attendance")
    @guards.teacher_required
    def bulk_attendance():
        entries = json_body().get("attendance")
        if not isinstance(entries, list):
            raise ValidationError("attendance must be a list of {student_id, status, date}")
        result = service.mark_bulk(current_user(), entries)
        message = f"Attendance processed for {result.created + result.updated} student(s)"
        if result.failed:
            message += f", {result.failed} failed"
        return ok(result.to_dict(), message=message)
