from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, ok, page_count
from ..container import Container
from ..users.guards import current_user


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    guards = container.guards
    service = container.leave_service

    @app.route(f"{prefix}/leave", methods=["POST"], endpoint="apply_leave")
    @guards.student_required
    def apply_leave():
        body = json_body()
        leave_id = service.apply(
            current_user().user_id,
            start_date=parse_optional_date(body.get("start_date"), "start_date"),
            end_date=parse_optional_date(body.get("end_date"), "end_date"),
            reason=body.get("reason") or "",
        )
        return ok(
            {"leave": service.get_row(leave_id).to_dict()},
            message="Leave application submitted successfully.",
            status=201,
        )

    @app.route(f"{prefix}/leave", methods=["GET"], endpoint="my_leaves")
    @guards.student_required
    def my_leaves():
        rows, stats = service.list_mine(
            current_user().user_id,
            status=request.args.get("status"),
            limit=request.args.get("limit") or 20,
        )
        return ok({"leaves": [r.to_dict() for r in rows], "stats": stats.to_dict()}, count=len(rows))

    @app.route(f"{prefix}/leave/all", methods=["GET"], endpoint="review_queue")
    @guards.teacher_required
    def review_queue():
        result = service.list_for_review(
            current_user(),
            status=request.args.get("status"),
            page=request.args.get("page") or 1,
            limit=request.args.get("limit") or 50,
        )
        rows = result["rows"]
        return ok(
            {"leaves": [r.to_dict() for r in rows]},
            count=len(rows),
            total=result["total"],
            page=result["page"],
            pages=page_count(result["total"], result["limit"]),
        )

    @app.route(f"{prefix}/leave/<int:leave_id>", methods=["PATCH"], endpoint="review_leave")
    @guards.teacher_required
    def review_leave(leave_id: int):
        body = json_body()
        status = service.review(
            leave_id,
            current_user(),
            decision=body.get("status"),
            remarks=body.get("remarks"),
        )
        return ok(
            {"leave": service.get_row(leave_id).to_dict()},
            message=f"Leave application {status.value} successfully.",
        )

    @app.route(f"{prefix}/leave/<int:leave_id>", methods=["DELETE"], endpoint="delete_leave")
    @guards.student_required
    def delete_leave(leave_id: int):
        service.delete(leave_id, current_user().user_id)
        return ok(message="Leave application deleted successfully.")
