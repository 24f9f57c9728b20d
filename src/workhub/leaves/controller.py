from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import iso
from ..common.http import admin_required, current_user_id, json_body, login_required, ok
from ..container import Container
from .model import LeaveRequest


def leave_json(r: LeaveRequest) -> dict:
    return {
        "id": r.request_id,
        "user_id": r.user_id,
        "leave_type": r.leave_type.value,
        "start_date": iso(r.start_date),
        "end_date": iso(r.end_date),
        "duration_days": r.duration_days,
        "reason": r.reason,
        "status": r.status.value,
        "decided_by": r.decided_by,
        "decided_at": iso(r.decided_at),
        "created_at": iso(r.created_at),
    }


def register(app: Flask, container: Container) -> None:
    leaves = container.leave_service

    @app.route("/api/attendance/leave", methods=["POST"], endpoint="leave_create")
    @login_required
    def leave_create():
        data = json_body()
        payload = data["leave_request"] if isinstance(data.get("leave_request"), dict) else data
        return ok(leave_json(leaves.create(actor_id=current_user_id(), data=payload)), status=201)

    @app.route("/api/attendance/leave-history", methods=["GET"], endpoint="leave_history")
    @login_required
    def leave_history():
        items = leaves.history(actor_id=current_user_id(), status=request.args.get("status"))
        return ok([leave_json(r) for r in items])

    @app.route("/api/attendance/leave/pending", methods=["GET"], endpoint="leave_pending")
    @admin_required
    def leave_pending():
        return ok([leave_json(r) for r in leaves.pending(actor_id=current_user_id())])

    @app.route("/api/attendance/leave/<int:request_id>/approve", methods=["POST"], endpoint="leave_approve")
    @admin_required
    def leave_approve(request_id: int):
        return ok(leave_json(leaves.approve(actor_id=current_user_id(), request_id=request_id)))

    @app.route("/api/attendance/leave/<int:request_id>/reject", methods=["POST"], endpoint="leave_reject")
    @admin_required
    def leave_reject(request_id: int):
        return ok(leave_json(leaves.reject(actor_id=current_user_id(), request_id=request_id)))
