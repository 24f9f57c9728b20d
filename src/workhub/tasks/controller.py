from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import iso, now_local
from ..common.http import current_user_id, json_body, login_required, ok, require_params
from ..common.validators import parse_date_field
from ..container import Container
from .model import Task
from .service import TaskDetail


def task_json(task: Task) -> dict:
    return {
        "id": task.task_id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "priority": task.priority.value,
        "due_date": iso(task.due_date),
        "tags": ",".join(task.tags),
        "tag_list": list(task.tags),
        "user_id": task.user_id,
        "assigned_to": task.assigned_to,
        "organization_id": task.organization_id,
        "parent_task_id": task.parent_task_id,
        "created_at": iso(task.created_at),
        "updated_at": iso(task.updated_at),
    }


def task_detail_json(detail: TaskDetail) -> dict:
    body = task_json(detail.task)
    body["subtasks"] = [task_json(s) for s in detail.subtasks]
    return body


def register(app: Flask, container: Container) -> None:
    svc = container.task_service

    @app.route("/api/tasks", methods=["GET"], endpoint="tasks_index")
    @login_required
    def tasks_index():
        page = svc.list_tasks(actor_id=current_user_id(), params=request.args.to_dict())
        return ok([task_json(t) for t in page.items], meta=page.meta())

    @app.route("/api/tasks/my", methods=["GET"], endpoint="tasks_my")
    @login_required
    def tasks_my():
        page = svc.list_tasks(actor_id=current_user_id(), params=request.args.to_dict(), only_mine=True)
        return ok([task_json(t) for t in page.items], meta=page.meta())

    @app.route("/api/tasks", methods=["POST"], endpoint="tasks_create")
    @login_required
    def tasks_create():
        data = json_body()
        detail = svc.create(actor_id=current_user_id(), data=data.get("task", data))
        return ok(task_detail_json(detail), message="Task created", status=201)

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="tasks_show")
    @login_required
    def tasks_show(task_id: int):
        return ok(task_detail_json(svc.get(actor_id=current_user_id(), task_id=task_id)))

    @app.route("/api/tasks/<int:task_id>", methods=["PUT", "PATCH"], endpoint="tasks_update")
    @login_required
    def tasks_update(task_id: int):
        data = json_body()
        detail = svc.update(actor_id=current_user_id(), task_id=task_id, data=data.get("task", data))
        return ok(task_detail_json(detail), message="Task updated")

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="tasks_delete")
    @login_required
    def tasks_delete(task_id: int):
        svc.delete(actor_id=current_user_id(), task_id=task_id)
        return ok(None, message="Task deleted")

    @app.route("/api/tasks/<int:task_id>/status", methods=["PATCH", "PUT"], endpoint="tasks_status")
    @login_required
    def tasks_status(task_id: int):
        data = json_body()
        require_params(data, "status")
        task = svc.update_status(actor_id=current_user_id(), task_id=task_id, status=data["status"])
        return ok(task_json(task), message="Status updated")

    @app.route("/api/tasks/<int:task_id>/assign", methods=["PATCH", "PUT"], endpoint="tasks_assign")
    @login_required
    def tasks_assign(task_id: int):
        data = json_body()
        require_params(data, "user_id")
        task = svc.assign(actor_id=current_user_id(), task_id=task_id, user_id=data["user_id"])
        return ok(task_json(task), message="Task assigned")

    @app.route(
        "/api/tasks/<int:task_id>/subtasks/<int:subtask_id>/toggle",
        methods=["PATCH", "POST"],
        endpoint="tasks_toggle_subtask",
    )
    @login_required
    def tasks_toggle_subtask(task_id: int, subtask_id: int):
        sub = svc.toggle_subtask(actor_id=current_user_id(), task_id=task_id, subtask_id=subtask_id)
        return ok(task_json(sub))

    @app.route("/api/tasks/batch_update", methods=["PATCH", "POST"], endpoint="tasks_batch_update")
    @login_required
    def tasks_batch_update():
        results = svc.batch_update(actor_id=current_user_id(), items=json_body().get("tasks"))
        failed = [r for r in results if not r["success"]]
        message = "All tasks updated" if not failed else f"{len(failed)} task(s) failed to update"
        return ok(results, message=message)

    @app.route("/api/tasks/calendar", methods=["GET"], endpoint="tasks_calendar")
    @login_required
    def tasks_calendar():
        today = now_local().date()
        start = parse_date_field(request.args.get("start_date"), "start_date") or today.replace(day=1)
        end = parse_date_field(request.args.get("end_date"), "end_date") or start + timedelta(days=41)
        grouped = svc.calendar(actor_id=current_user_id(), start=start, end=end)
        return ok({day: [task_json(t) for t in items] for day, items in grouped.items()})

    @app.route("/api/tasks/dashboard", methods=["GET"], endpoint="tasks_dashboard")
    @login_required
    def tasks_dashboard():
        d = svc.dashboard(actor_id=current_user_id())
        return ok(
            {
                "recent_tasks": [task_json(t) for t in d.recent],
                "priority_counts": d.priority_counts,
                "status_counts": d.status_counts,
                "upcoming_tasks": [task_json(t) for t in d.upcoming],
                "overdue_tasks": [task_json(t) for t in d.overdue],
            }
        )
