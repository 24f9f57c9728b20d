from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import iso
from ..common.http import current_user_id, json_body, login_required, ok
from ..container import Container
from .model import MeetingDetail


def meeting_json(detail: MeetingDetail) -> dict:
    m = detail.meeting
    return {
        "id": m.meeting_id,
        "title": m.title,
        "agenda": m.agenda,
        "description": m.description,
        "location": m.location,
        "start_time": iso(m.start_time),
        "end_time": iso(m.end_time),
        "organizer_id": m.organizer_id,
        "organization_id": m.organization_id,
        "created_at": iso(m.created_at),
        "participants": [{"id": p.user_id, "name": p.name} for p in detail.participants],
    }


def register(app: Flask, container: Container) -> None:
    svc = container.meeting_service

    @app.route("/api/meetings", methods=["GET"], endpoint="meetings_index")
    @login_required
    def meetings_index():
        items = svc.list_meetings(actor_id=current_user_id(), organization_id=request.args.get("organization_id"))
        return ok([meeting_json(d) for d in items])

    @app.route("/api/meetings/my", methods=["GET"], endpoint="meetings_my")
    @login_required
    def meetings_my():
        return ok([meeting_json(d) for d in svc.my_upcoming(actor_id=current_user_id())])

    @app.route("/api/meetings/<int:meeting_id>", methods=["GET"], endpoint="meetings_show")
    @login_required
    def meetings_show(meeting_id: int):
        return ok(meeting_json(svc.get(actor_id=current_user_id(), meeting_id=meeting_id)))

    @app.route("/api/meetings", methods=["POST"], endpoint="meetings_create")
    @login_required
    def meetings_create():
        data = json_body()
        detail = svc.create(actor_id=current_user_id(), data=data.get("meeting", data))
        return ok(meeting_json(detail), message="Meeting created", status=201)

    @app.route("/api/meetings/<int:meeting_id>", methods=["PUT", "PATCH"], endpoint="meetings_update")
    @login_required
    def meetings_update(meeting_id: int):
        data = json_body()
        detail = svc.update(actor_id=current_user_id(), meeting_id=meeting_id, data=data.get("meeting", data))
        return ok(meeting_json(detail), message="Meeting updated")

    @app.route("/api/meetings/<int:meeting_id>", methods=["DELETE"], endpoint="meetings_delete")
    @login_required
    def meetings_delete(meeting_id: int):
        svc.delete(actor_id=current_user_id(), meeting_id=meeting_id)
        return ok(None, message="Meeting deleted")

    @app.route("/api/meetings/<int:meeting_id>/participants", methods=["POST"], endpoint="meetings_add_participants")
    @login_required
    def meetings_add_participants(meeting_id: int):
        data = json_body()
        user_ids = data.get("user_ids") or ([data["user_id"]] if data.get("user_id") else [])
        detail = svc.add_participants(actor_id=current_user_id(), meeting_id=meeting_id, user_ids=user_ids)
        return ok(meeting_json(detail), message="Participants added")

    @app.route(
        "/api/meetings/<int:meeting_id>/participants/<int:user_id>",
        methods=["DELETE"],
        endpoint="meetings_remove_participant",
    )
    @login_required
    def meetings_remove_participant(meeting_id: int, user_id: int):
        detail = svc.remove_participant(actor_id=current_user_id(), meeting_id=meeting_id, user_id=user_id)
        return ok(meeting_json(detail), message="Participant removed")
