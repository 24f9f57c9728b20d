from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import iso
from ..common.http import current_user_id, json_body, login_required, ok
from ..container import Container
from .model import Manual, Viewer
from .policy import can_edit


def manual_json(m: Manual, viewer: Viewer) -> dict:
    return {
        "id": m.manual_id,
        "title": m.title,
        "content": m.content,
        "department": m.department.value,
        "category": m.category.value,
        "access_level": m.access_level.value,
        "edit_permission": m.edit_permission.value,
        "status": m.status.value,
        "tags": list(m.tags),
        "created_at": iso(m.created_at),
        "updated_at": iso(m.updated_at),
        "author": {"id": m.user_id, "name": m.author_name},
        "can_edit": can_edit(m, viewer),
    }


def register(app: Flask, container: Container) -> None:
    svc = container.manual_service

    def _page_response(page, viewer: Viewer):
        return ok([manual_json(m, viewer) for m in page.items], meta=page.meta())

    @app.route("/api/manuals", methods=["GET"], endpoint="manuals_index")
    @login_required
    def manuals_index():
        actor_id = current_user_id()
        page = svc.list_manuals(actor_id=actor_id, params=request.args.to_dict())
        return _page_response(page, svc.viewer(actor_id))

    @app.route("/api/manuals/search", methods=["GET"], endpoint="manuals_search")
    @login_required
    def manuals_search():
        actor_id = current_user_id()
        page = svc.search(actor_id=actor_id, params=request.args.to_dict())
        return _page_response(page, svc.viewer(actor_id))

    @app.route("/api/manuals/my", methods=["GET"], endpoint="manuals_my")
    @login_required
    def manuals_my():
        actor_id = current_user_id()
        page = svc.my_manuals(actor_id=actor_id, params=request.args.to_dict())
        return _page_response(page, svc.viewer(actor_id))

    @app.route("/api/manuals/categories", methods=["GET"], endpoint="manuals_categories")
    @login_required
    def manuals_categories():
        return ok(svc.categories())

    @app.route("/api/manuals/<int:manual_id>", methods=["GET"], endpoint="manuals_show")
    @login_required
    def manuals_show(manual_id: int):
        actor_id = current_user_id()
        return ok(manual_json(svc.get(actor_id=actor_id, manual_id=manual_id), svc.viewer(actor_id)))

    @app.route("/api/manuals", methods=["POST"], endpoint="manuals_create")
    @login_required
    def manuals_create():
        actor_id = current_user_id()
        data = json_body()
        manual = svc.create(actor_id=actor_id, data=data.get("manual", data))
        return ok(manual_json(manual, svc.viewer(actor_id)), message="Manual created", status=201)

    @app.route("/api/manuals/<int:manual_id>", methods=["PUT", "PATCH"], endpoint="manuals_update")
    @login_required
    def manuals_update(manual_id: int):
        actor_id = current_user_id()
        data = json_body()
        manual = svc.update(actor_id=actor_id, manual_id=manual_id, data=data.get("manual", data))
        return ok(manual_json(manual, svc.viewer(actor_id)), message="Manual updated")

    @app.route("/api/manuals/<int:manual_id>", methods=["DELETE"], endpoint="manuals_delete")
    @login_required
    def manuals_delete(manual_id: int):
        svc.delete(actor_id=current_user_id(), manual_id=manual_id)
        return ok(None, message="Manual deleted")
