from __future__ import annotations

from flask import Flask, send_file

from ..common.datetime_utils import iso, now_local
from ..common.http import current_user_id, json_body, login_required, ok
from ..container import Container
from ..organizations.model import Organization
from .model import Invitation
from .qr import render_qr_png


def invitation_json(inv: Invitation) -> dict:
    now = now_local()
    return {
        "id": inv.invitation_id,
        "organization_id": inv.organization_id,
        "code": inv.code,
        "expires_at": iso(inv.expires_at),
        "uses_allowed": inv.uses_allowed,
        "uses_count": inv.uses_count,
        "remaining_uses": inv.remaining_uses,
        "permanent": inv.is_permanent,
        "expired": inv.is_expired(now),
        "valid": inv.is_valid_for_use(now),
        "created_at": iso(inv.created_at),
    }


def _org_summary(org: Organization) -> dict:
    return {"id": org.organization_id, "name": org.name, "description": org.description}


def register(app: Flask, container: Container) -> None:
    svc = container.invitation_service

    @app.route(
        "/api/organizations/<int:organization_id>/invitations",
        methods=["POST"],
        endpoint="invitations_create",
    )
    @login_required
    def invitations_create(organization_id: int):
        data = json_body()
        inv = svc.create(
            actor_id=current_user_id(),
            organization_id=organization_id,
            expires_in=data.get("expires_in"),
            uses_allowed=data.get("uses_allowed"),
            permanent=bool(data.get("permanent")),
        )
        return ok(invitation_json(inv), message="Invitation created", status=201)

    @app.route(
        "/api/organizations/<int:organization_id>/invitations",
        methods=["GET"],
        endpoint="invitations_index",
    )
    @login_required
    def invitations_index(organization_id: int):
        invs = svc.list_for_organization(actor_id=current_user_id(), organization_id=organization_id)
        return ok([invitation_json(i) for i in invs])

    @app.route("/api/invitations/<int:invitation_id>", methods=["GET"], endpoint="invitations_show")
    @login_required
    def invitations_show(invitation_id: int):
        return ok(invitation_json(svc.get(actor_id=current_user_id(), invitation_id=invitation_id)))

    @app.route("/api/invitations/<int:invitation_id>", methods=["DELETE"], endpoint="invitations_delete")
    @login_required
    def invitations_delete(invitation_id: int):
        svc.delete(actor_id=current_user_id(), invitation_id=invitation_id)
        return ok(None, message="Invitation deleted")

    @app.route("/api/invitations/<int:invitation_id>/qr", methods=["GET"], endpoint="invitations_qr")
    @login_required
    def invitations_qr(invitation_id: int):
        inv = svc.get(actor_id=current_user_id(), invitation_id=invitation_id)
        base_url = str(app.config.get("APP_BASE_URL", "")).rstrip("/")
        return send_file(render_qr_png(f"{base_url}/join/{inv.code}"), mimetype="image/png")

    @app.route("/api/invitations/validate/<code>", methods=["GET"], endpoint="invitations_validate")
    def invitations_validate(code: str):
        check = svc.validate(code)
        return ok({"valid": True, "organization": _org_summary(check.organization)})

    @app.route("/api/invitations/use/<code>", methods=["POST"], endpoint="invitations_use")
    @login_required
    def invitations_use(code: str):
        org = svc.use(actor_id=current_user_id(), code=code)
        return ok({"organization": _org_summary(org)}, message=f"Joined {org.name}")
