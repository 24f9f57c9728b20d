from __future__ import annotations

from typing import Optional

from flask import Flask

from ..common.datetime_utils import iso
from ..common.http import current_user_id, json_body, login_required, ok, require_params
from ..container import Container
from ..core.enums import MembershipRole
from .model import Organization, OrganizationMember


def organization_json(org: Organization, role: Optional[MembershipRole] = None) -> dict:
    body = {
        "id": org.organization_id,
        "name": org.name,
        "description": org.description,
        "created_at": iso(org.created_at),
    }
    if role is not None:
        body["role"] = role.value
        if role == MembershipRole.ADMIN:
            body["invite_code"] = org.invite_code
    return body


def member_json(m: OrganizationMember) -> dict:
    return {"id": m.user_id, "name": m.name, "email": m.email, "role": m.role.value}


def register(app: Flask, container: Container) -> None:
    svc = container.organization_service

    @app.route("/api/organizations", methods=["GET"], endpoint="organizations_index")
    @login_required
    def organizations_index():
        return ok([organization_json(o, r) for o, r in svc.list_for_user(current_user_id())])

    @app.route("/api/organizations", methods=["POST"], endpoint="organizations_create")
    @login_required
    def organizations_create():
        data = json_body()
        org = svc.create(actor_id=current_user_id(), name=data.get("name", ""), description=data.get("description"))
        return ok(organization_json(org, MembershipRole.ADMIN), message="Organization created", status=201)

    @app.route("/api/organizations/<int:organization_id>", methods=["GET"], endpoint="organizations_show")
    @login_required
    def organizations_show(organization_id: int):
        org, role = svc.get(actor_id=current_user_id(), organization_id=organization_id)
        return ok(organization_json(org, role))

    @app.route("/api/organizations/join", methods=["POST"], endpoint="organizations_join")
    @login_required
    def organizations_join():
        data = json_body()
        require_params(data, "invite_code")
        org = svc.join(actor_id=current_user_id(), invite_code=data["invite_code"])
        return ok(organization_json(org, MembershipRole.MEMBER), message="Joined organization")

    @app.route("/api/organizations/<int:organization_id>/members", methods=["GET"], endpoint="organizations_members")
    @login_required
    def organizations_members(organization_id: int):
        members = svc.members(actor_id=current_user_id(), organization_id=organization_id)
        return ok([member_json(m) for m in members])

    @app.route("/api/organizations/<int:organization_id>/members", methods=["POST"], endpoint="organizations_add_member")
    @login_required
    def organizations_add_member(organization_id: int):
        data = json_body()
        require_params(data, "user_id")
        member = svc.add_member(
            actor_id=current_user_id(),
            organization_id=organization_id,
            user_id=data["user_id"],
            role=data.get("role"),
        )
        return ok(member_json(member), message="Member added", status=201)

    @app.route(
        "/api/organizations/<int:organization_id>/members/<int:user_id>",
        methods=["DELETE"],
        endpoint="organizations_remove_member",
    )
    @login_required
    def organizations_remove_member(organization_id: int, user_id: int):
        svc.remove_member(actor_id=current_user_id(), organization_id=organization_id, user_id=user_id)
        return ok(None, message="Member removed")

    @app.route(
        "/api/organizations/<int:organization_id>/regenerate_invite_code",
        methods=["POST"],
        endpoint="organizations_regenerate_code",
    )
    @login_required
    def organizations_regenerate_code(organization_id: int):
        org = svc.regenerate_invite_code(actor_id=current_user_id(), organization_id=organization_id)
        return ok(organization_json(org, MembershipRole.ADMIN), message="Invite code regenerated")
