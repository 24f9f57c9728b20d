from __future__ import annotations

from flask import Flask, session

from ..common.http import current_user_id, json_body, login_required, ok, require_params
from ..container import Container
from .serializers import user_json
from .service import SessionUser


def register(app: Flask, container: Container) -> None:
    def _start_session(s_user: SessionUser, *, remember: bool) -> None:
        session.clear()
        session.permanent = remember
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value
        session["department"] = s_user.department

    @app.route("/api/auth/signup", methods=["POST"], endpoint="auth_signup")
    def signup():
        data = json_body()
        s_user = container.auth_service.signup(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
        )
        _start_session(s_user, remember=False)
        return ok(user_json(container.user_service.get_user(s_user.user_id)), message="Signed up", status=201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email"), data.get("password"))
        _start_session(s_user, remember=bool(data.get("remember_me")))
        return ok(user_json(container.user_service.get_user(s_user.user_id)), message="Logged in")

    @app.route("/api/auth/logout", methods=["DELETE", "POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return ok(None, message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        user_id = current_user_id()
        body = user_json(container.user_service.get_user(user_id))
        body["organizations"] = [
            {"id": org.organization_id, "name": org.name, "role": role.value}
            for org, role in container.organization_service.list_for_user(user_id)
        ]
        return ok(body)

    @app.route("/api/auth/password", methods=["PUT"], endpoint="auth_change_password")
    @login_required
    def change_password():
        data = json_body()
        require_params(data, "current_password", "password", "password_confirmation")
        container.auth_service.change_password(
            user_id=current_user_id(),
            current_password=data["current_password"],
            new_password=data["password"],
            confirmation=data["password_confirmation"],
        )
        return ok(None, message="Password changed")

    @app.route("/api/users", methods=["GET"], endpoint="users_index")
    @login_required
    def users_index():
        return ok([user_json(u) for u in container.user_service.list_users()])

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="users_show")
    @login_required
    def users_show(user_id: int):
        return ok(user_json(container.user_service.get_user(user_id)))

    @app.route("/api/users/<int:user_id>", methods=["PUT", "PATCH"], endpoint="users_update")
    @login_required
    def users_update(user_id: int):
        user = container.user_service.update_user(actor_id=current_user_id(), user_id=user_id, data=json_body())
        return ok(user_json(user), message="User updated")

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @login_required
    def users_delete(user_id: int):
        actor_id = current_user_id()
        container.user_service.delete_user(actor_id=actor_id, user_id=user_id)
        if actor_id == user_id:
            session.clear()
        return ok(None, message="User deleted")

    @app.route("/api/profile", methods=["PUT", "PATCH"], endpoint="profile_update")
    @login_required
    def profile_update():
        user = container.user_service.update_profile(user_id=current_user_id(), data=json_body())
        session["name"] = user.name
        session["department"] = user.department
        return ok(user_json(user), message="Profile updated")
