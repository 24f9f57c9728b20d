from __future__ import annotations

from datetime import datetime

import pytest

from workhub.core.enums import Role
from workhub.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ValidationError,
)


def test_signup_creates_member(container, repos):
    s_user = container.auth_service.signup(name="Dana", email="Dana@Example.com", password="secret1")

    assert s_user.role == Role.MEMBER
    assert repos.users.get_by_email("dana@example.com") is not None


def test_signup_rejects_duplicate_email(container, member):
    with pytest.raises(ValidationError) as exc:
        container.auth_service.signup(name="Bob 2", email=member.email, password="secret1")

    assert "email" in exc.value.errors


def test_signup_rejects_short_password(container):
    with pytest.raises(ValidationError):
        container.auth_service.signup(name="Eve", email="eve@example.com", password="123")


def test_authenticate_touches_last_login(container, member, repos):
    at = datetime(2026, 3, 2, 8, 0)
    s_user = container.auth_service.authenticate(member.email, "secret123", now=at)

    assert s_user.user_id == member.user_id
    assert repos.users.get_by_id(member.user_id).last_login_at == at


def test_authenticate_errors(container, member):
    with pytest.raises(BadRequestError):
        container.auth_service.authenticate(member.email, "")
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate(member.email, "wrong-password")


def test_inactive_user_cannot_log_in(container, member, repos):
    repos.users.update_access(user_id=member.user_id, role=Role.MEMBER, is_active=False)

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate(member.email, "secret123")


def test_change_password_checks_order(container, member):
    auth = container.auth_service
    with pytest.raises(AuthenticationError):
        auth.change_password(user_id=member.user_id, current_password="nope", new_password="a", confirmation="a")
    with pytest.raises(ValidationError):
        auth.change_password(
            user_id=member.user_id, current_password="secret123", new_password="newpass99", confirmation="other"
        )
    with pytest.raises(ValidationError):
        auth.change_password(user_id=member.user_id, current_password="secret123", new_password="short", confirmation="short")

    auth.change_password(
        user_id=member.user_id, current_password="secret123", new_password="newpass99", confirmation="newpass99"
    )
    assert auth.authenticate(member.email, "newpass99").user_id == member.user_id


def test_member_cannot_promote_self(container, member):
    with pytest.raises(AuthorizationError):
        container.user_service.update_user(actor_id=member.user_id, user_id=member.user_id, data={"role": "admin"})


def test_admin_updates_other_user_access(container, admin, member):
    updated = container.user_service.update_user(
        actor_id=admin.user_id, user_id=member.user_id, data={"role": "admin", "position": "Lead"}
    )

    assert updated.role == Role.ADMIN
    assert updated.position == "Lead"


def test_rejected_access_change_leaves_profile_untouched(container, member, repos):
    with pytest.raises(AuthorizationError):
        container.user_service.update_user(
            actor_id=member.user_id, user_id=member.user_id, data={"name": "Renamed", "role": "admin"}
        )

    assert repos.users.get_by_id(member.user_id).name == member.name


@pytest.mark.parametrize("raw, expected", [("false", False), ("0", False), (False, False), ("true", True)])
def test_admin_sets_active_flag_from_strings(container, admin, member, raw, expected):
    updated = container.user_service.update_user(actor_id=admin.user_id, user_id=member.user_id, data={"is_active": raw})

    assert updated.is_active is expected


def test_unparseable_active_flag_rejected(container, admin, member):
    with pytest.raises(ValidationError):
        container.user_service.update_user(actor_id=admin.user_id, user_id=member.user_id, data={"is_active": "maybe"})


def test_member_cannot_delete_others(container, admin, member):
    with pytest.raises(AuthorizationError):
        container.user_service.delete_user(actor_id=member.user_id, user_id=admin.user_id)
