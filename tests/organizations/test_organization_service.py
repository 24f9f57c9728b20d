from __future__ import annotations

import pytest

from workhub.core.enums import MembershipRole
from workhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def org(container, admin):
    return container.organization_service.create(actor_id=admin.user_id, name="Acme", description="Widgets")


def test_creator_becomes_organization_admin(container, org, admin):
    _, role = container.organization_service.get(actor_id=admin.user_id, organization_id=org.organization_id)

    assert role == MembershipRole.ADMIN
    assert len(org.invite_code) == 8


def test_join_with_invite_code(container, org, member):
    joined = container.organization_service.join(actor_id=member.user_id, invite_code=org.invite_code.lower())

    assert joined.organization_id == org.organization_id
    with pytest.raises(ValidationError):
        container.organization_service.join(actor_id=member.user_id, invite_code=org.invite_code)


def test_join_with_unknown_code_is_not_found(container, org, member):
    with pytest.raises(NotFoundError):
        container.organization_service.join(actor_id=member.user_id, invite_code="NOPE0000")


def test_only_admin_manages_members(container, org, admin, member, outsider):
    container.organization_service.add_member(
        actor_id=admin.user_id, organization_id=org.organization_id, user_id=member.user_id
    )

    with pytest.raises(AuthorizationError):
        container.organization_service.add_member(
            actor_id=member.user_id, organization_id=org.organization_id, user_id=outsider.user_id
        )


def test_admin_cannot_remove_self(container, org, admin):
    with pytest.raises(ValidationError):
        container.organization_service.remove_member(
            actor_id=admin.user_id, organization_id=org.organization_id, user_id=admin.user_id
        )


def test_regenerate_invite_code_changes_code(container, org, admin):
    updated = container.organization_service.regenerate_invite_code(
        actor_id=admin.user_id, organization_id=org.organization_id
    )

    assert updated.invite_code != org.invite_code
