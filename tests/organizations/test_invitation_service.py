from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from workhub.core.enums import MembershipRole
from workhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from workhub.invitations.model import RedeemOutcome

NOW = datetime(2026, 3, 2, 12, 0)


@pytest.fixture
def org(container, admin):
    return container.organization_service.create(actor_id=admin.user_id, name="Acme")


def test_default_invitation_expires_in_24_hours(container, org, admin):
    inv = container.invitation_service.create(actor_id=admin.user_id, organization_id=org.organization_id, now=NOW)

    assert inv.expires_at == NOW + timedelta(hours=24)
    assert len(inv.code) == 10
    assert inv.uses_allowed is None


def test_permanent_invitation_has_no_expiry(container, org, admin):
    inv = container.invitation_service.create(
        actor_id=admin.user_id, organization_id=org.organization_id, permanent=True, now=NOW
    )

    assert inv.is_permanent
    assert inv.is_valid_for_use(NOW + timedelta(days=3650))


def test_member_cannot_create_invitation(container, org, member):
    container.organization_service.join(actor_id=member.user_id, invite_code=org.invite_code)

    with pytest.raises(AuthorizationError):
        container.invitation_service.create(actor_id=member.user_id, organization_id=org.organization_id)


@pytest.mark.parametrize("kwargs", [{"uses_allowed": 0}, {"expires_in": 0}, {"expires_in": "abc"}])
def test_invalid_limits_rejected(container, org, admin, kwargs):
    with pytest.raises(ValidationError):
        container.invitation_service.create(actor_id=admin.user_id, organization_id=org.organization_id, **kwargs)


def test_single_use_invitation_is_exhausted_after_one_join(container, org, admin, member, outsider, repos):
    inv = container.invitation_service.create(
        actor_id=admin.user_id, organization_id=org.organization_id, uses_allowed=1, now=NOW
    )

    joined = container.invitation_service.use(actor_id=member.user_id, code=inv.code, now=NOW)
    assert joined.organization_id == org.organization_id

    with pytest.raises(ValidationError) as exc:
        container.invitation_service.use(actor_id=outsider.user_id, code=inv.code, now=NOW)
    assert "usage limit" in exc.value.message
    assert repos.organizations.get_member_role(organization_id=org.organization_id, user_id=outsider.user_id) is None
    assert repos.invitations.get_by_id(inv.invitation_id).uses_count == 1


def test_expired_invitation_rejected(container, org, admin, member):
    inv = container.invitation_service.create(
        actor_id=admin.user_id, organization_id=org.organization_id, expires_in=1, now=NOW
    )

    with pytest.raises(ValidationError) as exc:
        container.invitation_service.validate(inv.code, now=NOW + timedelta(hours=2))
    assert "expired" in exc.value.message


def test_unknown_code_is_not_found(container):
    with pytest.raises(NotFoundError):
        container.invitation_service.validate("ZZZZZZZZZZ", now=NOW)


def test_existing_member_cannot_use_invitation(container, org, admin):
    inv = container.invitation_service.create(actor_id=admin.user_id, organization_id=org.organization_id, now=NOW)

    with pytest.raises(ValidationError):
        container.invitation_service.use(actor_id=admin.user_id, code=inv.code, now=NOW)


def test_lost_race_for_last_use_is_rejected(container, org, admin, member, repos, monkeypatch):
    inv = container.invitation_service.create(
        actor_id=admin.user_id, organization_id=org.organization_id, uses_allowed=1, now=NOW
    )
    # another request consumed the last use between validate and the guarded update
    monkeypatch.setattr(repos.invitations, "redeem", lambda **_: RedeemOutcome.EXHAUSTED)

    with pytest.raises(ValidationError):
        container.invitation_service.use(actor_id=member.user_id, code=inv.code, now=NOW)
    assert repos.organizations.get_member_role(organization_id=org.organization_id, user_id=member.user_id) is None


def test_join_race_on_membership_keeps_use_unconsumed(container, org, admin, member, repos, monkeypatch):
    inv = container.invitation_service.create(
        actor_id=admin.user_id, organization_id=org.organization_id, uses_allowed=1, now=NOW
    )
    original = repos.organizations.get_member_role
    calls = []

    # the first membership check misses; a concurrent join lands before the redeem
    def racing_member_role(**kwargs):
        calls.append(kwargs)
        if len(calls) == 1:
            result = original(**kwargs)
            repos.organizations.add_member(
                organization_id=org.organization_id, user_id=member.user_id, role=MembershipRole.MEMBER
            )
            return result
        return original(**kwargs)

    monkeypatch.setattr(repos.organizations, "get_member_role", racing_member_role)

    with pytest.raises(ValidationError) as exc:
        container.invitation_service.use(actor_id=member.user_id, code=inv.code, now=NOW)
    assert "already a member" in exc.value.message
    assert repos.invitations.get_by_id(inv.invitation_id).uses_count == 0
