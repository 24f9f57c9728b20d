from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..common.codes import generate_unique_code
from ..common.datetime_utils import now_local
from ..common.validators import parse_int_field
from ..core.constants import DEFAULT_INVITATION_HOURS, INVITATION_CODE_LENGTH
from ..core.enums import MembershipRole
from ..core.exceptions import NotFoundError, ValidationError
from ..organizations.model import Organization
from ..organizations.repository import OrganizationRepository
from ..organizations.service import OrganizationService
from .model import Invitation, RedeemOutcome
from .repository import InvitationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvitationCheck:
    invitation: Invitation
    organization: Organization


class InvitationService:
    def __init__(
        self,
        invitations: InvitationRepository,
        organizations: OrganizationRepository,
        organization_service: OrganizationService,
    ):
        self._invitations = invitations
        self._orgs = organizations
        self._org_service = organization_service

    def create(
        self,
        *,
        actor_id: int,
        organization_id: int,
        expires_in=None,
        uses_allowed=None,
        permanent: bool = False,
        now: datetime | None = None,
    ) -> Invitation:
        self._org_service.require_admin(organization_id=organization_id, user_id=actor_id)
        now = now or now_local()

        max_uses = parse_int_field(uses_allowed, "uses_allowed")
        if max_uses is not None and max_uses < 1:
            raise ValidationError("uses_allowed must be at least 1", errors={"uses_allowed": ["must be >= 1"]})

        expires_at: Optional[datetime] = None
        if not permanent:
            hours = parse_int_field(expires_in, "expires_in")
            hours = DEFAULT_INVITATION_HOURS if hours is None else hours
            if hours <= 0:
                raise ValidationError("expires_in must be positive", errors={"expires_in": ["must be > 0"]})
            expires_at = now + timedelta(hours=hours)

        code = generate_unique_code(INVITATION_CODE_LENGTH, self._invitations.code_exists)
        invitation_id = self._invitations.create(
            organization_id=int(organization_id),
            code=code,
            expires_at=expires_at,
            uses_allowed=max_uses,
            created_by=int(actor_id),
        )
        logger.info("Invitation %s created for organization %s", invitation_id, organization_id)
        return self._get_or_404(invitation_id)

    def list_for_organization(self, *, actor_id: int, organization_id: int) -> Sequence[Invitation]:
        self._org_service.require_member(organization_id=organization_id, user_id=actor_id)
        return self._invitations.list_for_organization(int(organization_id))

    def get(self, *, actor_id: int, invitation_id: int) -> Invitation:
        invitation = self._get_or_404(invitation_id)
        self._org_service.require_member(organization_id=invitation.organization_id, user_id=actor_id)
        return invitation

    def delete(self, *, actor_id: int, invitation_id: int) -> None:
        invitation = self._get_or_404(invitation_id)
        self._org_service.require_admin(organization_id=invitation.organization_id, user_id=actor_id)
        self._invitations.delete_by_id(invitation.invitation_id)

    def validate(self, code: str, *, now: datetime | None = None) -> InvitationCheck:
        """Public check: 404 unknown code, 422 expired or used up."""
        now = now or now_local()
        invitation = self._invitations.get_by_code((code or "").strip().upper())
        if not invitation:
            raise NotFoundError("Invitation not found")
        if not invitation.is_valid_for_use(now):
            raise ValidationError(self._invalid_reason(invitation, now))
        return InvitationCheck(invitation=invitation, organization=self._org_service.get_or_404(invitation.organization_id))

    def use(self, *, actor_id: int, code: str, now: datetime | None = None) -> Organization:
        now = now or now_local()
        check = self.validate(code, now=now)
        org_id = check.organization.organization_id

        if self._orgs.get_member_role(organization_id=org_id, user_id=actor_id):
            raise ValidationError("You are already a member of this organization")

        outcome = self._invitations.redeem(
            invitation_id=check.invitation.invitation_id,
            organization_id=org_id,
            user_id=int(actor_id),
            role=MembershipRole.MEMBER,
            now=now,
        )
        if outcome is RedeemOutcome.EXHAUSTED:
            logger.warning("Invitation %s lost a race for its last use", check.invitation.invitation_id)
            raise ValidationError("Invitation has reached its usage limit")
        if outcome is RedeemOutcome.ALREADY_MEMBER:
            raise ValidationError("You are already a member of this organization")

        logger.info("User %s joined organization %s via invitation", actor_id, org_id)
        return check.organization

    def _get_or_404(self, invitation_id: int) -> Invitation:
        invitation = self._invitations.get_by_id(int(invitation_id))
        if not invitation:
            raise NotFoundError("Invitation not found")
        return invitation

    @staticmethod
    def _invalid_reason(invitation: Invitation, now: datetime) -> str:
        if invitation.is_expired(now):
            return "Invitation has expired"
        return "Invitation has reached its usage limit"
