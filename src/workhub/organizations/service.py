from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from ..common.codes import generate_unique_code
from ..common.validators import optional_enum, require_max_length, require_non_empty
from ..core.constants import (
    ORGANIZATION_CODE_LENGTH,
    ORGANIZATION_DESCRIPTION_MAX_LENGTH,
    ORGANIZATION_NAME_MAX_LENGTH,
)
from ..core.enums import MembershipRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Organization, OrganizationMember
from .repository import OrganizationRepository

logger = logging.getLogger(__name__)


class OrganizationService:
    def __init__(self, organizations: OrganizationRepository, users: UserRepository):
        self._orgs = organizations
        self._users = users

    # Access helpers reused by other services
    def get_or_404(self, organization_id: int) -> Organization:
        org = self._orgs.get_by_id(int(organization_id))
        if not org:
            raise NotFoundError("Organization not found")
        return org

    def require_member(self, *, organization_id: int, user_id: int) -> MembershipRole:
        self.get_or_404(organization_id)
        role = self._orgs.get_member_role(organization_id=int(organization_id), user_id=int(user_id))
        if role is None:
            raise AuthorizationError("You are not a member of this organization")
        return role

    def require_admin(self, *, organization_id: int, user_id: int) -> None:
        if self.require_member(organization_id=organization_id, user_id=user_id) != MembershipRole.ADMIN:
            raise AuthorizationError("Organization admin privileges required")

    def _new_invite_code(self) -> str:
        return generate_unique_code(ORGANIZATION_CODE_LENGTH, self._orgs.invite_code_exists)

    # Use cases
    def create(self, *, actor_id: int, name: str, description: Optional[str] = None) -> Organization:
        name = require_non_empty(name, "name")
        require_max_length(name, "name", ORGANIZATION_NAME_MAX_LENGTH)
        require_max_length(description, "description", ORGANIZATION_DESCRIPTION_MAX_LENGTH)

        org_id = self._orgs.create(name=name, description=description or None, invite_code=self._new_invite_code())
        self._orgs.add_member(organization_id=org_id, user_id=actor_id, role=MembershipRole.ADMIN)
        logger.info("Organization %s created by user %s", org_id, actor_id)
        return self.get_or_404(org_id)

    def list_for_user(self, user_id: int) -> Sequence[Tuple[Organization, MembershipRole]]:
        return self._orgs.list_for_user(int(user_id))

    def get(self, *, actor_id: int, organization_id: int) -> Tuple[Organization, MembershipRole]:
        role = self.require_member(organization_id=organization_id, user_id=actor_id)
        return self.get_or_404(organization_id), role

    def members(self, *, actor_id: int, organization_id: int) -> Sequence[OrganizationMember]:
        self.require_member(organization_id=organization_id, user_id=actor_id)
        return self._orgs.list_members(int(organization_id))

    def join(self, *, actor_id: int, invite_code: str) -> Organization:
        code = require_non_empty(invite_code, "invite_code").upper()
        org = self._orgs.get_by_invite_code(code)
        if not org:
            raise NotFoundError("Invalid invite code")
        if self._orgs.get_member_role(organization_id=org.organization_id, user_id=actor_id):
            raise ValidationError("You are already a member of this organization")

        self._orgs.add_member(organization_id=org.organization_id, user_id=actor_id, role=MembershipRole.MEMBER)
        logger.info("User %s joined organization %s", actor_id, org.organization_id)
        return org

    def add_member(self, *, actor_id: int, organization_id: int, user_id: int, role=None) -> OrganizationMember:
        self.require_admin(organization_id=organization_id, user_id=actor_id)
        member_role = optional_enum(MembershipRole, role, "role") or MembershipRole.MEMBER

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if self._orgs.get_member_role(organization_id=int(organization_id), user_id=user.user_id):
            raise ValidationError("User is already a member of this organization")

        self._orgs.add_member(organization_id=int(organization_id), user_id=user.user_id, role=member_role)
        return OrganizationMember(user_id=user.user_id, name=user.name, email=user.email, role=member_role)

    def remove_member(self, *, actor_id: int, organization_id: int, user_id: int) -> None:
        self.require_admin(organization_id=organization_id, user_id=actor_id)
        if int(user_id) == int(actor_id):
            raise ValidationError("You cannot remove yourself from the organization")
        if not self._orgs.remove_member(organization_id=int(organization_id), user_id=int(user_id)):
            raise NotFoundError("User is not a member of this organization")
        logger.info("User %s removed from organization %s", user_id, organization_id)

    def regenerate_invite_code(self, *, actor_id: int, organization_id: int) -> Organization:
        self.require_admin(organization_id=organization_id, user_id=actor_id)
        self._orgs.update_invite_code(organization_id=int(organization_id), invite_code=self._new_invite_code())
        return self.get_or_404(organization_id)

    def organization_ids_for(self, user_id: int) -> Sequence[int]:
        return self._orgs.list_ids_for_user(int(user_id))
