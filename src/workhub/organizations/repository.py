from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import MembershipRole
from .model import Organization, OrganizationMember


class OrganizationRepository(Protocol):
    def create(self, *, name: str, description: Optional[str], invite_code: str) -> int:
        raise NotImplementedError

    def get_by_id(self, organization_id: int) -> Optional[Organization]:
        raise NotImplementedError

    def get_by_invite_code(self, invite_code: str) -> Optional[Organization]:
        raise NotImplementedError

    def invite_code_exists(self, invite_code: str) -> bool:
        raise NotImplementedError

    def update_invite_code(self, *, organization_id: int, invite_code: str) -> bool:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Tuple[Organization, MembershipRole]]:
        raise NotImplementedError

    def list_ids_for_user(self, user_id: int) -> Sequence[int]:
        raise NotImplementedError

    # Memberships
    def add_member(self, *, organization_id: int, user_id: int, role: MembershipRole) -> None:
        raise NotImplementedError

    def get_member_role(self, *, organization_id: int, user_id: int) -> Optional[MembershipRole]:
        raise NotImplementedError

    def remove_member(self, *, organization_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def list_members(self, organization_id: int) -> Sequence[OrganizationMember]:
        raise NotImplementedError
