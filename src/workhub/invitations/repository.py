from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import MembershipRole
from .model import Invitation, RedeemOutcome


class InvitationRepository(Protocol):
    def create(
        self,
        *,
        organization_id: int,
        code: str,
        expires_at: Optional[datetime],
        uses_allowed: Optional[int],
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Invitation]:
        raise NotImplementedError

    def code_exists(self, code: str) -> bool:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int) -> Sequence[Invitation]:
        raise NotImplementedError

    def delete_by_id(self, invitation_id: int) -> bool:
        raise NotImplementedError

    def redeem(
        self,
        *,
        invitation_id: int,
        organization_id: int,
        user_id: int,
        role: MembershipRole,
        now: datetime,
    ) -> RedeemOutcome:
        """Consume one use and add the membership in a single transaction.

        Nothing is written unless both steps succeed.
        """
        raise NotImplementedError
