from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Invitation:
    """Time- and/or use-limited join code for an organization."""

    invitation_id: int
    organization_id: int
    code: str
    expires_at: Optional[datetime]
    uses_allowed: Optional[int]
    uses_count: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_permanent(self) -> bool:
        return self.expires_at is None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def is_exhausted(self) -> bool:
        return self.uses_allowed is not None and self.uses_count >= self.uses_allowed

    def is_valid_for_use(self, now: datetime) -> bool:
        return not self.is_expired(now) and not self.is_exhausted()

    @property
    def remaining_uses(self) -> Optional[int]:
        if self.uses_allowed is None:
            return None
        return max(self.uses_allowed - self.uses_count, 0)


class RedeemOutcome(str, Enum):
    JOINED = "joined"
    EXHAUSTED = "exhausted"
    ALREADY_MEMBER = "already_member"
