from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import MembershipRole


@dataclass(frozen=True)
class Organization:
    """Tenant/workspace grouping users."""

    organization_id: int
    name: str
    description: Optional[str]
    invite_code: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrganizationMember:
    """Read-model: a member row joined with the user's name/email."""

    user_id: int
    name: str
    email: str
    role: MembershipRole
