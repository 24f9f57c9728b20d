from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import MembershipRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, opt_int
from .model import Invitation, RedeemOutcome
from .repository import InvitationRepository

_COLUMNS = "invitation_id, organization_id, code, expires_at, uses_allowed, uses_count, created_by, created_at"


def _to_invitation(row: dict) -> Invitation:
    return Invitation(
        invitation_id=int(row["invitation_id"]),
        organization_id=int(row["organization_id"]),
        code=row["code"],
        expires_at=row.get("expires_at"),
        uses_allowed=opt_int(row.get("uses_allowed")),
        uses_count=int(row.get("uses_count") or 0),
        created_by=opt_int(row.get("created_by")),
        created_at=row.get("created_at"),
    )


class MySQLInvitationRepository(InvitationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        organization_id: int,
        code: str,
        expires_at: Optional[datetime],
        uses_allowed: Optional[int],
        created_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invitations(organization_id, code, expires_at, uses_allowed, created_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (organization_id, code, expires_at, uses_allowed, created_by),
            )
            return int(cur.lastrowid)

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invitations WHERE invitation_id=%s", (invitation_id,))
            row = fetchone(cur)
            return _to_invitation(row) if row else None

    def get_by_code(self, code: str) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invitations WHERE code=%s", (code,))
            row = fetchone(cur)
            return _to_invitation(row) if row else None

    def code_exists(self, code: str) -> bool:
        return self.get_by_code(code) is not None

    def list_for_organization(self, organization_id: int) -> Sequence[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM invitations WHERE organization_id=%s ORDER BY created_at DESC",
                (organization_id,),
            )
            return [_to_invitation(r) for r in fetchall(cur)]

    def delete_by_id(self, invitation_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM invitations WHERE invitation_id=%s", (invitation_id,))
            return cur.rowcount > 0

    def redeem(
        self,
        *,
        invitation_id: int,
        organization_id: int,
        user_id: int,
        role: MembershipRole,
        now: datetime,
    ) -> RedeemOutcome:
        with db_cursor(self._conn_factory) as (conn, cur):
            # Guarded UPDATE: concurrent uses can never push uses_count past uses_allowed.
            cur.execute(
                """
                UPDATE invitations
                SET uses_count = uses_count + 1
                WHERE invitation_id=%s
                  AND (expires_at IS NULL OR expires_at >= %s)
                  AND (uses_allowed IS NULL OR uses_count < uses_allowed)
                """,
                (invitation_id, now),
            )
            if cur.rowcount == 0:
                return RedeemOutcome.EXHAUSTED

            cur.execute(
                """
                INSERT IGNORE INTO organization_memberships(organization_id, user_id, role)
                VALUES(%s,%s,%s)
                """,
                (organization_id, user_id, role.value),
            )
            if cur.rowcount == 0:
                conn.rollback()
                return RedeemOutcome.ALREADY_MEMBER
            return RedeemOutcome.JOINED
