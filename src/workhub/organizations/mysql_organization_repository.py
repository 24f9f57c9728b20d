from __future__ import annotations

from typing import Optional, Sequence, Tuple

from ..core.enums import MembershipRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Organization, OrganizationMember
from .repository import OrganizationRepository

_COLUMNS = "o.organization_id, o.name, o.description, o.invite_code, o.created_at"


def _to_org(row: dict) -> Organization:
    return Organization(
        organization_id=int(row["organization_id"]),
        name=row["name"],
        description=row.get("description"),
        invite_code=row["invite_code"],
        created_at=row.get("created_at"),
    )


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, name: str, description: Optional[str], invite_code: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO organizations(name, description, invite_code) VALUES(%s,%s,%s)",
                (name, description, invite_code),
            )
            return int(cur.lastrowid)

    def get_by_id(self, organization_id: int) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM organizations o WHERE o.organization_id=%s", (organization_id,))
            row = fetchone(cur)
            return _to_org(row) if row else None

    def get_by_invite_code(self, invite_code: str) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM organizations o WHERE o.invite_code=%s", (invite_code,))
            row = fetchone(cur)
            return _to_org(row) if row else None

    def invite_code_exists(self, invite_code: str) -> bool:
        return self.get_by_invite_code(invite_code) is not None

    def update_invite_code(self, *, organization_id: int, invite_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE organizations SET invite_code=%s WHERE organization_id=%s",
                (invite_code, organization_id),
            )
            return cur.rowcount > 0

    def list_for_user(self, user_id: int) -> Sequence[Tuple[Organization, MembershipRole]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, m.role AS member_role
                FROM organizations o
                JOIN organization_memberships m ON m.organization_id = o.organization_id
                WHERE m.user_id=%s
                ORDER BY o.name
                """,
                (user_id,),
            )
            return [(_to_org(r), MembershipRole(r["member_role"])) for r in fetchall(cur)]

    def list_ids_for_user(self, user_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT organization_id FROM organization_memberships WHERE user_id=%s", (user_id,))
            return [int(r["organization_id"]) for r in fetchall(cur)]

    def add_member(self, *, organization_id: int, user_id: int, role: MembershipRole) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO organization_memberships(organization_id, user_id, role)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE role=VALUES(role)
                """,
                (organization_id, user_id, role.value),
            )

    def get_member_role(self, *, organization_id: int, user_id: int) -> Optional[MembershipRole]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT role FROM organization_memberships WHERE organization_id=%s AND user_id=%s",
                (organization_id, user_id),
            )
            row = fetchone(cur)
            return MembershipRole(row["role"]) if row else None

    def remove_member(self, *, organization_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM organization_memberships WHERE organization_id=%s AND user_id=%s",
                (organization_id, user_id),
            )
            return cur.rowcount > 0

    def list_members(self, organization_id: int) -> Sequence[OrganizationMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.name, u.email, m.role
                FROM organization_memberships m
                JOIN users u ON u.user_id = m.user_id
                WHERE m.organization_id=%s
                ORDER BY u.name
                """,
                (organization_id,),
            )
            return [
                OrganizationMember(
                    user_id=int(r["user_id"]),
                    name=r["name"],
                    email=r["email"],
                    role=MembershipRole(r["role"]),
                )
                for r in fetchall(cur)
            ]
