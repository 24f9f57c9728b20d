from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, in_clause
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, name, email, password_hash, role, department, position, bio, is_active, last_login_at, created_at"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        position=row.get("position"),
        bio=row.get("bio"),
        is_active=as_bool(row.get("is_active", 1)),
        last_login_at=row.get("last_login_at"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY name")
            return [_to_user(r) for r in fetchall(cur)]

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        placeholders, params = in_clause([int(u) for u in user_ids])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id IN {placeholders}", params)
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(name, email, password_hash, role)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (name, email, password_hash, role.value),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            raise ValidationError("email has already been taken", errors={"email": ["has already been taken"]}) from None

    def update_profile(
        self,
        *,
        user_id: int,
        name: str,
        department: Optional[str],
        position: Optional[str],
        bio: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, department=%s, position=%s, bio=%s
                WHERE user_id=%s
                """,
                (name, department, position, bio, user_id),
            )
            return cur.rowcount > 0

    def update_access(self, *, user_id: int, role: Role, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET role=%s, is_active=%s WHERE user_id=%s",
                (role.value, 1 if is_active else 0, user_id),
            )
            return cur.rowcount > 0

    def update_password(self, *, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, user_id))
            return cur.rowcount > 0

    def touch_last_login(self, *, user_id: int, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login_at=%s WHERE user_id=%s", (at, user_id))

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0
