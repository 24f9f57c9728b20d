from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Tuple

from ..core.enums import MembershipRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetch_count, fetchall, fetchone, opt_int
from .model import ChatRoom, Message, RoomMember
from .repository import ChatRoomRepository, MessageRepository

_ROOM_COLUMNS = "r.chat_room_id, r.name, r.is_direct_message, r.organization_id, r.created_at"
_MESSAGE_COLUMNS = (
    "m.message_id, m.chat_room_id, m.user_id, m.content, m.is_read, m.read_at, "
    "m.created_at, m.updated_at, u.name AS author_name"
)


def _to_room(row: dict) -> ChatRoom:
    return ChatRoom(
        room_id=int(row["chat_room_id"]),
        name=row.get("name"),
        is_direct_message=as_bool(row.get("is_direct_message")),
        organization_id=opt_int(row.get("organization_id")),
        created_at=row.get("created_at"),
    )


def _to_message(row: dict) -> Message:
    return Message(
        message_id=int(row["message_id"]),
        chat_room_id=int(row["chat_room_id"]),
        user_id=int(row["user_id"]),
        content=row["content"],
        read=as_bool(row.get("is_read")),
        read_at=row.get("read_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        author_name=row.get("author_name"),
    )


class MySQLChatRoomRepository(ChatRoomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_room(self, *, name: Optional[str], is_direct_message: bool, organization_id: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO chat_rooms(name, is_direct_message, organization_id) VALUES(%s,%s,%s)",
                (name, 1 if is_direct_message else 0, organization_id),
            )
            return int(cur.lastrowid)

    def get_by_id(self, room_id: int) -> Optional[ChatRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROOM_COLUMNS} FROM chat_rooms r WHERE r.chat_room_id=%s", (room_id,))
            row = fetchone(cur)
            return _to_room(row) if row else None

    def update_name(self, *, room_id: int, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE chat_rooms SET name=%s WHERE chat_room_id=%s", (name, room_id))
            return cur.rowcount > 0

    def delete_by_id(self, room_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM chat_rooms WHERE chat_room_id=%s", (room_id,))
            return cur.rowcount > 0

    def list_for_user(self, user_id: int) -> Sequence[ChatRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ROOM_COLUMNS}
                FROM chat_rooms r
                JOIN chat_room_memberships cm ON cm.chat_room_id = r.chat_room_id
                WHERE cm.user_id=%s
                ORDER BY r.created_at DESC
                """,
                (user_id,),
            )
            return [_to_room(r) for r in fetchall(cur)]

    def find_direct_room(self, user_a: int, user_b: int) -> Optional[ChatRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ROOM_COLUMNS}
                FROM chat_rooms r
                JOIN chat_room_memberships a ON a.chat_room_id = r.chat_room_id AND a.user_id=%s
                JOIN chat_room_memberships b ON b.chat_room_id = r.chat_room_id AND b.user_id=%s
                WHERE r.is_direct_message=1
                  AND (SELECT COUNT(*) FROM chat_room_memberships c WHERE c.chat_room_id = r.chat_room_id) = 2
                LIMIT 1
                """,
                (user_a, user_b),
            )
            row = fetchone(cur)
            return _to_room(row) if row else None

    def add_member(self, *, room_id: int, user_id: int, role: MembershipRole) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO chat_room_memberships(chat_room_id, user_id, role)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE role=VALUES(role)
                """,
                (room_id, user_id, role.value),
            )

    def get_member_role(self, *, room_id: int, user_id: int) -> Optional[MembershipRole]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT role FROM chat_room_memberships WHERE chat_room_id=%s AND user_id=%s",
                (room_id, user_id),
            )
            row = fetchone(cur)
            return MembershipRole(row["role"]) if row else None

    def remove_member(self, *, room_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM chat_room_memberships WHERE chat_room_id=%s AND user_id=%s",
                (room_id, user_id),
            )
            return cur.rowcount > 0

    def list_members(self, room_id: int) -> Sequence[RoomMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.name, cm.role
                FROM chat_room_memberships cm
                JOIN users u ON u.user_id = cm.user_id
                WHERE cm.chat_room_id=%s
                ORDER BY u.name
                """,
                (room_id,),
            )
            return [
                RoomMember(user_id=int(r["user_id"]), name=r["name"], role=MembershipRole(r["role"]))
                for r in fetchall(cur)
            ]


class MySQLMessageRepository(MessageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, chat_room_id: int, user_id: int, content: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO messages(chat_room_id, user_id, content) VALUES(%s,%s,%s)",
                (chat_room_id, user_id, content),
            )
            return int(cur.lastrowid)

    def get_by_id(self, message_id: int) -> Optional[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MESSAGE_COLUMNS} FROM messages m JOIN users u ON u.user_id = m.user_id WHERE m.message_id=%s",
                (message_id,),
            )
            row = fetchone(cur)
            return _to_message(row) if row else None

    def update_content(self, *, message_id: int, content: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE messages SET content=%s WHERE message_id=%s", (content, message_id))
            return cur.rowcount > 0

    def delete_by_id(self, message_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM messages WHERE message_id=%s", (message_id,))
            return cur.rowcount > 0

    def list_for_room(self, room_id: int, *, offset: int, limit: int) -> Tuple[Sequence[Message], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM messages WHERE chat_room_id=%s", (room_id,))
            total = fetch_count(cur)
            cur.execute(
                f"""
                SELECT {_MESSAGE_COLUMNS}
                FROM messages m
                JOIN users u ON u.user_id = m.user_id
                WHERE m.chat_room_id=%s
                ORDER BY m.created_at DESC, m.message_id DESC
                LIMIT %s OFFSET %s
                """,
                (room_id, int(limit), int(offset)),
            )
            return [_to_message(r) for r in fetchall(cur)], total

    def mark_read(self, *, room_id: int, reader_id: int, read_at: datetime, limit: Optional[int] = None) -> int:
        sql = """
            UPDATE messages
            SET is_read=1, read_at=%s
            WHERE chat_room_id=%s AND user_id<>%s AND is_read=0
            ORDER BY created_at
        """
        params: tuple = (read_at, room_id, reader_id)
        if limit is not None:
            sql += " LIMIT %s"
            params += (int(limit),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return int(cur.rowcount)
