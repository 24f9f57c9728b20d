from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, opt_int, set_clause
from .model import Meeting, Participant
from .repository import MeetingRepository

_COLUMNS = (
    "mt.meeting_id, mt.title, mt.agenda, mt.description, mt.location, mt.start_time, mt.end_time, "
    "mt.organizer_id, mt.organization_id, mt.created_at"
)

_WRITABLE = {"title", "agenda", "description", "location", "start_time", "end_time", "organizer_id", "organization_id"}


def _to_meeting(row: dict) -> Meeting:
    return Meeting(
        meeting_id=int(row["meeting_id"]),
        title=row["title"],
        agenda=row.get("agenda"),
        description=row.get("description"),
        location=row.get("location"),
        start_time=row["start_time"],
        end_time=row["end_time"],
        organizer_id=int(row["organizer_id"]),
        organization_id=opt_int(row.get("organization_id")),
        created_at=row.get("created_at"),
    )


def _checked(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - _WRITABLE
    if unknown:
        raise ValueError(f"Unknown meeting columns: {sorted(unknown)}")
    return fields


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, fields: Dict[str, Any]) -> int:
        values = _checked(fields)
        cols = ", ".join(values)
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO meetings({cols}) VALUES({placeholders})", tuple(values.values()))
            return int(cur.lastrowid)

    def get_by_id(self, meeting_id: int) -> Optional[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM meetings mt WHERE mt.meeting_id=%s", (meeting_id,))
            row = fetchone(cur)
            return _to_meeting(row) if row else None

    def update_fields(self, *, meeting_id: int, fields: Dict[str, Any]) -> bool:
        if not fields:
            return True
        sql, params = set_clause(_checked(fields))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE meetings SET {sql} WHERE meeting_id=%s", params + (meeting_id,))
            return cur.rowcount > 0

    def delete_by_id(self, meeting_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM meetings WHERE meeting_id=%s", (meeting_id,))
            return cur.rowcount > 0

    def list_for_user(
        self,
        user_id: int,
        *,
        organization_id: Optional[int] = None,
        starting_after: Optional[datetime] = None,
    ) -> Sequence[Meeting]:
        sql = f"""
            SELECT DISTINCT {_COLUMNS}
            FROM meetings mt
            LEFT JOIN meeting_participants p ON p.meeting_id = mt.meeting_id
            WHERE (mt.organizer_id=%s OR p.user_id=%s)
        """
        params: list = [user_id, user_id]
        if organization_id is not None:
            sql += " AND mt.organization_id=%s"
            params.append(organization_id)
        if starting_after is not None:
            sql += " AND mt.start_time >= %s"
            params.append(starting_after)
        sql += " ORDER BY mt.start_time"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_meeting(r) for r in fetchall(cur)]

    def add_participant(self, *, meeting_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO meeting_participants(meeting_id, user_id) VALUES(%s,%s)",
                (meeting_id, user_id),
            )
            return cur.rowcount > 0

    def remove_participant(self, *, meeting_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM meeting_participants WHERE meeting_id=%s AND user_id=%s",
                (meeting_id, user_id),
            )
            return cur.rowcount > 0

    def list_participants(self, meeting_id: int) -> Sequence[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.name
                FROM meeting_participants p
                JOIN users u ON u.user_id = p.user_id
                WHERE p.meeting_id=%s
                ORDER BY u.name
                """,
                (meeting_id,),
            )
            return [Participant(user_id=int(r["user_id"]), name=r["name"]) for r in fetchall(cur)]
