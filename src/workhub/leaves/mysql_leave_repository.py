from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, opt_int, where
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = "request_id, user_id, leave_type, start_date, end_date, reason, status, created_at, decided_by, decided_at"


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r.get("reason"),
        status=LeaveStatus(r["status"]),
        created_at=r.get("created_at"),
        decided_by=opt_int(r.get("decided_by")),
        decided_at=r.get("decided_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(user_id, leave_type, start_date, end_date, reason)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (user_id, leave_type.value, start_date, end_date, reason),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (request_id,))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        clauses, params = [], []
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(user_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests {where(clauses)} ORDER BY created_at DESC LIMIT %s",
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_overlapping(
        self,
        *,
        user_id: int,
        start: date,
        end: date,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["user_id=%s", "start_date <= %s", "end_date >= %s"]
        params: list = [user_id, end, start]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests {where(clauses)} ORDER BY start_date",
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def decide(self, *, request_id: int, status: LeaveStatus, decided_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s AND status='pending'
                """,
                (status.value, decided_by, decided_at, request_id),
            )
            return cur.rowcount > 0
