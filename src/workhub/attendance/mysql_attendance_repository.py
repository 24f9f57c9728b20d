from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, work_date, check_in_time, check_out_time, status, total_hours, overtime_hours, note"


def _opt_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        total_hours=_opt_float(r.get("total_hours")),
        overtime_hours=_opt_float(r.get("overtime_hours")),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, work_date, check_in_time, status, note)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (user_id, work_date, check_in_time, status.value, note),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            # uq_attendance_user_date: a concurrent check-in won
            raise ValidationError("You have already checked in today") from None

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        total_hours: float,
        overtime_hours: float,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s, total_hours=%s, overtime_hours=%s, note=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, status.value, total_hours, overtime_hours, note, attendance_id),
            )
            return cur.rowcount > 0

    def update_record(
        self,
        *,
        attendance_id: int,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
        total_hours: Optional[float],
        overtime_hours: Optional[float],
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, status=%s, total_hours=%s, overtime_hours=%s, note=%s
                WHERE attendance_id=%s
                """,
                (check_in_time, check_out_time, status.value, total_hours, overtime_hours, note, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (user_id, start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]
