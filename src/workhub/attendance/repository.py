from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Inclusive date range, oldest first."""
        raise NotImplementedError
