from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one work day."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    total_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    note: Optional[str] = None

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None
