from __future__ import annotations

from datetime import date, datetime, time

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Short day: checked out before reaching the half-day threshold."""

    def decide_checkin(self, *, now: datetime, today: date, workday_start: time, grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, worked_hours: float, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=f"Worked {worked_hours:.2f}h")
