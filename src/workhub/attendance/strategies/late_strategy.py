from __future__ import annotations

from datetime import date, datetime, time

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, today: date, workday_start: time, grace_minutes: int) -> StatusDecision:
        minutes_late = int((now - datetime.combine(today, workday_start)).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes_late} min")

    def decide_checkout(self, *, worked_hours: float, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
