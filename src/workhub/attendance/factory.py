from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..core.enums import AttendanceStatus
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, today: date, workday_start: time, grace_minutes: int) -> AttendanceStrategy:
        start = datetime.combine(today, workday_start)
        if now <= start + timedelta(minutes=grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(
        self,
        *,
        worked_hours: float,
        current_status: AttendanceStatus,
        half_day_hours: float,
    ) -> AttendanceStrategy:
        if current_status == AttendanceStatus.PRESENT and worked_hours < half_day_hours:
            return HalfDayStrategy()
        return NormalStrategy()
