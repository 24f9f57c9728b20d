from __future__ import annotations

from datetime import datetime

from ...core.constants import STANDARD_WORK_HOURS
from .base import HoursCalculator


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: (out - in) in hours, 2 decimals; overtime beyond the standard day."""

    def __init__(self, standard_hours: float = STANDARD_WORK_HOURS):
        self._standard_hours = float(standard_hours)

    def worked_hours(self, check_in: datetime, check_out: datetime) -> float:
        return round((check_out - check_in).total_seconds() / 3600, 2)

    def overtime_hours(self, worked_hours: float) -> float:
        return round(max(worked_hours - self._standard_hours, 0.0), 2)
