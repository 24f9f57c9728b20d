from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Decides the day's status at check-in and again once hours are known at check-out."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, today: date, workday_start: time, grace_minutes: int) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, worked_hours: float, current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError
