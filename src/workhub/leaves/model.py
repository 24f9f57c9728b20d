from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    user_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str]
    status: LeaveStatus
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def days_within(self, start: date, end: date) -> int:
        """Calendar days of this leave that fall inside [start, end]."""
        lo = max(self.start_date, start)
        hi = min(self.end_date, end)
        return (hi - lo).days + 1 if hi >= lo else 0
