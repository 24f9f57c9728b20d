from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        user_id: int,
        start: date,
        end: date,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide(self, *, request_id: int, status: LeaveStatus, decided_by: int, decided_at: datetime) -> bool:
        """Only pending requests can be decided; False otherwise."""
        raise NotImplementedError
