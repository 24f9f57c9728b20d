from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_enum, parse_date_field, parse_enum, require_max_length
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(self, leaves: LeaveRepository, users: UserRepository):
        self._leaves = leaves
        self._users = users

    def _user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _require_admin(self, user_id: int) -> User:
        user = self._user(user_id)
        if not user.is_admin:
            raise AuthorizationError("Only admins can decide leave requests")
        return user

    def create(self, *, actor_id: int, data: Dict[str, Any], today: date | None = None) -> LeaveRequest:
        today = today or now_local().date()
        user = self._user(actor_id)

        leave_type = parse_enum(LeaveType, data.get("leave_type"), "leave_type")
        start = parse_date_field(data.get("start_date"), "start_date")
        end = parse_date_field(data.get("end_date"), "end_date")
        errors: Dict[str, List[str]] = {}
        if start is None:
            errors["start_date"] = ["can't be blank"]
        elif start < today:
            errors["start_date"] = ["can't be in the past"]
        if end is None:
            errors["end_date"] = ["can't be blank"]
        elif start is not None and end < start:
            errors["end_date"] = ["must be on or after start_date"]
        if errors:
            raise ValidationError("Leave request is invalid", errors=errors)

        reason = require_max_length((data.get("reason") or "").strip() or None, "reason", 500)
        request_id = self._leaves.create(
            user_id=user.user_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            reason=reason,
        )
        logger.info("Leave request %s (%s) submitted by user %s", request_id, leave_type.value, user.user_id)
        return self._leaves.get_by_id(request_id)

    def history(self, *, actor_id: int, status=None) -> List[LeaveRequest]:
        user = self._user(actor_id)
        return list(self._leaves.list_requests(user_id=user.user_id, status=optional_enum(LeaveStatus, status, "status")))

    def pending(self, *, actor_id: int) -> List[LeaveRequest]:
        self._require_admin(actor_id)
        return list(self._leaves.list_requests(status=LeaveStatus.PENDING))

    def approve(self, *, actor_id: int, request_id: int, now: datetime | None = None) -> LeaveRequest:
        return self._decide(actor_id, request_id, LeaveStatus.APPROVED, now)

    def reject(self, *, actor_id: int, request_id: int, now: datetime | None = None) -> LeaveRequest:
        return self._decide(actor_id, request_id, LeaveStatus.REJECTED, now)

    def _decide(self, actor_id: int, request_id: int, status: LeaveStatus, now: Optional[datetime]) -> LeaveRequest:
        admin = self._require_admin(actor_id)
        req = self._leaves.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        if req.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been processed")

        decided = self._leaves.decide(
            request_id=req.request_id,
            status=status,
            decided_by=admin.user_id,
            decided_at=now or now_local(),
        )
        if not decided:
            raise ValidationError("Leave request has already been processed")
        logger.info("Leave request %s %s by user %s", req.request_id, status.value, admin.user_id)
        return self._leaves.get_by_id(req.request_id)
