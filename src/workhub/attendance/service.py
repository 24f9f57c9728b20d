from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_enum, parse_date_field, parse_datetime_field, parse_int_field, require_max_length
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, HALF_DAY_HOURS
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_NOTE_MAX_LENGTH = 500


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        workday_start: time,
        strategy_factory: AttendanceStrategyFactory | None = None,
        calculator: HoursCalculator | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        half_day_hours: float = HALF_DAY_HOURS,
    ):
        self._attendance = attendance
        self._users = users
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or StandardHoursCalculator()
        self._workday_start = workday_start
        self._grace_minutes = int(grace_minutes)
        self._half_day_hours = float(half_day_hours)

    def _user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def today(self, user_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        now = now or now_local()
        return self._attendance.get_for_user_and_date(int(user_id), now.date())

    def check_in(self, user_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        user = self._user(user_id)

        if self._attendance.get_for_user_and_date(user.user_id, today):
            raise ValidationError("You have already checked in today")

        kwargs = dict(now=now, today=today, workday_start=self._workday_start, grace_minutes=self._grace_minutes)
        decision = self._factory.for_checkin(**kwargs).decide_checkin(**kwargs)

        self._attendance.create_checkin(
            user_id=user.user_id,
            work_date=today,
            check_in_time=now,
            status=decision.status,
            note=decision.note,
        )
        logger.info("User %s checked in at %s (%s)", user.user_id, now.isoformat(), decision.status.value)
        return self._attendance.get_for_user_and_date(user.user_id, today)

    def check_out(self, user_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        user = self._user(user_id)

        record = self._attendance.get_for_user_and_date(user.user_id, today)
        if not record or record.check_in_time is None:
            raise ValidationError("You have not checked in today")
        if record.is_checked_out:
            raise ValidationError("You have already checked out today")
        if now <= record.check_in_time:
            raise ValidationError("Check-out time must be after check-in time")

        worked = self._calculator.worked_hours(record.check_in_time, now)
        overtime = self._calculator.overtime_hours(worked)
        strategy = self._factory.for_checkout(
            worked_hours=worked,
            current_status=record.status,
            half_day_hours=self._half_day_hours,
        )
        decision = strategy.decide_checkout(worked_hours=worked, current=record.status)

        updated = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            status=decision.status,
            total_hours=worked,
            overtime_hours=overtime,
            note=decision.note or record.note,
        )
        if not updated:
            # another request checked out between the read and the guarded update
            raise ValidationError("You have already checked out today")
        logger.info("User %s checked out after %.2fh", user.user_id, worked)
        return self._attendance.get_for_user_and_date(user.user_id, today)

    def update_record(self, *, actor_id: int, data: Dict[str, Any]) -> AttendanceRecord:
        """Edit a day's record.

        Members may only change the note on their own record. Admins may also
        change times and status, and may target another user via ``user_id``.
        """
        actor = self._user(actor_id)
        work_date = parse_date_field(data.get("date"), "date") or now_local().date()
        target_id = parse_int_field(data.get("user_id"), "user_id") or actor.user_id
        if target_id != actor.user_id and not actor.is_admin:
            raise AuthorizationError("You can only edit your own attendance")

        record = self._attendance.get_for_user_and_date(target_id, work_date)
        if not record:
            raise NotFoundError("Attendance record not found")

        note = record.note
        if "note" in data:
            note = require_max_length(data.get("note") or None, "note", _NOTE_MAX_LENGTH)

        privileged = {"check_in_time", "check_out_time", "status"} & set(data)
        if privileged and not actor.is_admin:
            raise AuthorizationError("Only admins can change attendance times or status")

        check_in = record.check_in_time
        check_out = record.check_out_time
        if "check_in_time" in data:
            check_in = parse_datetime_field(data.get("check_in_time"), "check_in_time")
        if "check_out_time" in data:
            check_out = parse_datetime_field(data.get("check_out_time"), "check_out_time")
        status = optional_enum(AttendanceStatus, data.get("status"), "status") or record.status

        if check_out is not None and (check_in is None or check_out <= check_in):
            raise ValidationError(
                "Check-out time must be after check-in time",
                errors={"check_out_time": ["must be after check_in_time"]},
            )

        total = overtime = None
        if check_in is not None and check_out is not None:
            total = self._calculator.worked_hours(check_in, check_out)
            overtime = self._calculator.overtime_hours(total)

        self._attendance.update_record(
            attendance_id=record.attendance_id,
            check_in_time=check_in,
            check_out_time=check_out,
            status=status,
            total_hours=total,
            overtime_hours=overtime,
            note=note,
        )
        return self._attendance.get_for_user_and_date(target_id, work_date)

    def records_between(self, user_id: int, start: date, end: date):
        return self._attendance.list_for_user_between(int(user_id), start, end)
