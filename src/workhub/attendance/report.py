from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Tuple

from ..common.datetime_utils import iso, month_bounds, now_local
from ..common.validators import parse_date_field, parse_enum
from ..core.constants import PAID_LEAVE_DAYS, SICK_LEAVE_DAYS
from ..core.enums import AttendanceStatus, HistoryPeriod, LeaveStatus, LeaveType
from ..core.exceptions import ValidationError
from ..leaves.repository import LeaveRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

_PRESENT = {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY}

CSV_FIELDS = ["date", "check_in", "check_out", "status", "total_hours", "overtime_hours", "note"]


@dataclass(frozen=True)
class AttendanceTotals:
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    total_hours: float = 0.0
    overtime_hours: float = 0.0

    def as_dict(self) -> dict:
        return {
            "total_days": self.total_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "late_days": self.late_days,
            "total_hours": self.total_hours,
            "overtime_hours": self.overtime_hours,
        }


def summarize(records: Iterable[AttendanceRecord]) -> AttendanceTotals:
    rows = list(records)
    return AttendanceTotals(
        total_days=len(rows),
        present_days=sum(1 for r in rows if r.status in _PRESENT),
        absent_days=sum(1 for r in rows if r.status == AttendanceStatus.ABSENT),
        late_days=sum(1 for r in rows if r.status == AttendanceStatus.LATE),
        total_hours=round(sum(r.total_hours or 0.0 for r in rows), 2),
        overtime_hours=round(sum(r.overtime_hours or 0.0 for r in rows), 2),
    )


def record_row(r: AttendanceRecord) -> dict:
    """Flat daily row; shared by the JSON history and the CSV export."""
    return {
        "date": r.work_date.strftime("%Y-%m-%d"),
        "check_in": r.check_in_time.strftime("%H:%M:%S") if r.check_in_time else "",
        "check_out": r.check_out_time.strftime("%H:%M:%S") if r.check_out_time else "",
        "status": r.status.value,
        "total_hours": r.total_hours,
        "overtime_hours": r.overtime_hours,
        "note": r.note or "",
    }


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


class AttendanceReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        *,
        paid_leave_days: int = PAID_LEAVE_DAYS,
        sick_leave_days: int = SICK_LEAVE_DAYS,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._allowance = {LeaveType.PAID: int(paid_leave_days), LeaveType.SICK: int(sick_leave_days)}

    @staticmethod
    def resolve_range(start=None, end=None, *, today: date | None = None) -> Tuple[date, date]:
        today = today or now_local().date()
        default_start, default_end = month_bounds(today)
        lo = parse_date_field(start, "start_date") or default_start
        hi = parse_date_field(end, "end_date") or default_end
        if hi < lo:
            raise ValidationError("end_date must be on or after start_date", errors={"end_date": ["is before start_date"]})
        return lo, hi

    def daily_rows(self, user_id: int, start: date, end: date) -> List[dict]:
        return [record_row(r) for r in self._attendance.list_for_user_between(int(user_id), start, end)]

    def history(self, *, user_id: int, period, start=None, end=None, today: date | None = None) -> dict:
        period = parse_enum(HistoryPeriod, period or HistoryPeriod.DAILY.value, "period")
        lo, hi = self.resolve_range(start, end, today=today)
        records = self._attendance.list_for_user_between(int(user_id), lo, hi)

        if period == HistoryPeriod.DAILY:
            items = [record_row(r) for r in records]
        else:
            buckets: Dict[date, List[AttendanceRecord]] = OrderedDict()
            for r in records:
                key = _week_start(r.work_date) if period == HistoryPeriod.WEEKLY else r.work_date.replace(day=1)
                buckets.setdefault(key, []).append(r)
            items = [self._bucket(key, rows, period) for key, rows in buckets.items()]

        return {"period": period.value, "start_date": iso(lo), "end_date": iso(hi), "items": items}

    @staticmethod
    def _bucket(key: date, rows: List[AttendanceRecord], period: HistoryPeriod) -> dict:
        if period == HistoryPeriod.WEEKLY:
            bucket_end = key + timedelta(days=6)
        else:
            bucket_end = month_bounds(key)[1]
        return {"period_start": iso(key), "period_end": iso(bucket_end), **summarize(rows).as_dict()}

    def summary(self, *, user_id: int, start=None, end=None, today: date | None = None) -> dict:
        today = today or now_local().date()
        lo, hi = self.resolve_range(start, end, today=today)
        totals = summarize(self._attendance.list_for_user_between(int(user_id), lo, hi))
        return {
            "start_date": iso(lo),
            "end_date": iso(hi),
            **totals.as_dict(),
            "leave_balance": self.leave_balance(user_id=user_id, year=today.year),
        }

    def leave_balance(self, *, user_id: int, year: int) -> dict:
        """Yearly allowance minus approved leave days falling inside ``year``."""
        year_start, year_end = date(year, 1, 1), date(year, 12, 31)
        used: Dict[LeaveType, int] = {t: 0 for t in self._allowance}
        approved = self._leaves.list_overlapping(
            user_id=int(user_id), start=year_start, end=year_end, status=LeaveStatus.APPROVED
        )
        for leave in approved:
            if leave.leave_type in used:
                used[leave.leave_type] += leave.days_within(year_start, year_end)
        return {t.value: max(self._allowance[t] - used[t], 0) for t in self._allowance}

    @staticmethod
    def csv_filename(user_id: int, start: date, end: date) -> str:
        return f"attendance_{user_id}_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
