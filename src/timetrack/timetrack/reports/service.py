"""Read-side rollups over an employee's attendance records.

The ``compute_*`` functions are pure reductions over a record list; the
service only decides which date range to load. Missing data yields zeros,
never an error.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable, Optional, Sequence

from ..attendance.calculator.base import WorkingTimeCalculator
from ..attendance.calculator.standard_calculator import StandardWorkingTimeCalculator
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository, locate_day
from ..common.datetime_utils import (
    business_days_between,
    days_in_month,
    format_clock_time,
    hours_from_minutes,
    month_bounds,
    now_local,
    start_of_day,
    sunday_weekday_index,
    week_start,
    year_bounds,
)
from ..core.constants import (
    ATTENDANCE_WEIGHT,
    DEFAULT_SUMMARY_DAYS,
    MONTHS_PER_YEAR,
    PUNCTUALITY_WEIGHT,
    WEEKLY_WORKING_DAYS,
    YEARLY_WORKING_DAYS,
)
from ..core.enums import PRESENT_STATUSES, AttendanceStatus
from ..core.exceptions import ValidationError


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


class _CamelDict:
    def to_dict(self) -> dict[str, Any]:
        return {_camel(k): v for k, v in asdict(self).items()}


@dataclass(frozen=True)
class DailySnapshot(_CamelDict):
    check_in_time: Optional[str]
    working_hours: float
    break_time: int
    status: str


@dataclass(frozen=True)
class WeeklyStats(_CamelDict):
    present_days: int
    total_days: int
    total_working_hours: float
    average_working_hours: float
    late_check_ins: int
    punctuality_score: int


@dataclass(frozen=True)
class MonthlyStats(_CamelDict):
    present_days: int
    total_days: int
    total_working_hours: float
    attendance_percentage: float
    punctuality_score: int
    performance_score: int


@dataclass(frozen=True)
class YearlyStats(_CamelDict):
    total_working_days: int
    present_days: int
    total_hours: float
    overtime_hours: float
    average_monthly_hours: float


@dataclass(frozen=True)
class RangeSummary(_CamelDict):
    start_date: str
    end_date: str
    calendar_days: int
    business_days: int
    attended_days: int
    present_days: int
    late_days: int
    early_departure_days: int
    absent_days: int
    total_working_hours: float
    average_working_hours: float
    overtime_hours: float
    attendance_rate: float


@dataclass(frozen=True)
class StatsBundle:
    today: DailySnapshot
    week: WeeklyStats
    month: MonthlyStats
    year: YearlyStats

    def to_dict(self) -> dict[str, Any]:
        return {
            "todayStats": self.today.to_dict(),
            "weekStats": self.week.to_dict(),
            "monthStats": self.month.to_dict(),
            "yearStats": self.year.to_dict(),
        }


def _present(records: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    return [r for r in records if r.status in PRESENT_STATUSES]


def _total_hours(records: Iterable[AttendanceRecord]) -> float:
    return round(sum(r.total_working_hours for r in records), 2)


def punctuality_score(records: Sequence[AttendanceRecord]) -> int:
    present = _present(records)
    late = sum(1 for r in present if r.had_late_check_in())
    return round_half_up((len(present) - late) / max(len(present), 1) * 100)


def compute_daily(
    record: Optional[AttendanceRecord],
    *,
    now: datetime,
    calculator: WorkingTimeCalculator,
) -> DailySnapshot:
    if record is None:
        return DailySnapshot(check_in_time=None, working_hours=0.0, break_time=0, status=AttendanceStatus.ABSENT.value)

    if record.has_open_session:
        working_hours = hours_from_minutes(calculator.worked_minutes(record, now=now))
    else:
        working_hours = record.total_working_hours

    return DailySnapshot(
        check_in_time=format_clock_time(record.check_in_time),
        working_hours=working_hours,
        break_time=record.break_minutes(),
        status=record.status.value,
    )


def compute_weekly(records: Sequence[AttendanceRecord], *, today: date) -> WeeklyStats:
    present = _present(records)
    total_hours = _total_hours(records)
    return WeeklyStats(
        present_days=len(present),
        total_days=max(WEEKLY_WORKING_DAYS, sunday_weekday_index(today) + 1),
        total_working_hours=total_hours,
        average_working_hours=round(total_hours / len(present), 2) if present else 0.0,
        late_check_ins=sum(1 for r in present if r.had_late_check_in()),
        punctuality_score=punctuality_score(records),
    )


def compute_monthly(
    records: Sequence[AttendanceRecord],
    *,
    year: int,
    month: int,
    punctuality: Optional[int] = None,
) -> MonthlyStats:
    """Month rollup; ``punctuality`` overrides the month's own score (dashboard blend)."""

    present_days = len(_present(records))
    total_days = days_in_month(year, month)
    attendance = present_days / total_days * 100
    score = punctuality_score(records) if punctuality is None else punctuality
    return MonthlyStats(
        present_days=present_days,
        total_days=total_days,
        total_working_hours=_total_hours(records),
        attendance_percentage=round(attendance, 2),
        punctuality_score=score,
        performance_score=round_half_up(attendance * ATTENDANCE_WEIGHT + score * PUNCTUALITY_WEIGHT),
    )


def compute_yearly(records: Sequence[AttendanceRecord]) -> YearlyStats:
    total_hours = _total_hours(records)
    overtime = round(sum(r.overtime.overtime_hours for r in records if r.overtime), 2)
    return YearlyStats(
        total_working_days=YEARLY_WORKING_DAYS,
        present_days=sum(1 for r in records if r.status == AttendanceStatus.PRESENT),
        total_hours=total_hours,
        overtime_hours=overtime,
        average_monthly_hours=round(total_hours / MONTHS_PER_YEAR, 2),
    )


def compute_summary(records: Sequence[AttendanceRecord], *, start_date: date, end_date: date) -> RangeSummary:
    def count(status: AttendanceStatus) -> int:
        return sum(1 for r in records if r.status == status)

    attended = [r for r in records if r.check_ins]
    business_days = business_days_between(start_date, end_date)
    total_hours = _total_hours(records)
    return RangeSummary(
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        calendar_days=(end_date - start_date).days + 1,
        business_days=business_days,
        attended_days=len(attended),
        present_days=count(AttendanceStatus.PRESENT),
        late_days=count(AttendanceStatus.LATE),
        early_departure_days=count(AttendanceStatus.EARLY_DEPARTURE),
        absent_days=max(0, business_days - len(attended)),
        total_working_hours=total_hours,
        average_working_hours=round(total_hours / len(attended), 2) if attended else 0.0,
        overtime_hours=round(sum(r.overtime.overtime_hours for r in records if r.overtime), 2),
        attendance_rate=round(len(attended) / business_days * 100, 2) if business_days else 0.0,
    )


class AttendanceStatsService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        calculator: WorkingTimeCalculator | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._calculator = calculator or StandardWorkingTimeCalculator()
        self._clock = clock

    def _records(self, employee_id: str, start: date, end: date) -> list[AttendanceRecord]:
        return list(self._attendance.find(employee_id, start_date=start, end_date=end, newest_first=False))

    def daily_snapshot(self, employee_id: str, *, now: datetime | None = None) -> DailySnapshot:
        now = now or self._clock()
        record = self._attendance.find_one(employee_id, locate_day(self._attendance, employee_id, now))
        return compute_daily(record, now=now, calculator=self._calculator)

    def weekly_stats(self, employee_id: str, *, today: date | None = None) -> WeeklyStats:
        today = today or start_of_day(self._clock())
        return compute_weekly(self._records(employee_id, week_start(today), today), today=today)

    def monthly_stats(
        self,
        employee_id: str,
        *,
        year: int | None = None,
        month: int | None = None,
        punctuality: int | None = None,
    ) -> MonthlyStats:
        today = start_of_day(self._clock())
        year = year or today.year
        month = month or today.month
        start, end = month_bounds(year, month)
        return compute_monthly(self._records(employee_id, start, end), year=year, month=month, punctuality=punctuality)

    def yearly_stats(self, employee_id: str, *, year: int | None = None) -> YearlyStats:
        year = year or start_of_day(self._clock()).year
        start, end = year_bounds(year)
        return compute_yearly(self._records(employee_id, start, end))

    def summary(
        self,
        employee_id: str,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> RangeSummary:
        end_date = end_date or start_of_day(self._clock())
        start_date = start_date or end_date - timedelta(days=DEFAULT_SUMMARY_DAYS - 1)
        if end_date < start_date:
            raise ValidationError("endDate must not be before startDate")
        return compute_summary(self._records(employee_id, start_date, end_date), start_date=start_date, end_date=end_date)

    def stats_bundle(self, employee_id: str, *, now: datetime | None = None) -> StatsBundle:
        """Dashboard bundle; the month blends in the week's punctuality score."""

        now = now or self._clock()
        today = start_of_day(now)
        week = self.weekly_stats(employee_id, today=today)
        start, end = month_bounds(today.year, today.month)
        month = compute_monthly(
            self._records(employee_id, start, end),
            year=today.year,
            month=today.month,
            punctuality=week.punctuality_score,
        )
        return StatsBundle(
            today=self.daily_snapshot(employee_id, now=now),
            week=week,
            month=month,
            year=self.yearly_stats(employee_id, year=today.year),
        )

    def build_history_report(self, employee_id: str, *, start: date, end: date) -> "ReportData":
        if end < start:
            raise ValidationError("endDate must not be before startDate")
        return build_report(self._records(employee_id, start, end), calculator=self._calculator)


REPORT_FIELDS = [
    "work_date",
    "employee_id",
    "employee_name",
    "shift_name",
    "check_in",
    "check_out",
    "status",
    "worked_hours",
    "break_minutes",
    "late_minutes",
    "early_departure_minutes",
    "overtime_hours",
    "tasks_completed",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    total_minutes: int

    @property
    def total_hours(self) -> str:
        return f"{self.total_minutes // 60:02d}:{self.total_minutes % 60:02d}"


def build_report(records: Iterable[AttendanceRecord], *, calculator: WorkingTimeCalculator) -> ReportData:
    rows: list[dict] = []
    total = 0
    for r in records:
        minutes = calculator.worked_minutes(r)
        total += minutes
        rows.append(
            {
                "work_date": r.work_date.strftime("%Y-%m-%d"),
                "employee_id": r.employee_id,
                "employee_name": r.employee_name,
                "shift_name": r.shift_name or "-",
                "check_in": r.check_in_time.strftime("%H:%M") if r.check_in_time else "-",
                "check_out": r.check_out_time.strftime("%H:%M") if r.check_out_time else "-",
                "status": r.status.value,
                "worked_hours": f"{minutes // 60:02d}:{minutes % 60:02d}",
                "break_minutes": r.break_minutes(),
                "late_minutes": r.late_minutes,
                "early_departure_minutes": r.early_departure_minutes,
                "overtime_hours": r.overtime.overtime_hours if r.overtime else 0,
                "tasks_completed": f"{sum(1 for t in r.tasks if t.completed)}/{len(r.tasks)}",
            }
        )
    return ReportData(rows=rows, total_minutes=total)
