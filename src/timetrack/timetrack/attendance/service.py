from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

import structlog

from ..common.datetime_utils import hours_from_minutes, month_bounds, now_local, start_of_day
from ..core.constants import (
    CUSTOM_SHIFT_ID,
    DEFAULT_DEVICE_INFO,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_SHIFT_ID,
    GRACE_PERIOD_MINUTES,
)
from ..core.enums import AttendanceStatus, BreakType, NamazType, TaskPriority
from ..core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    BreakAlreadyEndedError,
    BreakInProgressError,
    BreakNotFoundError,
    NoRecordForTodayError,
    NotCheckedInError,
    PendingTasksError,
    TaskNotFoundError,
    ValidationError,
)
from ..employees.model import EmployeeIdentity
from ..shifts.model import ShiftAssignment
from ..shifts.repository import ShiftRepository
from .calculator.base import WorkingTimeCalculator
from .calculator.standard_calculator import StandardWorkingTimeCalculator
from .factory import AttendanceStrategyFactory
from .locks import RecordLocks
from .model import (
    AttendanceRecord,
    Break,
    CheckInEvent,
    CheckOutEvent,
    GeoLocation,
    NamazBreak,
    Overtime,
    Task,
    TaskProgress,
)
from .repository import AttendanceRepository, locate_day, open_overnight

log = structlog.get_logger(__name__)

OVERTIME_REASON = "Worked beyond the standard shift"


@dataclass(frozen=True)
class QuickStatus:
    can_check_in: bool
    can_check_out: bool
    has_active_breaks: bool
    has_active_namaz_breaks: bool
    is_checked_in: bool
    current_status: str

    @classmethod
    def derive(
        cls,
        *,
        has_checked_in: bool,
        has_checked_out: bool,
        has_active_breaks: bool,
        has_active_namaz_breaks: bool,
    ) -> "QuickStatus":
        if has_checked_out:
            current = "Checked out"
        elif has_active_breaks or has_active_namaz_breaks:
            current = "On break"
        elif has_checked_in:
            current = "Working"
        else:
            current = "Not checked in"

        return cls(
            can_check_in=not has_checked_in or has_checked_out,
            can_check_out=(
                has_checked_in and not has_checked_out and not has_active_breaks and not has_active_namaz_breaks
            ),
            has_active_breaks=has_active_breaks,
            has_active_namaz_breaks=has_active_namaz_breaks,
            is_checked_in=has_checked_in,
            current_status=current,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "canCheckIn": self.can_check_in,
            "canCheckOut": self.can_check_out,
            "hasActiveBreaks": self.has_active_breaks,
            "hasActiveNamazBreaks": self.has_active_namaz_breaks,
            "isCheckedIn": self.is_checked_in,
            "currentStatus": self.current_status,
        }


def compute_quick_status(record: Optional[AttendanceRecord]) -> QuickStatus:
    if record is None:
        return QuickStatus.derive(
            has_checked_in=False,
            has_checked_out=False,
            has_active_breaks=False,
            has_active_namaz_breaks=False,
        )
    return QuickStatus.derive(
        has_checked_in=record.check_in_time is not None,
        has_checked_out=record.check_out_time is not None,
        has_active_breaks=bool(record.active_breaks()),
        has_active_namaz_breaks=bool(record.active_namaz_breaks()),
    )


@dataclass(frozen=True)
class HistoryPage:
    records: list[AttendanceRecord]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _new_id() -> str:
    return uuid.uuid4().hex


class AttendanceService:
    """Attendance lifecycle: check-in/out, breaks and the day's task list.

    Every mutation runs as one read-modify-write under the per-record lock
    and is persisted with a single ``create``/``save`` call. All checks run
    against a detached copy, so a failed operation writes nothing.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        shifts: ShiftRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        calculator: WorkingTimeCalculator | None = None,
        locks: RecordLocks | None = None,
        default_shift_id: str = DEFAULT_SHIFT_ID,
        grace_minutes: int = GRACE_PERIOD_MINUTES,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = _new_id,
    ):
        self._attendance = attendance
        self._shifts = shifts
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or StandardWorkingTimeCalculator()
        self._locks = locks or RecordLocks()
        self._default_shift_id = default_shift_id
        self._grace_minutes = int(grace_minutes)
        self._clock = clock
        self._new_id = id_factory

    def clock(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Shift resolution

    def _resolve_shift(
        self,
        work_date: date,
        *,
        shift_id: Optional[str] = None,
        scheduled_start: Optional[datetime] = None,
        scheduled_end: Optional[datetime] = None,
    ) -> ShiftAssignment:
        if scheduled_start is not None or scheduled_end is not None:
            if scheduled_start is None or scheduled_end is None:
                raise ValidationError("scheduledStart and scheduledEnd must be provided together")
            if scheduled_end <= scheduled_start:
                raise ValidationError("scheduledEnd must be after scheduledStart")
            return ShiftAssignment(
                shift_id=CUSTOM_SHIFT_ID,
                shift_name="Custom",
                scheduled_start=scheduled_start,
                scheduled_end=scheduled_end,
            )

        wanted = shift_id or self._default_shift_id
        shift = self._shifts.get_by_id(wanted)
        if not shift:
            raise ValidationError(f"Unknown shift: {wanted}")
        start, end = shift.scheduled_window(work_date)
        return ShiftAssignment(shift_id=shift.shift_id, shift_name=shift.shift_name, scheduled_start=start, scheduled_end=end)

    def _new_record(self, identity: EmployeeIdentity, work_date: date, shift: ShiftAssignment) -> AttendanceRecord:
        stamp = self._clock()
        return AttendanceRecord(
            employee_id=identity.employee_id,
            employee_name=identity.name,
            employee_email=identity.email,
            employee_mobile=identity.mobile,
            work_date=work_date,
            shift_id=shift.shift_id,
            shift_name=shift.shift_name,
            scheduled_start=shift.scheduled_start,
            scheduled_end=shift.scheduled_end,
            status=AttendanceStatus.ABSENT,
            created_at=stamp,
            updated_at=stamp,
        )

    # ------------------------------------------------------------------
    # Persistence helpers

    def _locate_day(self, employee_id: str, now: datetime) -> date:
        return locate_day(self._attendance, employee_id, now)

    def _load(self, employee_id: str, work_date: date) -> AttendanceRecord:
        record = self._attendance.find_one(employee_id, work_date)
        if record is None:
            raise NoRecordForTodayError("No attendance record found for today")
        return record.copy()

    def _recompute(self, record: AttendanceRecord) -> None:
        worked = self._calculator.worked_minutes(record)
        record.total_working_hours = hours_from_minutes(worked)
        record.late_minutes = record.check_ins[0].late_minutes if record.check_ins else 0
        record.early_departure_minutes = record.last_check_out.early_minutes if record.check_outs else 0

        overtime = self._calculator.overtime_minutes(worked)
        if overtime <= 0:
            record.overtime = None
        elif record.overtime is None:
            record.overtime = Overtime(
                overtime_hours=hours_from_minutes(overtime),
                reason=OVERTIME_REASON,
                created_at=self._clock(),
            )
        else:
            record.overtime = replace(record.overtime, overtime_hours=hours_from_minutes(overtime))

    def _persist(self, record: AttendanceRecord) -> AttendanceRecord:
        record.updated_at = self._clock()
        if record.record_id is None:
            return self._attendance.create(record)
        return self._attendance.save(record)

    # ------------------------------------------------------------------
    # Lifecycle

    def check_in(
        self,
        identity: EmployeeIdentity,
        *,
        now: datetime | None = None,
        location: GeoLocation | None = None,
        device_info: str | None = None,
        shift_id: str | None = None,
        scheduled_start: datetime | None = None,
        scheduled_end: datetime | None = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        work_date = start_of_day(now)
        shift_requested = shift_id is not None or scheduled_start is not None or scheduled_end is not None

        with self._locks.hold(identity.employee_id, work_date):
            if open_overnight(self._attendance, identity.employee_id, work_date) is not None:
                raise AlreadyCheckedInError("Already checked in. Please check out first.")
            existing = self._attendance.find_one(identity.employee_id, work_date)
            if existing is not None and existing.has_open_session:
                raise AlreadyCheckedInError("Already checked in. Please check out first.")
            if existing is not None and existing.last_check_out and now <= existing.last_check_out.timestamp:
                raise ValidationError("Check-in time must be after the previous check-out")

            if existing is None:
                shift = self._resolve_shift(
                    work_date, shift_id=shift_id, scheduled_start=scheduled_start, scheduled_end=scheduled_end
                )
                record = self._new_record(identity, work_date, shift)
            else:
                record = existing.copy()
                if shift_requested and not record.check_ins:
                    shift = self._resolve_shift(
                        work_date, shift_id=shift_id, scheduled_start=scheduled_start, scheduled_end=scheduled_end
                    )
                    record.shift_id = shift.shift_id
                    record.shift_name = shift.shift_name
                    record.scheduled_start = shift.scheduled_start
                    record.scheduled_end = shift.scheduled_end

            strategy = self._factory.for_checkin(
                now=now, scheduled_start=record.scheduled_start, grace_minutes=self._grace_minutes
            )
            decision = strategy.decide_checkin(
                now=now, scheduled_start=record.scheduled_start, grace_minutes=self._grace_minutes
            )

            record.check_ins.append(
                CheckInEvent(
                    timestamp=now,
                    location=location,
                    is_late=decision.minutes > 0,
                    late_minutes=decision.minutes,
                    device_info=device_info or DEFAULT_DEVICE_INFO,
                )
            )
            record.status = decision.status
            self._recompute(record)
            stored = self._persist(record)

        log.info(
            "attendance.check_in",
            employee_id=identity.employee_id,
            work_date=work_date.isoformat(),
            shift_id=stored.shift_id,
            status=stored.status.value,
            late_minutes=decision.minutes,
        )
        return stored

    def check_out(
        self,
        employee_id: str,
        *,
        now: datetime | None = None,
        location: GeoLocation | None = None,
        tasks: Sequence[TaskProgress] = (),
        device_info: str | None = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        work_date = self._locate_day(employee_id, now)

        with self._locks.hold(employee_id, work_date):
            record = self._attendance.find_one(employee_id, work_date)
            if record is None:
                raise NoRecordForTodayError("No check-in found for today")
            if not record.check_ins:
                raise NotCheckedInError("You have not checked in today")
            if record.is_checked_out:
                raise AlreadyCheckedOutError("Already checked out for today")
            if record.has_active_breaks():
                raise BreakInProgressError("Please end all active breaks before checking out")
            if any(not t.completed for t in tasks):
                raise PendingTasksError("Please complete all tasks before checking out")
            if now <= record.last_check_in.timestamp:
                raise ValidationError("Check-out time must be after the check-in time")

            record = record.copy()
            for progress in tasks:
                task = record.tasks.get(progress.task_id)
                if task is None:
                    continue
                record.tasks.replace(
                    replace(
                        task,
                        completed=True,
                        completed_at=task.completed_at or now,
                        time_spent=progress.time_spent if progress.time_spent is not None else task.time_spent,
                        updated_at=now,
                    )
                )

            strategy = self._factory.for_checkout(now=now, scheduled_end=record.scheduled_end, current_status=record.status)
            decision = strategy.decide_checkout(now=now, scheduled_end=record.scheduled_end, current=record.status)

            record.check_outs.append(
                CheckOutEvent(
                    timestamp=now,
                    location=location,
                    is_early=decision.minutes > 0,
                    early_minutes=decision.minutes,
                    tasks_completed=all(t.completed for t in record.tasks),
                    device_info=device_info or DEFAULT_DEVICE_INFO,
                )
            )
            record.status = decision.status
            self._recompute(record)
            stored = self._persist(record)

        log.info(
            "attendance.check_out",
            employee_id=employee_id,
            work_date=work_date.isoformat(),
            status=stored.status.value,
            early_minutes=decision.minutes,
            total_working_hours=stored.total_working_hours,
        )
        return stored

    def start_break(
        self,
        employee_id: str,
        *,
        break_type: BreakType | None = None,
        namaz_type: NamazType | None = None,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> tuple[AttendanceRecord, str]:
        """Open an ordinary break, or a prayer break when ``namaz_type`` is given."""

        now = now or self._clock()
        work_date = self._locate_day(employee_id, now)

        with self._locks.hold(employee_id, work_date):
            record = self._load(employee_id, work_date)
            if not record.check_ins:
                raise NotCheckedInError("You have not checked in today")
            if record.is_checked_out:
                raise AlreadyCheckedOutError("Already checked out for today")

            break_id = self._new_id()
            if namaz_type is not None:
                if record.active_namaz_breaks():
                    raise BreakInProgressError("A prayer break is already in progress")
                record.namaz_breaks.append(NamazBreak(break_id=break_id, namaz_type=namaz_type, start=now))
            else:
                if record.active_breaks():
                    raise BreakInProgressError("A break is already in progress")
                record.breaks.append(
                    Break(break_id=break_id, break_type=break_type or BreakType.GENERAL, start=now, reason=reason)
                )
            stored = self._persist(record)

        log.info(
            "attendance.break_start",
            employee_id=employee_id,
            break_id=break_id,
            kind="namaz" if namaz_type is not None else "break",
            type=(namaz_type or break_type or BreakType.GENERAL).value,
        )
        return stored, break_id

    def end_break(
        self,
        employee_id: str,
        break_id: str,
        *,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        end = end or now
        work_date = self._locate_day(employee_id, now)

        with self._locks.hold(employee_id, work_date):
            record = self._load(employee_id, work_date)

            bucket = record.breaks if break_id in record.breaks else record.namaz_breaks
            item = bucket.get(break_id)
            if item is None:
                raise BreakNotFoundError("Break not found")
            if not item.is_active:
                raise BreakAlreadyEndedError("Break has already ended")
            if end < item.start:
                raise ValidationError("Break end must not be before its start")
            if end > now:
                raise ValidationError("Break end must not be in the future")

            ended = bucket.replace(item.ended(end))
            # Ending a break always returns the day to baseline.
            record.status = AttendanceStatus.PRESENT
            self._recompute(record)
            stored = self._persist(record)

        log.info(
            "attendance.break_end",
            employee_id=employee_id,
            break_id=break_id,
            duration_minutes=ended.duration_minutes,
        )
        return stored

    # ------------------------------------------------------------------
    # Tasks

    def add_task(
        self,
        identity: EmployeeIdentity,
        *,
        description: str,
        time_allocated: float | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        now: datetime | None = None,
    ) -> tuple[AttendanceRecord, Task]:
        """Add a task to today's record, creating an absent placeholder if needed."""

        now = now or self._clock()
        work_date = start_of_day(now)

        with self._locks.hold(identity.employee_id, work_date):
            existing = self._attendance.find_one(identity.employee_id, work_date)
            if existing is None:
                record = self._new_record(identity, work_date, self._resolve_shift(work_date))
            else:
                record = existing.copy()

            task = record.tasks.append(
                Task(
                    task_id=self._new_id(),
                    description=description,
                    time_allocated=time_allocated,
                    priority=priority,
                    created_at=now,
                    updated_at=now,
                )
            )
            stored = self._persist(record)

        log.info(
            "attendance.task_added",
            employee_id=identity.employee_id,
            task_id=task.task_id,
            created_record=existing is None,
        )
        return stored, task

    def update_task(
        self,
        employee_id: str,
        task_id: str,
        *,
        time_spent: float | None = None,
        completed: bool | None = None,
        now: datetime | None = None,
    ) -> tuple[AttendanceRecord, Task]:
        now = now or self._clock()
        work_date = start_of_day(now)

        with self._locks.hold(employee_id, work_date):
            record = self._load(employee_id, work_date)
            task = record.tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError("Task not found")

            changes: dict[str, Any] = {"updated_at": now}
            if time_spent is not None:
                changes["time_spent"] = time_spent
            if completed is not None:
                changes["completed"] = completed
                if completed and not task.completed:
                    changes["completed_at"] = now
                elif not completed:
                    changes["completed_at"] = None

            task = record.tasks.replace(replace(task, **changes))
            stored = self._persist(record)

        log.info("attendance.task_updated", employee_id=employee_id, task_id=task_id, completed=task.completed)
        return stored, task

    def delete_task(self, employee_id: str, task_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or self._clock()
        work_date = start_of_day(now)

        with self._locks.hold(employee_id, work_date):
            record = self._load(employee_id, work_date)
            if record.tasks.remove(task_id) is None:
                raise TaskNotFoundError("Task not found")
            stored = self._persist(record)

        log.info("attendance.task_deleted", employee_id=employee_id, task_id=task_id)
        return stored

    # ------------------------------------------------------------------
    # Reads

    def get_today(self, employee_id: str, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        now = now or self._clock()
        return self._attendance.find_one(employee_id, self._locate_day(employee_id, now))

    def today_view(self, identity: EmployeeIdentity, *, now: datetime | None = None) -> AttendanceRecord:
        """Today's record, or an unsaved absent placeholder on the default shift."""

        now = now or self._clock()
        record = self.get_today(identity.employee_id, now=now)
        if record is not None:
            return record
        work_date = start_of_day(now)
        return self._new_record(identity, work_date, self._resolve_shift(work_date))

    def quick_status(self, employee_id: str, *, now: datetime | None = None) -> QuickStatus:
        return compute_quick_status(self.get_today(employee_id, now=now))

    def history(
        self,
        employee_id: str,
        *,
        page: int = 1,
        limit: int = DEFAULT_HISTORY_LIMIT,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> HistoryPage:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("endDate must not be before startDate")
        records = self._attendance.find(
            employee_id,
            start_date=start_date,
            end_date=end_date,
            newest_first=True,
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = self._attendance.count(employee_id, start_date=start_date, end_date=end_date)
        return HistoryPage(records=list(records), page=page, limit=limit, total=total)

    def records_between(self, employee_id: str, start_date: date, end_date: date) -> list[AttendanceRecord]:
        return list(
            self._attendance.find(employee_id, start_date=start_date, end_date=end_date, newest_first=False)
        )

    def monthly_records(self, employee_id: str, year: int, month: int) -> list[AttendanceRecord]:
        start, end = month_bounds(year, month)
        return self.records_between(employee_id, start, end)
