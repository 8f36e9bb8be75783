from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytest

from src.timetrack.timetrack.attendance.model import AttendanceRecord, CheckInEvent, CheckOutEvent, Overtime
from src.timetrack.timetrack.attendance.service import AttendanceService
from src.timetrack.timetrack.core.enums import AttendanceStatus
from src.timetrack.timetrack.core.exceptions import ConcurrentUpdateError
from src.timetrack.timetrack.employees.model import EmployeeIdentity
from src.timetrack.timetrack.shifts.model import Shift


@dataclass
class InMemoryShifts:
    shifts: dict[str, Shift]

    def list_all(self):
        return list(self.shifts.values())

    def get_by_id(self, shift_id: str) -> Optional[Shift]:
        return self.shifts.get(shift_id)


class InMemoryAttendance:
    """Stores detached copies so callers never alias stored state."""

    def __init__(self):
        self._docs: dict[tuple[str, date], AttendanceRecord] = {}
        self._id = 0
        self.writes = 0

    def put(self, record: AttendanceRecord) -> AttendanceRecord:
        self._id += 1
        stored = replace(record.copy(), record_id=self._id, version=1)
        self._docs[(record.employee_id, record.work_date)] = stored
        return stored

    def find_one(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        r = self._docs.get((employee_id, work_date))
        return r.copy() if r else None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        if (record.employee_id, record.work_date) in self._docs:
            raise ConcurrentUpdateError("duplicate day")
        self.writes += 1
        return self.put(record).copy()

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        key = (record.employee_id, record.work_date)
        current = self._docs.get(key)
        if current is None or current.version != record.version:
            raise ConcurrentUpdateError("stale version")
        self.writes += 1
        stored = replace(record.copy(), version=record.version + 1)
        self._docs[key] = stored
        return stored.copy()

    def _matching(self, employee_id, start_date, end_date):
        return [
            r
            for (emp, day), r in self._docs.items()
            if emp == employee_id
            and (start_date is None or day >= start_date)
            and (end_date is None or day <= end_date)
        ]

    def find(self, employee_id, *, start_date=None, end_date=None, newest_first=True, offset=0, limit=None):
        items = sorted(self._matching(employee_id, start_date, end_date), key=lambda r: r.work_date, reverse=newest_first)
        items = items[offset:]
        if limit is not None:
            items = items[:limit]
        return [r.copy() for r in items]

    def count(self, employee_id, *, start_date=None, end_date=None) -> int:
        return len(self._matching(employee_id, start_date, end_date))


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2025, 1, 8, 8, 10, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def shifts_repo() -> InMemoryShifts:
    return InMemoryShifts(
        {
            "morning": Shift(shift_id="morning", shift_name="Morning Shift", start_time=time(8, 0), end_time=time(16, 0)),
            "evening": Shift(shift_id="evening", shift_name="Evening Shift", start_time=time(16, 0), end_time=time(0, 0)),
            "night": Shift(
                shift_id="night", shift_name="Night Shift", start_time=time(0, 0), end_time=time(8, 0), is_night_shift=True
            ),
        }
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def service(attendance_repo, shifts_repo, clock) -> AttendanceService:
    return AttendanceService(attendance_repo, shifts_repo, clock=clock)


@pytest.fixture
def identity() -> EmployeeIdentity:
    return EmployeeIdentity(employee_id="emp-1", name="Ayesha Khan", email="ayesha@example.com", mobile="0300-0000000")


@pytest.fixture
def make_record():
    """Build a finished day record directly, bypassing the lifecycle."""

    def _make(
        day: date,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
        *,
        hours: float = 8.0,
        late: bool = False,
        overtime_hours: float = 0.0,
        employee_id: str = "emp-1",
    ) -> AttendanceRecord:
        start = datetime.combine(day, time(8, 0))
        end = datetime.combine(day, time(16, 0))
        check_in = start + timedelta(minutes=30 if late else 0)
        return AttendanceRecord(
            employee_id=employee_id,
            employee_name="Ayesha Khan",
            employee_email="ayesha@example.com",
            employee_mobile="",
            work_date=day,
            shift_id="morning",
            shift_name="Morning Shift",
            scheduled_start=start,
            scheduled_end=end,
            status=status,
            check_ins=[
                CheckInEvent(
                    timestamp=check_in, is_late=late, late_minutes=15 if late else 0, device_info="Web Browser"
                )
            ],
            check_outs=[
                CheckOutEvent(
                    timestamp=end, is_early=False, early_minutes=0, tasks_completed=True, device_info="Web Browser"
                )
            ],
            total_working_hours=hours,
            late_minutes=15 if late else 0,
            overtime=Overtime(overtime_hours=overtime_hours, reason="Worked beyond the standard shift")
            if overtime_hours
            else None,
        )

    return _make
