from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import day_start, start_of_day
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """One document per (employee_id, work_date)."""

    def find_one(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new record; returns it with ``record_id`` and ``version`` set.

        Raises ConcurrentUpdateError if a record for the same day already exists.
        """

        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        """Compare-and-swap on ``record.version``; returns the stored record.

        Raises ConcurrentUpdateError when the stored version moved on.
        """

        raise NotImplementedError

    def find(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        newest_first: bool = True,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError


def open_overnight(attendance: AttendanceRepository, employee_id: str, today: date) -> Optional[AttendanceRecord]:
    """Yesterday's record when its session is still open and its shift runs into ``today``."""

    previous = attendance.find_one(employee_id, today - timedelta(days=1))
    if previous is not None and previous.has_open_session and previous.scheduled_end >= day_start(today):
        return previous
    return None


def locate_day(attendance: AttendanceRepository, employee_id: str, now: datetime) -> date:
    """Day key of the record an in-shift operation applies to.

    Falls back to yesterday's record while an evening shift is still open
    after midnight (checking out at 00:10).
    """

    today = start_of_day(now)
    record = attendance.find_one(employee_id, today)
    if record is not None and record.check_ins:
        return today

    previous = open_overnight(attendance, employee_id, today)
    return previous.work_date if previous is not None else today
