from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.constants import STANDARD_SHIFT_MINUTES
from ..model import AttendanceRecord
from .base import WorkingTimeCalculator


class StandardWorkingTimeCalculator(WorkingTimeCalculator):
    """Standard rule: sum of (out - in) pairs - break minutes, not below 0.

    When ``now`` is given, an open session counts up to ``now``.
    """

    def __init__(self, standard_shift_minutes: int = STANDARD_SHIFT_MINUTES):
        self.standard_shift_minutes = standard_shift_minutes

    def worked_minutes(self, record: AttendanceRecord, *, now: Optional[datetime] = None) -> int:
        minutes = 0
        for check_in, check_out in zip(record.check_ins, record.check_outs):
            minutes += max(0, minutes_between(check_in.timestamp, check_out.timestamp))

        if now is not None and record.has_open_session:
            minutes += max(0, minutes_between(record.last_check_in.timestamp, now))

        minutes -= record.break_minutes()
        return max(minutes, 0)

    def overtime_minutes(self, worked_minutes: int) -> int:
        return max(0, worked_minutes - self.standard_shift_minutes)
