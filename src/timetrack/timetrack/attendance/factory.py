from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import minutes_between
from ..core.enums import AttendanceStatus
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, scheduled_start: datetime, grace_minutes: int) -> AttendanceStrategy:
        # Late only once a whole minute past the grace window has elapsed.
        if minutes_between(scheduled_start, now) - grace_minutes > 0:
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, now: datetime, scheduled_end: datetime, current_status: AttendanceStatus) -> AttendanceStrategy:
        if minutes_between(now, scheduled_end) > 0:
            return EarlyLeaveStrategy()
        return NormalStrategy()
