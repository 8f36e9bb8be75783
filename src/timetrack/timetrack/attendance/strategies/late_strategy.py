from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in: minutes past the grace window."""

    def decide_checkin(self, *, now: datetime, scheduled_start: datetime, grace_minutes: int) -> StatusDecision:
        late = max(0, minutes_between(scheduled_start, now) - grace_minutes)
        return StatusDecision(status=AttendanceStatus.LATE, minutes=late, note=f"{late} minutes late")

    def decide_checkout(self, *, now: datetime, scheduled_end: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
