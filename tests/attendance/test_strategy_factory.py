from datetime import datetime

import pytest

from src.timetrack.timetrack.attendance.factory import AttendanceStrategyFactory
from src.timetrack.timetrack.attendance.strategies.early_strategy import EarlyLeaveStrategy
from src.timetrack.timetrack.attendance.strategies.late_strategy import LateStrategy
from src.timetrack.timetrack.attendance.strategies.normal_strategy import NormalStrategy
from src.timetrack.timetrack.core.enums import AttendanceStatus

START = datetime(2025, 1, 8, 8, 0)
END = datetime(2025, 1, 8, 16, 0)


@pytest.mark.parametrize(
    "now, strategy_cls, status, minutes",
    [
        (datetime(2025, 1, 8, 7, 50), NormalStrategy, AttendanceStatus.PRESENT, 0),
        (datetime(2025, 1, 8, 8, 14), NormalStrategy, AttendanceStatus.PRESENT, 0),
        (datetime(2025, 1, 8, 8, 15, 59), NormalStrategy, AttendanceStatus.PRESENT, 0),
        (datetime(2025, 1, 8, 8, 16), LateStrategy, AttendanceStatus.LATE, 1),
        (datetime(2025, 1, 8, 9, 0), LateStrategy, AttendanceStatus.LATE, 45),
    ],
)
def test_checkin_decision_is_grace_aware(now, strategy_cls, status, minutes):
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=now, scheduled_start=START, grace_minutes=15)
    decision = strategy.decide_checkin(now=now, scheduled_start=START, grace_minutes=15)

    assert isinstance(strategy, strategy_cls)
    assert decision.status == status
    assert decision.minutes == minutes


def test_checkout_before_scheduled_end_is_early_departure():
    now = datetime(2025, 1, 8, 15, 30)
    strategy = AttendanceStrategyFactory().for_checkout(now=now, scheduled_end=END, current_status=AttendanceStatus.PRESENT)
    decision = strategy.decide_checkout(now=now, scheduled_end=END, current=AttendanceStatus.PRESENT)

    assert isinstance(strategy, EarlyLeaveStrategy)
    assert decision.status == AttendanceStatus.EARLY_DEPARTURE
    assert decision.minutes == 30


def test_checkout_after_scheduled_end_keeps_status():
    now = datetime(2025, 1, 8, 16, 5)
    strategy = AttendanceStrategyFactory().for_checkout(now=now, scheduled_end=END, current_status=AttendanceStatus.LATE)
    decision = strategy.decide_checkout(now=now, scheduled_end=END, current=AttendanceStatus.LATE)

    assert isinstance(strategy, NormalStrategy)
    assert decision.status == AttendanceStatus.LATE
    assert decision.minutes == 0
