from datetime import date, datetime, time

from src.timetrack.timetrack.attendance.calculator.standard_calculator import StandardWorkingTimeCalculator
from src.timetrack.timetrack.attendance.model import AttendanceRecord, Break, CheckInEvent, CheckOutEvent
from src.timetrack.timetrack.core.enums import BreakType


def _record(**kwargs) -> AttendanceRecord:
    return AttendanceRecord(
        employee_id="emp-1",
        employee_name="A",
        employee_email="a@example.com",
        employee_mobile="",
        work_date=date(2025, 1, 1),
        shift_id="morning",
        shift_name="Morning Shift",
        scheduled_start=datetime.combine(date(2025, 1, 1), time(8, 0)),
        scheduled_end=datetime.combine(date(2025, 1, 1), time(16, 0)),
        **kwargs,
    )


def _in(h, m=0):
    return CheckInEvent(timestamp=datetime(2025, 1, 1, h, m), is_late=False, late_minutes=0, device_info="Web Browser")


def _out(h, m=0):
    return CheckOutEvent(
        timestamp=datetime(2025, 1, 1, h, m), is_early=False, early_minutes=0, tasks_completed=True, device_info="Web Browser"
    )


def test_standard_calculator_subtracts_breaks():
    record = _record(
        check_ins=[_in(8)],
        check_outs=[_out(17)],
        breaks=AttendanceRecord.breaks_of(
            [Break(break_id="b1", break_type=BreakType.LUNCH, start=datetime(2025, 1, 1, 12), end=datetime(2025, 1, 1, 13))]
        ),
    )

    calc = StandardWorkingTimeCalculator()
    assert calc.worked_minutes(record) == 8 * 60
    assert calc.overtime_minutes(8 * 60) == 0
    assert calc.overtime_minutes(9 * 60) == 60


def test_open_session_counts_up_to_now():
    record = _record(check_ins=[_in(8), _in(13)], check_outs=[_out(12)])

    calc = StandardWorkingTimeCalculator()
    assert calc.worked_minutes(record) == 4 * 60
    assert calc.worked_minutes(record, now=datetime(2025, 1, 1, 14, 30)) == 5 * 60 + 30


def test_worked_minutes_never_negative():
    record = _record(
        check_ins=[_in(8)],
        check_outs=[_out(8, 10)],
        breaks=AttendanceRecord.breaks_of(
            [Break(break_id="b1", break_type=BreakType.TEA, start=datetime(2025, 1, 1, 8), end=datetime(2025, 1, 1, 9))]
        ),
    )

    assert StandardWorkingTimeCalculator().worked_minutes(record) == 0
