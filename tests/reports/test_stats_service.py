from datetime import date, datetime

import pytest

from src.timetrack.timetrack.attendance.calculator.standard_calculator import StandardWorkingTimeCalculator
from src.timetrack.timetrack.core.enums import AttendanceStatus
from src.timetrack.timetrack.core.exceptions import ValidationError
from src.timetrack.timetrack.reports.service import (
    AttendanceStatsService,
    compute_daily,
    compute_monthly,
    compute_weekly,
    compute_yearly,
    round_half_up,
)


@pytest.fixture
def stats(attendance_repo, clock):
    return AttendanceStatsService(attendance_repo, clock=clock)


def test_weekly_stats(make_record):
    records = [
        make_record(date(2025, 1, 6), hours=8.0),
        make_record(date(2025, 1, 7), AttendanceStatus.LATE, hours=7.5, late=True),
        make_record(date(2025, 1, 8), hours=8.5),
        make_record(date(2025, 1, 9), AttendanceStatus.EARLY_DEPARTURE, hours=6.0),
        make_record(date(2025, 1, 10), AttendanceStatus.ABSENT, hours=0.0),
    ]

    week = compute_weekly(records, today=date(2025, 1, 10))

    assert week.present_days == 3
    assert week.total_days == 6
    assert week.total_working_hours == 30.0
    assert week.average_working_hours == 10.0
    assert week.late_check_ins == 1
    assert week.punctuality_score == 67


def test_weekly_total_days_never_below_scheduled_days():
    assert compute_weekly([], today=date(2025, 1, 5)).total_days == 5
    assert compute_weekly([], today=date(2025, 1, 11)).total_days == 7


def test_empty_ranges_yield_zeros():
    week = compute_weekly([], today=date(2025, 1, 8))
    year = compute_yearly([])

    assert week.present_days == 0
    assert week.average_working_hours == 0.0
    assert week.punctuality_score == 0
    assert year.total_working_days == 252
    assert year.present_days == 0
    assert year.average_monthly_hours == 0.0


def test_monthly_performance_blends_attendance_and_punctuality(make_record):
    records = [make_record(date(2025, 1, d)) for d in range(1, 11)]

    month = compute_monthly(records, year=2025, month=1)

    assert month.total_days == 31
    assert month.present_days == 10
    assert month.attendance_percentage == 32.26
    assert month.punctuality_score == 100
    assert month.performance_score == 53
    assert compute_monthly(records, year=2025, month=1, punctuality=50).performance_score == 38


def test_yearly_counts_only_present_status(make_record):
    records = [
        make_record(date(2025, 1, 6), overtime_hours=1.25, hours=9.25),
        make_record(date(2025, 2, 3), AttendanceStatus.LATE, late=True),
        make_record(date(2025, 3, 3), overtime_hours=0.5, hours=8.5),
    ]

    year = compute_yearly(records)

    assert year.present_days == 2
    assert year.total_hours == 25.75
    assert year.overtime_hours == 1.75
    assert year.average_monthly_hours == 2.15


def test_aggregation_is_idempotent(make_record):
    records = [make_record(date(2025, 1, d), late=d % 2 == 0) for d in range(1, 8)]

    first = (compute_weekly(records, today=date(2025, 1, 8)), compute_monthly(records, year=2025, month=1), compute_yearly(records))
    second = (compute_weekly(records, today=date(2025, 1, 8)), compute_monthly(records, year=2025, month=1), compute_yearly(records))

    assert [s.to_dict() for s in first] == [s.to_dict() for s in second]


def test_daily_snapshot_for_open_session(service, identity):
    service.check_in(identity, now=datetime(2025, 1, 8, 8, 5))
    _, break_id = service.start_break(identity.employee_id, now=datetime(2025, 1, 8, 10, 0))
    service.end_break(identity.employee_id, break_id, now=datetime(2025, 1, 8, 10, 15))
    record = service.get_today(identity.employee_id, now=datetime(2025, 1, 8, 11, 0))

    snapshot = compute_daily(record, now=datetime(2025, 1, 8, 11, 5), calculator=StandardWorkingTimeCalculator())

    assert snapshot.check_in_time == "08:05 AM"
    assert snapshot.working_hours == 2.75
    assert snapshot.break_time == 15
    assert snapshot.status == "present"


def test_daily_snapshot_without_record():
    snapshot = compute_daily(None, now=datetime(2025, 1, 8, 9, 0), calculator=StandardWorkingTimeCalculator())
    assert snapshot.to_dict() == {"checkInTime": None, "workingHours": 0.0, "breakTime": 0, "status": "absent"}


def test_stats_bundle_uses_week_punctuality(stats, attendance_repo, make_record):
    attendance_repo.put(make_record(date(2025, 1, 2)))
    attendance_repo.put(make_record(date(2025, 1, 3)))
    attendance_repo.put(make_record(date(2025, 1, 6), AttendanceStatus.LATE, late=True))
    attendance_repo.put(make_record(date(2025, 1, 7)))

    bundle = stats.stats_bundle("emp-1").to_dict()

    assert set(bundle) == {"todayStats", "weekStats", "monthStats", "yearStats"}
    assert bundle["weekStats"]["presentDays"] == 2
    assert bundle["weekStats"]["punctualityScore"] == 50
    assert bundle["monthStats"]["punctualityScore"] == 50
    assert bundle["monthStats"]["presentDays"] == 4
    assert stats.monthly_stats("emp-1", year=2025, month=1).punctuality_score == 75
    assert bundle["todayStats"]["status"] == "absent"


def test_summary_defaults_to_last_thirty_days(stats, attendance_repo, make_record):
    attendance_repo.put(make_record(date(2024, 12, 9)))
    attendance_repo.put(make_record(date(2024, 12, 10), AttendanceStatus.LATE, late=True))
    attendance_repo.put(make_record(date(2025, 1, 6), overtime_hours=1.0, hours=9.0))

    summary = stats.summary("emp-1")

    assert summary.start_date == "2024-12-10"
    assert summary.end_date == "2025-01-08"
    assert summary.calendar_days == 30
    assert summary.business_days == 22
    assert summary.attended_days == 2
    assert summary.late_days == 1
    assert summary.total_working_hours == 17.0
    assert summary.overtime_hours == 1.0
    assert summary.attendance_rate == 9.09


def test_summary_rejects_inverted_range(stats):
    with pytest.raises(ValidationError):
        stats.summary("emp-1", start_date=date(2025, 1, 8), end_date=date(2025, 1, 1))


def test_history_report_rows(stats, attendance_repo, make_record):
    attendance_repo.put(make_record(date(2025, 1, 6)))
    attendance_repo.put(make_record(date(2025, 1, 7), AttendanceStatus.LATE, late=True))

    report = stats.build_history_report("emp-1", start=date(2025, 1, 1), end=date(2025, 1, 8))

    assert [r["work_date"] for r in report.rows] == ["2025-01-06", "2025-01-07"]
    assert report.rows[0]["worked_hours"] == "08:00"
    assert report.rows[1]["check_in"] == "08:30"
    assert report.rows[1]["worked_hours"] == "07:30"
    assert report.total_hours == "15:30"


def test_round_half_up():
    assert round_half_up(52.5) == 53
    assert round_half_up(66.66) == 67
    assert round_half_up(0.49) == 0


def test_daily_snapshot_follows_open_evening_shift_past_midnight(stats, service, identity):
    service.check_in(identity, now=datetime(2025, 1, 8, 16, 0), shift_id="evening")

    snapshot = stats.daily_snapshot(identity.employee_id, now=datetime(2025, 1, 9, 0, 30))

    assert snapshot.status == "present"
    assert snapshot.check_in_time == "04:00 PM"
    assert snapshot.working_hours == 8.5
