from datetime import date, datetime

from src.timetrack.timetrack.common.datetime_utils import (
    business_days_between,
    days_in_month,
    format_clock_time,
    minutes_between,
    parse_iso_datetime,
    start_of_day,
    sunday_weekday_index,
    week_start,
)


def test_minutes_between_floors_to_whole_minutes():
    a = datetime(2025, 1, 8, 8, 0, 0)
    assert minutes_between(a, datetime(2025, 1, 8, 8, 15, 59)) == 15
    assert minutes_between(a, datetime(2025, 1, 8, 7, 50)) == -10


def test_start_of_day_is_the_calendar_day():
    assert start_of_day(datetime(2025, 1, 8, 23, 59, 59)) == date(2025, 1, 8)
    assert start_of_day(date(2025, 1, 8)) == date(2025, 1, 8)


def test_week_starts_on_sunday():
    assert week_start(date(2025, 1, 8)) == date(2025, 1, 5)
    assert week_start(date(2025, 1, 5)) == date(2025, 1, 5)
    assert sunday_weekday_index(date(2025, 1, 5)) == 0
    assert sunday_weekday_index(date(2025, 1, 11)) == 6


def test_business_days_and_month_length():
    assert business_days_between(date(2025, 1, 1), date(2025, 1, 31)) == 23
    assert business_days_between(date(2025, 1, 11), date(2025, 1, 12)) == 0
    assert business_days_between(date(2025, 1, 10), date(2025, 1, 9)) == 0
    assert days_in_month(2024, 2) == 29


def test_parse_iso_datetime_keeps_naive_values():
    assert parse_iso_datetime("2025-01-08T08:16:00") == datetime(2025, 1, 8, 8, 16)
    assert parse_iso_datetime("2025-01-08T08:16:00Z").tzinfo is None


def test_format_clock_time():
    assert format_clock_time(datetime(2025, 1, 8, 14, 5)) == "02:05 PM"
    assert format_clock_time(None) is None
