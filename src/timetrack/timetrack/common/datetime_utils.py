from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    A trailing ``Z`` or explicit offset is converted to local time first.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(instant: datetime | date) -> date:
    """Day key used to bucket attendance records (local midnight)."""
    if isinstance(instant, datetime):
        return instant.date()
    return instant


def day_start(day: date) -> datetime:
    return datetime.combine(day, datetime.min.time())


def minutes_between(a: datetime, b: datetime) -> int:
    """Whole minutes from ``a`` to ``b``; negative when ``b`` precedes ``a``.

    Callers clamp with ``max(0, ...)`` where the contract needs it.
    """
    return int((b - a).total_seconds() // 60)


def hours_from_minutes(minutes: int | float) -> float:
    return round(minutes / 60, 2)


def week_start(day: date) -> date:
    """Sunday of the week containing ``day``."""
    return day - timedelta(days=sunday_weekday_index(day))


def sunday_weekday_index(day: date) -> int:
    """0 for Sunday through 6 for Saturday."""
    return (day.weekday() + 1) % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def is_business_day(day: date) -> bool:
    return day.weekday() < 5


def business_days_between(start: date, end: date) -> int:
    """Count Monday-Friday days in the inclusive range."""
    if end < start:
        return 0
    return sum(1 for d in iter_days(start, end) if is_business_day(d))


def format_clock_time(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%I:%M %p")
