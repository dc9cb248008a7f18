"""
calendar_math
-------------
Pure date helpers for the training calendar.

All arithmetic runs on ``datetime.date`` values (an immutable local
year/month/day triple), so no timezone shift can move a workout onto the
neighbouring day. Weeks are anchored on Sunday, matching the calendar grid.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, Union

DateLike = Union[date, str]

SUNDAY = 0
MONDAY = 1
TUESDAY = 2
WEDNESDAY = 3
THURSDAY = 4
FRIDAY = 5
SATURDAY = 6

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def parse_iso_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    year, month, day = value.strip().split("-")
    return date(int(year), int(month), int(day))


def iso_date(value: DateLike) -> str:
    value = parse_iso_date(value)
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def day_of_week(value: DateLike) -> int:
    """Sunday-based weekday index (Sunday=0 ... Saturday=6)."""
    return (parse_iso_date(value).weekday() + 1) % 7


def week_anchor(value: DateLike) -> date:
    value = parse_iso_date(value)
    return value - timedelta(days=day_of_week(value))


def week_saturday(value: DateLike) -> date:
    value = parse_iso_date(value)
    return value + timedelta(days=SATURDAY - day_of_week(value))


def days_between(a: DateLike, b: DateLike) -> int:
    """Whole days from ``a`` to ``b`` (negative when ``b`` is earlier)."""
    return (parse_iso_date(b) - parse_iso_date(a)).days


def short_label(value: DateLike) -> str:
    value = parse_iso_date(value)
    return f"{value.month}/{value.day}"


def date_range(start: DateLike, end: DateLike) -> Iterator[date]:
    current = parse_iso_date(start)
    last = parse_iso_date(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


__all__ = [
    "DAY_NAMES",
    "SUNDAY",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "date_range",
    "day_of_week",
    "days_between",
    "iso_date",
    "parse_iso_date",
    "short_label",
    "week_anchor",
    "week_saturday",
]
