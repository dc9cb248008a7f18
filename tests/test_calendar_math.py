from datetime import date
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from calendar_math import (
    SATURDAY,
    SUNDAY,
    date_range,
    day_of_week,
    days_between,
    iso_date,
    parse_iso_date,
    short_label,
    week_anchor,
    week_saturday,
)


def test_iso_date_is_zero_padded() -> None:
    assert iso_date(date(2026, 3, 7)) == "2026-03-07"
    assert iso_date("2026-12-25") == "2026-12-25"


def test_day_of_week_counts_from_sunday() -> None:
    assert day_of_week(date(2026, 2, 1)) == SUNDAY
    assert day_of_week(date(2026, 2, 7)) == SATURDAY
    assert day_of_week("2026-02-02") == 1


def test_week_anchor_returns_sunday_on_or_before() -> None:
    assert week_anchor(date(2026, 3, 4)) == date(2026, 3, 1)
    assert week_anchor(date(2026, 3, 1)) == date(2026, 3, 1)
    # crosses a month boundary
    assert week_anchor(date(2026, 5, 2)) == date(2026, 4, 26)


def test_week_saturday_closes_the_week() -> None:
    assert week_saturday(date(2026, 2, 1)) == date(2026, 2, 7)
    assert week_saturday(date(2026, 7, 25)) == date(2026, 7, 25)
    assert week_saturday(date(2026, 2, 26)) == date(2026, 2, 28)


def test_days_between_uses_whole_calendar_days() -> None:
    # spans the spring daylight-saving change
    assert days_between(date(2026, 3, 1), date(2026, 3, 15)) == 14
    assert days_between("2026-03-15", "2026-03-01") == -14


def test_short_label_has_no_padding() -> None:
    assert short_label(date(2026, 2, 1)) == "2/1"
    assert short_label("2026-11-29") == "11/29"


def test_date_range_is_inclusive() -> None:
    days = list(date_range("2026-02-27", "2026-03-02"))
    assert [iso_date(d) for d in days] == ["2026-02-27", "2026-02-28", "2026-03-01", "2026-03-02"]


def test_parse_iso_date_passes_dates_through() -> None:
    value = date(2026, 6, 1)
    assert parse_iso_date(value) is value
    assert parse_iso_date(" 2026-06-01 ") == value
