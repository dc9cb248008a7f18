from dataclasses import replace
from datetime import date
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aggregator import intensity_split, race_countdowns, shoe_mileage, weekly_mileage
from plan_generator import generate_plan


def two_weeks():
    return {r.date_str: r for r in generate_plan(start=date(2026, 6, 7), end=date(2026, 6, 20))}


def test_weekly_buckets_split_achieved_and_future() -> None:
    records = two_weeks()
    records["2026-06-08"] = replace(records["2026-06-08"], actual_miles=3.0)
    records["2026-06-12"] = replace(records["2026-06-12"], actual_miles=5.0)

    weeks = weekly_mileage(records.values(), "2026-06-10")

    assert [w.label for w in weeks] == ["6/7", "6/14"]
    first, second = weeks
    assert first.achieved == 8.0
    # Tuesday 6/9 was missed; 6/10, 6/11 and 6/13 are still to come
    assert first.future == 34.0
    assert second.achieved == 0.0
    assert second.future == 38.0
    assert second.total == 38.0


def test_logged_miles_count_even_when_planned_is_zero() -> None:
    records = two_weeks()
    sunday = replace(records["2026-06-07"], actual_miles=4.0)

    weeks = weekly_mileage([sunday], "2026-06-01")

    assert weeks[0].achieved == 4.0
    assert weeks[0].future == 0.0


def test_weeks_come_back_in_date_order() -> None:
    records = list(two_weeks().values())

    weeks = weekly_mileage(reversed(records), "2026-06-01")

    assert [w.anchor for w in weeks] == [date(2026, 6, 7), date(2026, 6, 14)]


def test_shoe_mileage_status() -> None:
    records = list(two_weeks().values())
    logged = [replace(records[0], actual_miles=100.0), replace(records[1], actual_miles=160.0)]

    shoe = shoe_mileage(logged)
    assert shoe.miles == 260.0
    assert shoe.status == "warn"
    assert shoe.percent == pytest.approx(74.2857, rel=1e-4)

    assert shoe_mileage([replace(records[0], actual_miles=330.0)]).status == "replace"
    worn = shoe_mileage([replace(records[0], actual_miles=400.0)])
    assert worn.percent == 100.0
    assert shoe_mileage(records).status == "ok"


def test_intensity_split_uses_logged_miles() -> None:
    records = two_weeks()
    logged = [
        replace(records["2026-06-09"], actual_miles=6.0),
        replace(records["2026-06-10"], actual_miles=7.0),
        replace(records["2026-06-11"], actual_miles=7.0),
        replace(records["2026-06-13"], actual_miles=20.0),
    ]

    split = intensity_split(logged)

    assert split.hard_miles == 13.0
    assert split.easy_miles == 27.0
    assert split.easy_percent == 68
    assert split.hard_percent == 32


def test_intensity_split_without_running() -> None:
    split = intensity_split(two_weeks().values())

    assert split.easy_percent is None
    assert split.hard_percent is None


def test_race_countdowns() -> None:
    half, full = race_countdowns("2026-04-25")

    assert half.days == 7
    assert half.label == "7 Days"
    assert full.days == 91

    half, _ = race_countdowns(date(2026, 5, 2))
    assert half.label == "Passed"


def test_shoe_thresholds_scale_with_capacity() -> None:
    record = next(iter(two_weeks().values()))

    assert shoe_mileage([replace(record, actual_miles=300.0)], capacity=700).status == "ok"
    assert shoe_mileage([replace(record, actual_miles=520.0)], capacity=700).status == "warn"
    assert shoe_mileage([replace(record, actual_miles=650.0)], capacity=700).status == "replace"
