"""
aggregator
----------
Derived views over the workout store: weekly mileage buckets for the stacked
chart and the dashboard widgets (shoe mileage, easy/hard split, race
countdowns, upcoming list).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from calendar_math import DateLike, days_between, iso_date, parse_iso_date, short_label, week_anchor
from plan_generator import RACE_DAYS
from workout_model import WorkoutRecord, WorkoutType

SHOE_CAPACITY_MILES = 350.0
# thresholds at the default capacity; scaled for other capacities
SHOE_WARN_MILES = 250.0
SHOE_REPLACE_MILES = 320.0

HARD_TYPES = (WorkoutType.SPEED, WorkoutType.TEMPO)
EASY_TYPES = (WorkoutType.RECOVERY, WorkoutType.LONG)


# -----------------------------
# Weekly mileage
# -----------------------------


@dataclass
class WeekBucket:
    anchor: date
    label: str
    achieved: float = 0.0
    future: float = 0.0

    @property
    def total(self) -> float:
        return self.achieved + self.future


def weekly_mileage(records: Iterable[WorkoutRecord], today: DateLike) -> List[WeekBucket]:
    """
    Group records into Sunday-anchored weeks.

    Logged miles count as achieved whatever the date. Unlogged days on/after
    ``today`` add their planned miles to the future series; unlogged past days
    were missed and add nothing.
    """
    today_str = iso_date(today)
    buckets: Dict[date, WeekBucket] = {}
    for record in records:
        anchor = week_anchor(record.date)
        bucket = buckets.get(anchor)
        if bucket is None:
            bucket = buckets[anchor] = WeekBucket(anchor=anchor, label=short_label(anchor))
        if record.is_logged:
            bucket.achieved += record.actual_miles
        elif record.date_str >= today_str:
            bucket.future += record.planned_miles
    return [buckets[anchor] for anchor in sorted(buckets)]


# -----------------------------
# Dashboard widgets
# -----------------------------


@dataclass
class ShoeMileage:
    miles: float
    capacity: float

    @property
    def percent(self) -> float:
        if self.capacity <= 0:
            return 100.0
        return min(self.miles / self.capacity * 100.0, 100.0)

    def _limit(self, miles_at_default: float) -> float:
        return miles_at_default * self.capacity / SHOE_CAPACITY_MILES

    @property
    def status(self) -> str:
        if self.miles > self._limit(SHOE_REPLACE_MILES):
            return "replace"
        if self.miles > self._limit(SHOE_WARN_MILES):
            return "warn"
        return "ok"


@dataclass
class IntensitySplit:
    easy_miles: float
    hard_miles: float
    easy_percent: Optional[int]
    hard_percent: Optional[int]


@dataclass
class RaceCountdown:
    date: date
    title: str
    days: int

    @property
    def label(self) -> str:
        return f"{self.days} Days" if self.days > 0 else "Passed"


def shoe_mileage(records: Iterable[WorkoutRecord], capacity: float = SHOE_CAPACITY_MILES) -> ShoeMileage:
    total = sum(record.actual_miles or 0.0 for record in records)
    return ShoeMileage(miles=total, capacity=capacity)


def intensity_split(records: Iterable[WorkoutRecord]) -> IntensitySplit:
    hard = 0.0
    easy = 0.0
    for record in records:
        miles = record.actual_miles or 0.0
        if record.type in HARD_TYPES:
            hard += miles
        elif record.type in EASY_TYPES:
            easy += miles
    running = hard + easy
    if running <= 0:
        return IntensitySplit(easy, hard, None, None)
    easy_percent = int(math.floor(easy / running * 100 + 0.5))
    return IntensitySplit(easy, hard, easy_percent, 100 - easy_percent)


def race_countdowns(today: DateLike) -> List[RaceCountdown]:
    today = parse_iso_date(today)
    countdowns = []
    for race in sorted(RACE_DAYS.values(), key=lambda r: r.date):
        race_date = parse_iso_date(race.date)
        countdowns.append(RaceCountdown(race_date, race.title, days_between(today, race_date)))
    return countdowns


__all__ = [
    "IntensitySplit",
    "RaceCountdown",
    "ShoeMileage",
    "WeekBucket",
    "intensity_split",
    "race_countdowns",
    "shoe_mileage",
    "weekly_mileage",
]
