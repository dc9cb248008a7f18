#!/usr/bin/env python3
"""
plan_generator
--------------
Fixed-template marathon season generator (Feb 1 - Aug 31, 2026).

Main features:
- one record per calendar day, sequential ids, in date order
- Tuesday speed / Thursday tempo progressions indexed by periodization week
- Saturday long runs from a fixed date table, midweek easy runs scaled from it
- two race Saturdays (Tacoma HM, Jack & Jill Marathon)
- travel blackout, pre-race taper and post-race recovery overrides
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from calendar_math import (
    FRIDAY,
    MONDAY,
    SATURDAY,
    THURSDAY,
    TUESDAY,
    WEDNESDAY,
    date_range,
    day_of_week,
    days_between,
    iso_date,
    week_saturday,
)
from workout_model import (
    NOT_APPLICABLE,
    RACE_MARKER,
    RACE_PACE,
    SEE_CALC,
    PlannedPace,
    WorkoutRecord,
    WorkoutType,
)

log = logging.getLogger(__name__)


# -----------------------------
# Template constants
# -----------------------------

PLAN_START = date(2026, 2, 1)
PLAN_END = date(2026, 8, 31)
PERIODIZATION_START = date(2026, 3, 1)

SPEED_PROGRESSION = [
    "8x400m", "4x1200m", "6x800m", "3x1600m", "10x400m", "5x1200m", "7x800m",
    "3x1600m", "12x400m", "8x800m", "4x1600m", "12x400m", "6x1200m", "7x800m",
    "3x1600m", "5x1000m", "Yasso 800s (8x)", "Yasso 800s (10x)", "4x1200m",
    "Fartlek", "Shakeout",
]
TEMPO_PROGRESSION = [
    "Short Tempo", "Mid Tempo", "Mid Tempo", "Short Tempo", "Mid Tempo",
    "Mid Tempo", "Long Tempo", "Long Tempo", "Short Tempo", "Mid Tempo",
    "Long Tempo", "Mid Tempo", "Mid Tempo", "Short Tempo", "Long Tempo",
    "Long Tempo", "Long Tempo", "Marathon Pace", "Mid Tempo", "Short Tempo",
    "Race Week Tempo",
]

SATURDAY_LONG_RUNS: Dict[str, float] = {
    "2026-02-07": 8, "2026-02-14": 10, "2026-02-21": 8, "2026-02-28": 10,
    "2026-03-07": 12, "2026-03-14": 5, "2026-03-21": 13, "2026-03-28": 14,
    "2026-04-04": 15, "2026-04-11": 10, "2026-04-18": 16, "2026-04-25": 8,
    "2026-05-02": 13.1, "2026-05-09": 10, "2026-05-16": 14, "2026-05-23": 16,
    "2026-05-30": 18, "2026-06-06": 14, "2026-06-13": 20, "2026-06-20": 16,
    "2026-06-27": 22, "2026-07-04": 20, "2026-07-11": 12, "2026-07-18": 6,
    "2026-07-25": 26.2,
}
FALLBACK_LONG_RUN = 8.0

WEDNESDAY_EASY_RATIO, WEDNESDAY_EASY_MIN = 0.35, 4.0
FRIDAY_EASY_RATIO, FRIDAY_EASY_MIN = 0.25, 3.0

EASY_PACE = PlannedPace.target("8:00/mi")
LONG_PACE = PlannedPace.target("7:45/mi")


@dataclass(frozen=True)
class RaceDay:
    date: str
    title: str
    pace: PlannedPace
    description: str


RACE_DAYS: Dict[str, RaceDay] = {
    "2026-05-02": RaceDay("2026-05-02", f"{RACE_MARKER} TACOMA HM", RACE_PACE, "Sub-1:25 attempt."),
    "2026-07-25": RaceDay(
        "2026-07-25", f"{RACE_MARKER} JACK & JILL MARATHON", PlannedPace.target("6:50/mi"), "Sub-3 Attempt."
    ),
}
FINAL_RACE_DATE = "2026-07-25"

TRAVEL_BLACKOUT = ("2026-03-13", "2026-03-17")
TRAVEL_TAPER = ("2026-07-12", "2026-07-18")


@dataclass
class DayTemplate:
    type: WorkoutType
    title: str
    miles: float
    pace: PlannedPace
    description: str


# -----------------------------
# Helper functions
# -----------------------------


def week_index(day: date, table_length: int = len(SPEED_PROGRESSION)) -> int:
    """Complete weeks since the periodization start, clamped to the table."""
    elapsed = days_between(PERIODIZATION_START, day)
    if elapsed < 0:
        return 0
    return min(elapsed // 7, table_length - 1)


def long_run_target(day: date) -> float:
    return float(SATURDAY_LONG_RUNS.get(iso_date(week_saturday(day)), FALLBACK_LONG_RUN))


def easy_miles(long_run: float, ratio: float, minimum: float) -> float:
    return max(minimum, float(math.floor(long_run * ratio)))


def in_window(day_str: str, window: tuple) -> bool:
    start, end = window
    return start <= day_str <= end


# -----------------------------
# Generator
# -----------------------------


class PlanGenerator:
    def __init__(self, *, start: date = PLAN_START, end: date = PLAN_END):
        if start > end:
            raise ValueError("start must be on or before end")
        self.start = start
        self.end = end

    def weekday_template(self, day: date) -> DayTemplate:
        weekday = day_of_week(day)
        idx = week_index(day)
        long_run = long_run_target(day)
        if weekday == MONDAY:
            return DayTemplate(
                WorkoutType.CROSS_TRAIN, "Rock Climb + Pre-Hab", 0.0, NOT_APPLICABLE,
                "Climbing session + 15 mins dumbbell work.",
            )
        if weekday == TUESDAY:
            return DayTemplate(WorkoutType.SPEED, SPEED_PROGRESSION[idx], 6.0, SEE_CALC, "Hills or track intervals.")
        if weekday == WEDNESDAY:
            miles = easy_miles(long_run, WEDNESDAY_EASY_RATIO, WEDNESDAY_EASY_MIN)
            return DayTemplate(WorkoutType.RECOVERY, "Mid-Week Easy", miles, EASY_PACE, "Strictly easy.")
        if weekday == THURSDAY:
            return DayTemplate(WorkoutType.TEMPO, TEMPO_PROGRESSION[idx], 7.0, SEE_CALC, "Lactate threshold effort.")
        if weekday == FRIDAY:
            miles = easy_miles(long_run, FRIDAY_EASY_RATIO, FRIDAY_EASY_MIN)
            return DayTemplate(WorkoutType.RECOVERY, "Easy Run", miles, EASY_PACE, "Shakeout.")
        if weekday == SATURDAY:
            template = DayTemplate(WorkoutType.LONG, "Long Run", long_run, LONG_PACE, "Aerobic development.")
            race = RACE_DAYS.get(iso_date(day))
            if race:
                template.title = race.title
                template.pace = race.pace
                template.description = race.description
            return template
        return DayTemplate(WorkoutType.REST, "Full Rest", 0.0, NOT_APPLICABLE, "Zero impact.")

    def apply_overrides(self, day: date, template: DayTemplate) -> DayTemplate:
        # later windows win when they overlap
        day_str = iso_date(day)
        weekday = day_of_week(day)
        if in_window(day_str, TRAVEL_BLACKOUT) and weekday != SATURDAY:
            template.type = WorkoutType.REST
            template.title = "Travel Day"
            template.miles = 0.0
        if in_window(day_str, TRAVEL_TAPER) and weekday != SATURDAY:
            if weekday == WEDNESDAY:
                template.type = WorkoutType.RECOVERY
                template.title = "Shakeout"
            else:
                template.type = WorkoutType.REST
                template.title = "Travel Taper"
        if day_str > FINAL_RACE_DATE:
            if weekday in (MONDAY, FRIDAY):
                template.type = WorkoutType.CROSS_TRAIN
                template.title = "Light Climb / Walk"
                template.description = "Active recovery."
            else:
                template.type = WorkoutType.REST
                template.title = "Recovery Block"
                template.description = "Post-marathon healing."
            template.miles = 0.0
            template.pace = NOT_APPLICABLE
        return template

    def build_day(self, day: date, record_id: int) -> WorkoutRecord:
        template = self.apply_overrides(day, self.weekday_template(day))
        return WorkoutRecord(
            id=record_id,
            date=day,
            type=template.type,
            title=template.title,
            planned_miles=template.miles,
            planned_pace=template.pace,
            description=template.description,
        )

    def build_plan(self) -> List[WorkoutRecord]:
        records = [
            self.build_day(day, record_id)
            for record_id, day in enumerate(date_range(self.start, self.end), start=1)
        ]
        log.info("Generated %d workouts (%s .. %s)", len(records), iso_date(self.start), iso_date(self.end))
        return records


def generate_plan(*, start: Optional[date] = None, end: Optional[date] = None) -> List[WorkoutRecord]:
    return PlanGenerator(start=start or PLAN_START, end=end or PLAN_END).build_plan()


__all__ = [
    "FALLBACK_LONG_RUN",
    "PLAN_END",
    "PLAN_START",
    "PERIODIZATION_START",
    "RACE_DAYS",
    "SATURDAY_LONG_RUNS",
    "PlanGenerator",
    "generate_plan",
    "long_run_target",
    "week_index",
]
