"""
paces
-----
Per-mile pace helpers: parsing, formatting, grade-adjusted pace (GAP) and the
race-result based training pace calculator.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

# 15 seconds of credit per 100 ft of climbing per mile
GAP_SECONDS_PER_100FT = 15.0

# race distance (miles) -> factor turning the race time into a 10K equivalent
TEN_K_FACTORS: Dict[float, float] = {
    1.0: 6.5,
    3.1: 2.08,
    6.2: 1.0,
    10.0: 1 / 1.65,
    13.1: 1 / 2.2,
    26.2: 1 / 4.6,
}
TEN_K_MILES = 6.21


def pace_to_seconds(pace_str: str) -> int:
    minute, sec = pace_str.strip().split("/")[0].split(":")
    return int(minute) * 60 + int(sec)


def parse_pace_seconds(pace_str: Optional[str]) -> Optional[int]:
    """Like :func:`pace_to_seconds` but returns ``None`` for anything malformed."""
    if not pace_str or ":" not in pace_str:
        return None
    try:
        seconds = pace_to_seconds(pace_str)
    except ValueError:
        return None
    return seconds if seconds > 0 else None


def seconds_to_pace(sec: float) -> str:
    sec = max(sec, 0)
    minute = int(sec // 60)
    second = int(math.floor(sec % 60))
    return f"{minute}:{second:02d}"


def grade_adjusted_pace(
    miles: Optional[float],
    pace: Optional[str],
    elevation_ft: Optional[float],
) -> Optional[str]:
    """
    Normalise a per-mile pace for climbing.

    Returns ``None`` unless miles and elevation are positive and the pace is a
    well-formed ``M:SS`` string. An adjustment that would leave a zero or
    negative pace falls back to the raw pace.
    """
    if miles is None or elevation_ft is None or miles <= 0 or elevation_ft <= 0:
        return None
    raw_seconds = parse_pace_seconds(pace)
    if raw_seconds is None:
        return None
    elevation_per_mile = elevation_ft / miles
    credit = (elevation_per_mile / 100.0) * GAP_SECONDS_PER_100FT
    gap_seconds = raw_seconds - credit
    if gap_seconds <= 0:
        gap_seconds = raw_seconds
    return seconds_to_pace(gap_seconds)


def speed_to_pace(average_speed_mps: float) -> str:
    """Metres per second -> ``M:SS`` per mile (seconds truncated)."""
    minutes_per_mile = 26.8224 / average_speed_mps
    whole_minutes = int(math.floor(minutes_per_mile))
    seconds = int(math.floor((minutes_per_mile - whole_minutes) * 60))
    return f"{whole_minutes}:{seconds:02d}"


# -----------------------------
# Training pace calculator
# -----------------------------


@dataclass
class TrainingPaces:
    ten_k_seconds: float
    base_pace_seconds: float
    long: str
    tempo: str
    speed: str


def _format_range(base: float, low_offset: float, high_offset: float) -> str:
    return f"{seconds_to_pace(base + low_offset)} - {seconds_to_pace(base + high_offset)} /mi"


def calculate_training_paces(race_miles: float, minutes: int, seconds: int = 0) -> TrainingPaces:
    """Estimate long/tempo/speed pace ranges from a recent race result."""
    total_seconds = minutes * 60 + seconds
    if total_seconds <= 0:
        raise ValueError("Race time must be positive")
    factor = TEN_K_FACTORS.get(float(race_miles), 1.0)
    ten_k_seconds = total_seconds * factor
    base = ten_k_seconds / TEN_K_MILES
    return TrainingPaces(
        ten_k_seconds=ten_k_seconds,
        base_pace_seconds=base,
        long=_format_range(base, 60, 75),
        tempo=_format_range(base, 0, 35),
        speed=_format_range(base, -60, -35),
    )


__all__ = [
    "TrainingPaces",
    "calculate_training_paces",
    "grade_adjusted_pace",
    "pace_to_seconds",
    "parse_pace_seconds",
    "seconds_to_pace",
    "speed_to_pace",
]
