"""
workout_model
-------------
Data model for one calendar day of the training plan.

A ``WorkoutRecord`` carries the planned session, the logged result (``None``
fields mean "not run yet") and, once the rebalancer has touched it, a
``PlanSnapshot`` of the values it had before the first alteration. Records
round-trip through a flat document whose key names are the persisted layout.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from calendar_math import iso_date, parse_iso_date

RACE_MARKER = "🏁"


# -----------------------------
# Tagged values
# -----------------------------


class WorkoutType(str, Enum):
    RECOVERY = "Recovery"
    SPEED = "Speed"
    TEMPO = "Tempo"
    LONG = "Long"
    CROSS_TRAIN = "Cross-Train"
    REST = "Rest"


class PaceKind(Enum):
    TARGET = "target"
    SEE_CALC = "see_calc"
    RACE_PACE = "race_pace"
    NOT_APPLICABLE = "not_applicable"


SENTINEL_LABELS = {
    PaceKind.SEE_CALC: "See Calc",
    PaceKind.RACE_PACE: "Race Pace",
    PaceKind.NOT_APPLICABLE: "N/A",
}
_SLOWDOWN_RE = re.compile(r"^(?P<base>.*?)\s*\(\+(?P<seconds>\d+)s/mi\)$")


@dataclass(frozen=True)
class PlannedPace:
    kind: PaceKind
    value: str = ""
    slowdown_seconds: int = 0

    @classmethod
    def target(cls, value: str) -> "PlannedPace":
        return cls(PaceKind.TARGET, value)

    @classmethod
    def parse(cls, label: Optional[str]) -> "PlannedPace":
        text = (label or "").strip()
        slowdown = 0
        match = _SLOWDOWN_RE.match(text)
        if match:
            text = match.group("base").strip()
            slowdown = int(match.group("seconds"))
        for kind, sentinel in SENTINEL_LABELS.items():
            if text == sentinel:
                return cls(kind, slowdown_seconds=slowdown)
        if not text:
            return cls(PaceKind.NOT_APPLICABLE, slowdown_seconds=slowdown)
        return cls(PaceKind.TARGET, text, slowdown)

    @property
    def label(self) -> str:
        base = self.value if self.kind is PaceKind.TARGET else SENTINEL_LABELS[self.kind]
        if self.slowdown_seconds:
            return f"{base} (+{self.slowdown_seconds}s/mi)"
        return base

    def slowed(self, seconds: int) -> "PlannedPace":
        return replace(self, slowdown_seconds=seconds)

    def __str__(self) -> str:
        return self.label


SEE_CALC = PlannedPace(PaceKind.SEE_CALC)
RACE_PACE = PlannedPace(PaceKind.RACE_PACE)
NOT_APPLICABLE = PlannedPace(PaceKind.NOT_APPLICABLE)


# -----------------------------
# Defensive parsing
# -----------------------------


def parse_optional_float(value: Any) -> Optional[float]:
    """Free text or JSON value -> float, or ``None`` when empty or unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_flag(value: Any) -> bool:
    """JSON boolean, number or text ("true"/"false", "1"/"0") -> bool; anything else is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return False


def _number(value: Optional[float]) -> Any:
    if value is None:
        return ""
    if float(value).is_integer():
        return int(value)
    return value


# -----------------------------
# Records
# -----------------------------


@dataclass(frozen=True)
class PlanSnapshot:
    title: str
    miles: float
    pace: PlannedPace
    type: WorkoutType
    description: str


@dataclass
class WorkoutRecord:
    id: int
    date: date
    type: WorkoutType
    title: str
    planned_miles: float
    planned_pace: PlannedPace
    description: str
    actual_miles: Optional[float] = None
    actual_pace: Optional[str] = None
    actual_elev: Optional[float] = None
    actual_gap: Optional[str] = None
    notes: str = ""
    original: Optional[PlanSnapshot] = None
    is_altered: bool = False

    @property
    def date_str(self) -> str:
        return iso_date(self.date)

    @property
    def is_race_day(self) -> bool:
        return RACE_MARKER in self.title

    @property
    def is_logged(self) -> bool:
        return self.actual_miles is not None

    @property
    def has_snapshot(self) -> bool:
        return self.original is not None

    def plan_values(self) -> PlanSnapshot:
        return PlanSnapshot(
            title=self.title,
            miles=self.planned_miles,
            pace=self.planned_pace,
            type=self.type,
            description=self.description,
        )

    def capture_snapshot(self) -> PlanSnapshot:
        if self.original is None:
            self.original = self.plan_values()
        return self.original

    def revert_to_snapshot(self) -> None:
        if self.original is None:
            return
        self.title = self.original.title
        self.planned_miles = self.original.miles
        self.planned_pace = self.original.pace
        self.type = self.original.type
        self.description = self.original.description
        self.is_altered = False

    def formatted(self) -> str:
        info = (
            f"{self.date_str} | {self.type.value} | {self.title} | "
            f"{self.planned_miles:g} mi @ {self.planned_pace.label}"
        )
        if self.is_logged:
            info += f" | Done: {self.actual_miles:g} mi @ {self.actual_pace or '-'}"
        return info

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "id": self.id,
            "date": self.date_str,
            "type": self.type.value,
            "title": self.title,
            "plannedMiles": _number(self.planned_miles),
            "plannedPace": self.planned_pace.label,
            "description": self.description,
            "actualMiles": _number(self.actual_miles),
            "actualPace": self.actual_pace or "",
            "actualElev": _number(self.actual_elev),
            "actualGap": self.actual_gap or "",
            "notes": self.notes,
            "isAltered": self.is_altered,
        }
        if self.original is not None:
            doc.update(
                {
                    "originalTitle": self.original.title,
                    "originalMiles": _number(self.original.miles),
                    "originalPace": self.original.pace.label,
                    "originalType": self.original.type.value,
                    "originalDesc": self.original.description,
                }
            )
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "WorkoutRecord":
        original = None
        if doc.get("originalTitle") is not None:
            original = PlanSnapshot(
                title=str(doc["originalTitle"]),
                miles=parse_optional_float(doc.get("originalMiles")) or 0.0,
                pace=PlannedPace.parse(doc.get("originalPace")),
                type=WorkoutType(doc.get("originalType", doc["type"])),
                description=str(doc.get("originalDesc") or ""),
            )
        return cls(
            id=int(doc["id"]),
            date=parse_iso_date(str(doc["date"])),
            type=WorkoutType(doc["type"]),
            title=str(doc.get("title") or ""),
            planned_miles=parse_optional_float(doc.get("plannedMiles")) or 0.0,
            planned_pace=PlannedPace.parse(doc.get("plannedPace")),
            description=str(doc.get("description") or ""),
            actual_miles=parse_optional_float(doc.get("actualMiles")),
            actual_pace=parse_optional_text(doc.get("actualPace")),
            actual_elev=parse_optional_float(doc.get("actualElev")),
            actual_gap=parse_optional_text(doc.get("actualGap")),
            notes=str(doc.get("notes") or ""),
            original=original,
            is_altered=parse_flag(doc.get("isAltered")),
        )


__all__ = [
    "NOT_APPLICABLE",
    "RACE_MARKER",
    "RACE_PACE",
    "SEE_CALC",
    "PaceKind",
    "PlanSnapshot",
    "PlannedPace",
    "WorkoutRecord",
    "WorkoutType",
    "parse_flag",
    "parse_optional_float",
    "parse_optional_text",
]
