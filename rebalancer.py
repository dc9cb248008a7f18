"""
rebalancer
----------
Daily check-in driven adjustment of the coming week.

Every call first restores the 7-day window to its snapshot values, then applies
at most one branch: joint pain (>= 5) pulls intensity and long-run volume,
otherwise exertion (>= 5) slows easy and long paces. Reapplying the same scores
gives the same plan; two low scores bring the generator values back.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from calendar_math import DateLike
from workout_model import NOT_APPLICABLE, WorkoutRecord, WorkoutType
from workout_store import WorkoutStore

log = logging.getLogger(__name__)

SCORE_THRESHOLD = 5
WINDOW_DAYS = 7
LONG_RUN_REDUCTION = 0.7
SLOWDOWN_SECONDS = 30


class RebalanceBranch(Enum):
    JOINT = "joint"
    EXERTION = "exertion"
    CLEAR = "clear"


@dataclass
class RebalanceOutcome:
    branch: RebalanceBranch
    joint_score: Optional[int]
    rpe_score: Optional[int]
    window_ids: List[int] = field(default_factory=list)
    altered_ids: List[int] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.branch is RebalanceBranch.JOINT:
            return f"Joint score {self.joint_score}. Volume reduced."
        if self.branch is RebalanceBranch.EXERTION:
            return f"RPE is {self.rpe_score}. Paces slowed."
        return "Green light! Plan locked."


def parse_score(value: Any) -> Optional[int]:
    """Leading integer of a score input; ``None`` when there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    text = str(value).strip()
    digits = ""
    for idx, char in enumerate(text):
        if char.isdigit() or (idx == 0 and char in "+-"):
            digits += char
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return None


def choose_branch(joint_score: Optional[int], rpe_score: Optional[int]) -> RebalanceBranch:
    if joint_score is not None and joint_score >= SCORE_THRESHOLD:
        return RebalanceBranch.JOINT
    if rpe_score is not None and rpe_score >= SCORE_THRESHOLD:
        return RebalanceBranch.EXERTION
    return RebalanceBranch.CLEAR


def round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


# -----------------------------
# Per-record rules
# -----------------------------


def reduce_for_joint_pain(record: WorkoutRecord) -> bool:
    original = record.original
    if record.type in (WorkoutType.SPEED, WorkoutType.TEMPO):
        record.type = WorkoutType.CROSS_TRAIN
        record.title = f"Converted from {original.title}"
        record.planned_miles = 0.0
        record.planned_pace = NOT_APPLICABLE
        return True
    if record.type is WorkoutType.LONG and not record.is_race_day:
        record.planned_miles = round_half_up(original.miles * LONG_RUN_REDUCTION)
        record.title = f"{original.title} (Reduced)"
        return True
    return False


def slow_for_exertion(record: WorkoutRecord) -> bool:
    original = record.original
    if record.type is WorkoutType.RECOVERY or (record.type is WorkoutType.LONG and not record.is_race_day):
        record.planned_pace = original.pace.slowed(SLOWDOWN_SECONDS)
        record.title = f"{original.title} (Slowed Down)"
        return True
    return False


# -----------------------------
# Rebalancer
# -----------------------------


class Rebalancer:
    def __init__(self, store: WorkoutStore):
        self.store = store

    def rebalance(self, joint_score: Any, rpe_score: Any, today: DateLike) -> RebalanceOutcome:
        joint = parse_score(joint_score)
        rpe = parse_score(rpe_score)
        branch = choose_branch(joint, rpe)
        outcome = RebalanceOutcome(branch=branch, joint_score=joint, rpe_score=rpe)

        for record in self.store.upcoming(today, WINDOW_DAYS):
            record.capture_snapshot()
            record.revert_to_snapshot()
            altered = False
            if branch is RebalanceBranch.JOINT:
                altered = reduce_for_joint_pain(record)
            elif branch is RebalanceBranch.EXERTION:
                altered = slow_for_exertion(record)
            record.is_altered = altered
            self.store.put(record)
            outcome.window_ids.append(record.id)
            if altered:
                outcome.altered_ids.append(record.id)
                log.debug("workout %s (%s) -> %s", record.id, record.date_str, record.title)

        log.info(
            "Rebalanced %d workouts: branch=%s altered=%d",
            len(outcome.window_ids),
            branch.value,
            len(outcome.altered_ids),
        )
        return outcome


def rebalance(store: WorkoutStore, joint_score: Any, rpe_score: Any, today: DateLike) -> RebalanceOutcome:
    return Rebalancer(store).rebalance(joint_score, rpe_score, today)


__all__ = [
    "RebalanceBranch",
    "RebalanceOutcome",
    "Rebalancer",
    "choose_branch",
    "parse_score",
    "rebalance",
]
