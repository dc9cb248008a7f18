"""
coach_session
-------------
One application session over the plan: loads (or generates) the records,
applies each mutation to the store, persists it, and serves the derived views.

Mutations run one at a time; each is saved before the call returns. Provider
calls finish fetching before anything is written, so a failed sync or weather
refresh leaves both the store and the saved document as they were.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

from aggregator import (
    IntensitySplit,
    RaceCountdown,
    ShoeMileage,
    WeekBucket,
    intensity_split,
    race_countdowns,
    shoe_mileage,
    weekly_mileage,
)
from calendar_math import DateLike, parse_iso_date
from coach_config import get_config
from coach_errors import StorageError
from plan_generator import generate_plan
from rebalancer import RebalanceOutcome, Rebalancer
from storage import PlanStorage
from strava_sync import StravaClient, SyncReport, sync_strava
from weather import BestStartTime, OpenMeteoClient, WeatherForecast, find_best_start_time
from workout_model import WorkoutRecord
from workout_store import LoggedResult, WorkoutStore

log = logging.getLogger(__name__)

UPCOMING_LIMIT = 10


@dataclass
class Dashboard:
    upcoming: List[WorkoutRecord]
    weeks: List[WeekBucket]
    shoe: ShoeMileage
    split: IntensitySplit
    countdowns: List[RaceCountdown]


def load_or_generate(storage: Optional[PlanStorage]) -> WorkoutStore:
    records = storage.load() if storage else None
    if records is None:
        log.info("Generating a fresh plan")
        records = generate_plan()
    return WorkoutStore(records)


class CoachSession:
    def __init__(self, store: WorkoutStore, storage: Optional[PlanStorage] = None):
        self.store = store
        self.storage = storage
        self.forecast = WeatherForecast()

    @classmethod
    def open(cls, storage: Optional[PlanStorage] = None) -> "CoachSession":
        config = get_config()
        for problem in config.validate():
            log.warning("Config: %s", problem)
        if storage is None:
            storage = PlanStorage(config.get_data_dir(), config.get_storage_key())
        return cls(load_or_generate(storage), storage)

    def save(self) -> None:
        if self.storage is not None:
            self.storage.save(self.store.records())

    def _commit(self, previous: WorkoutStore) -> None:
        """Save, or put ``previous`` back in memory when the save fails."""
        try:
            self.save()
        except StorageError:
            log.warning("Save failed; restoring the plan as last saved")
            self.store = previous
            raise

    def reset_plan(self) -> None:
        previous = self.store
        self.store = WorkoutStore(generate_plan())
        self._commit(previous)

    # -----------------------------
    # Mutations
    # -----------------------------

    def save_result(self, record_id: int, miles: Any, pace: Any = None, elev: Any = None, notes: Any = "") -> bool:
        previous = WorkoutStore(self.store.records())
        updated = self.store.log_result(record_id, LoggedResult.from_form(miles, pace, elev, notes))
        if updated:
            self._commit(previous)
        return updated

    def rebalance(self, joint_score: Any, rpe_score: Any, today: Optional[DateLike] = None) -> RebalanceOutcome:
        previous = WorkoutStore(self.store.records())
        outcome = Rebalancer(self.store).rebalance(joint_score, rpe_score, today or date.today())
        self._commit(previous)
        return outcome

    def sync_strava(self, client: Optional[StravaClient] = None) -> SyncReport:
        previous = WorkoutStore(self.store.records())
        report = sync_strava(self.store, client)
        if report.synced:
            self._commit(previous)
        return report

    def refresh_weather(self, client: Optional[OpenMeteoClient] = None) -> WeatherForecast:
        self.forecast = (client or OpenMeteoClient()).fetch_forecast()
        return self.forecast

    # -----------------------------
    # Views
    # -----------------------------

    def best_start_time(self, record_id: int) -> Optional[BestStartTime]:
        record = self.store.get(record_id)
        if record is None:
            return None
        return find_best_start_time(self.forecast, record)

    def dashboard(self, today: Optional[DateLike] = None) -> Dashboard:
        today = parse_iso_date(today or date.today())
        records = self.store.records()
        return Dashboard(
            upcoming=self.store.upcoming(today, UPCOMING_LIMIT),
            weeks=weekly_mileage(records, today),
            shoe=shoe_mileage(records, get_config().get_shoe_capacity()),
            split=intensity_split(records),
            countdowns=race_countdowns(today),
        )


__all__ = ["CoachSession", "Dashboard", "load_or_generate"]
