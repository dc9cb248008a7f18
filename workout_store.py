"""
workout_store
-------------
In-memory owner of the season's workout records.

Records are addressed by id (the only mutation key) or by date. Reads hand out
copies; writes go through ``put`` / ``log_result`` so every update lands as one
whole-record replacement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Iterator, List, Optional

from calendar_math import DateLike, iso_date
from paces import grade_adjusted_pace
from workout_model import WorkoutRecord, parse_optional_float, parse_optional_text

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggedResult:
    miles: Optional[float]
    pace: Optional[str] = None
    elev: Optional[float] = None
    gap: Optional[str] = None
    notes: str = ""

    @classmethod
    def from_form(
        cls,
        miles: Any,
        pace: Any = None,
        elev: Any = None,
        notes: Any = "",
    ) -> "LoggedResult":
        """Parse free-text inputs; unparseable numbers become absent and GAP is recomputed."""
        miles_value = parse_optional_float(miles)
        pace_value = parse_optional_text(pace)
        elev_value = parse_optional_float(elev)
        return cls(
            miles=miles_value,
            pace=pace_value,
            elev=elev_value,
            gap=grade_adjusted_pace(miles_value, pace_value, elev_value),
            notes=str(notes or "").strip(),
        )


class WorkoutStore:
    def __init__(self, records: Iterable[WorkoutRecord]):
        ordered = sorted(records, key=lambda record: record.date)
        self._by_id: Dict[int, WorkoutRecord] = {}
        self._by_date: Dict[str, int] = {}
        for record in ordered:
            if record.id in self._by_id:
                raise ValueError(f"duplicate workout id {record.id}")
            if record.date_str in self._by_date:
                raise ValueError(f"duplicate workout date {record.date_str}")
            self._by_id[record.id] = record
            self._by_date[record.date_str] = record.id
        self._order: List[int] = [record.id for record in ordered]

    @classmethod
    def from_documents(cls, documents: Iterable[Dict[str, Any]]) -> "WorkoutStore":
        return cls(WorkoutRecord.from_document(doc) for doc in documents)

    def to_documents(self) -> List[Dict[str, Any]]:
        return [self._by_id[record_id].to_document() for record_id in self._order]

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[WorkoutRecord]:
        return iter(self.records())

    # -----------------------------
    # Reads
    # -----------------------------

    def records(self) -> List[WorkoutRecord]:
        return [replace(self._by_id[record_id]) for record_id in self._order]

    def get(self, record_id: int) -> Optional[WorkoutRecord]:
        record = self._by_id.get(record_id)
        return replace(record) if record else None

    def find_by_date(self, day: DateLike) -> Optional[WorkoutRecord]:
        record_id = self._by_date.get(iso_date(day))
        return self.get(record_id) if record_id is not None else None

    def upcoming(self, today: DateLike, limit: Optional[int] = None) -> List[WorkoutRecord]:
        """Records dated on/after ``today`` in date order, at most ``limit`` of them."""
        today_str = iso_date(today)
        found = [
            replace(self._by_id[record_id])
            for record_id in self._order
            if self._by_id[record_id].date_str >= today_str
        ]
        return found if limit is None else found[:limit]

    # -----------------------------
    # Writes
    # -----------------------------

    def put(self, record: WorkoutRecord) -> bool:
        current = self._by_id.get(record.id)
        if current is None:
            log.debug("put skipped: no workout with id %s", record.id)
            return False
        if current.date != record.date:
            raise ValueError(f"workout {record.id} cannot move from {current.date_str} to {record.date_str}")
        self._by_id[record.id] = replace(record)
        return True

    def log_result(self, record_id: int, result: LoggedResult) -> bool:
        record = self.get(record_id)
        if record is None:
            log.debug("log_result skipped: no workout with id %s", record_id)
            return False
        record.actual_miles = result.miles
        record.actual_pace = result.pace
        record.actual_elev = result.elev
        record.actual_gap = result.gap
        record.notes = result.notes
        return self.put(record)

    def log_result_by_date(self, day: DateLike, result: LoggedResult, *, overwrite: bool = False) -> bool:
        record = self.find_by_date(day)
        if record is None:
            return False
        if record.is_logged and not overwrite:
            return False
        return self.log_result(record.id, result)


__all__ = ["LoggedResult", "WorkoutStore"]
