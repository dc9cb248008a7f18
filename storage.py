"""
storage
-------
Persistence boundary for the plan: the full ordered record list as one JSON
document, keyed by a fixed storage id (``<data_dir>/<key>.json``).

Writes go to a temp file first and are moved into place, so a failed save
leaves the previous document untouched.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO

from coach_errors import StorageError
from workout_model import WorkoutRecord

log = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "baileyCoachData_v2"


@contextmanager
def atomic_write(target_path: Path) -> Iterator[TextIO]:
    """Write to a temp file in the target directory, then rename over the target."""
    target_path = Path(target_path)
    target_path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=f".{target_path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yield f
        os.replace(temp_path, target_path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


class PlanStorage:
    def __init__(self, data_dir: Path, key: str = DEFAULT_STORAGE_KEY):
        self.data_dir = Path(data_dir)
        self.key = key

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.key}.json"

    def load(self) -> Optional[List[WorkoutRecord]]:
        """Saved records in date order, or ``None`` when nothing has been saved."""
        if not self.path.exists():
            log.info("No saved plan at %s", self.path)
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if payload is None:
            return None
        if not isinstance(payload, list):
            raise StorageError(f"{self.path} does not hold a list of workouts")
        try:
            records = [WorkoutRecord.from_document(doc) for doc in payload]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed workout in {self.path}: {e}") from e
        log.info("Loaded %d workouts from %s", len(records), self.path)
        return sorted(records, key=lambda record: record.date)

    def save(self, records: Sequence[WorkoutRecord]) -> None:
        documents = [record.to_document() for record in records]
        try:
            with atomic_write(self.path) as f:
                json.dump(documents, f, ensure_ascii=False, indent=1)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        log.debug("Saved %d workouts to %s", len(documents), self.path)


__all__ = ["DEFAULT_STORAGE_KEY", "PlanStorage", "atomic_write"]
