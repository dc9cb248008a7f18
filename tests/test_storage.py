from datetime import date
from pathlib import Path
import json
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from coach_errors import StorageError
from plan_generator import generate_plan
from rebalancer import rebalance
from storage import PlanStorage
from workout_store import LoggedResult, WorkoutStore


def test_missing_document_loads_as_none(tmp_path) -> None:
    assert PlanStorage(tmp_path).load() is None


def test_saved_plan_loads_back(tmp_path) -> None:
    store = WorkoutStore(generate_plan())
    store.log_result_by_date("2026-06-10", LoggedResult.from_form("7", "7:58", "120", "hilly"))
    rebalance(store, 6, 1, "2026-06-07")
    storage = PlanStorage(tmp_path)

    storage.save(store.records())
    loaded = storage.load()

    assert loaded == store.records()
    assert storage.path == tmp_path / "baileyCoachData_v2.json"
    assert [p.name for p in tmp_path.iterdir()] == ["baileyCoachData_v2.json"]


def test_document_is_a_json_list_of_flat_records(tmp_path) -> None:
    storage = PlanStorage(tmp_path, key="plan")
    storage.save(generate_plan(start=date(2026, 5, 2), end=date(2026, 5, 2)))

    payload = json.loads(storage.path.read_text(encoding="utf-8"))
    assert payload == [
        {
            "id": 1,
            "date": "2026-05-02",
            "type": "Long",
            "title": "🏁 TACOMA HM",
            "plannedMiles": 13.1,
            "plannedPace": "Race Pace",
            "description": "Sub-1:25 attempt.",
            "actualMiles": "",
            "actualPace": "",
            "actualElev": "",
            "actualGap": "",
            "notes": "",
            "isAltered": False,
        }
    ]


def test_load_sorts_by_date(tmp_path) -> None:
    storage = PlanStorage(tmp_path)
    records = generate_plan(start=date(2026, 6, 7), end=date(2026, 6, 9))
    storage.save(list(reversed(records)))

    assert [r.date for r in storage.load()] == [r.date for r in records]


def test_null_document_loads_as_none(tmp_path) -> None:
    storage = PlanStorage(tmp_path)
    storage.path.write_text("null", encoding="utf-8")

    assert storage.load() is None


@pytest.mark.parametrize("content", ["{not json", '{"id": 1}', '[{"id": 1}]', '[{"id": 1, "date": "2026-06-07", "type": "Jog"}]'])
def test_corrupt_document_raises(tmp_path, content) -> None:
    storage = PlanStorage(tmp_path)
    storage.path.write_text(content, encoding="utf-8")

    with pytest.raises(StorageError):
        storage.load()


def test_failed_save_keeps_previous_document(tmp_path, monkeypatch) -> None:
    storage = PlanStorage(tmp_path)
    storage.save(generate_plan(start=date(2026, 6, 7), end=date(2026, 6, 7)))
    before = storage.path.read_text(encoding="utf-8")

    def broken_dump(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(json, "dump", broken_dump)
    with pytest.raises(StorageError):
        storage.save(generate_plan(start=date(2026, 6, 8), end=date(2026, 6, 8)))

    assert storage.path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["baileyCoachData_v2.json"]
