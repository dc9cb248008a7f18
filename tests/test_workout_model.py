from datetime import date
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from workout_model import (
    NOT_APPLICABLE,
    PaceKind,
    PlannedPace,
    WorkoutRecord,
    WorkoutType,
    parse_optional_float,
)


def build_record(**overrides) -> WorkoutRecord:
    values = dict(
        id=42,
        date=date(2026, 6, 13),
        type=WorkoutType.LONG,
        title="Long Run",
        planned_miles=20.0,
        planned_pace=PlannedPace.target("7:45/mi"),
        description="Aerobic development.",
    )
    values.update(overrides)
    return WorkoutRecord(**values)


def test_pace_labels_parse_into_variants() -> None:
    assert PlannedPace.parse("See Calc").kind is PaceKind.SEE_CALC
    assert PlannedPace.parse("Race Pace").kind is PaceKind.RACE_PACE
    assert PlannedPace.parse("N/A") == NOT_APPLICABLE
    assert PlannedPace.parse("") == NOT_APPLICABLE
    assert PlannedPace.parse("8:00/mi") == PlannedPace.target("8:00/mi")


def test_slowed_pace_label() -> None:
    slowed = PlannedPace.target("8:00/mi").slowed(30)

    assert slowed.label == "8:00/mi (+30s/mi)"
    assert PlannedPace.parse("8:00/mi (+30s/mi)") == slowed
    # slowing again replaces the offset rather than stacking it
    assert slowed.slowed(30).label == "8:00/mi (+30s/mi)"


def test_parse_optional_float_is_defensive() -> None:
    assert parse_optional_float("6.2") == 6.2
    assert parse_optional_float(" 10 ") == 10.0
    assert parse_optional_float(7) == 7.0
    assert parse_optional_float("") is None
    assert parse_optional_float("abc") is None
    assert parse_optional_float(None) is None
    assert parse_optional_float("nan") is None
    assert parse_optional_float(True) is None


def test_document_uses_empty_strings_for_absent_values() -> None:
    doc = build_record().to_document()

    assert doc["date"] == "2026-06-13"
    assert doc["type"] == "Long"
    assert doc["plannedMiles"] == 20
    assert doc["plannedPace"] == "7:45/mi"
    assert doc["actualMiles"] == ""
    assert doc["actualPace"] == ""
    assert doc["actualElev"] == ""
    assert doc["actualGap"] == ""
    assert doc["isAltered"] is False
    assert "originalTitle" not in doc


def test_document_with_snapshot() -> None:
    record = build_record()
    record.capture_snapshot()
    record.title = "Long Run (Reduced)"
    record.planned_miles = 14.0
    record.is_altered = True

    doc = record.to_document()
    assert doc["originalTitle"] == "Long Run"
    assert doc["originalMiles"] == 20
    assert doc["originalType"] == "Long"
    assert doc["isAltered"] is True
    assert WorkoutRecord.from_document(doc) == record


def test_from_document_tolerates_string_numbers_and_junk() -> None:
    doc = build_record().to_document()
    doc.update({"plannedMiles": "20", "actualMiles": "10.5", "actualElev": "lots", "actualPace": "7:30"})

    record = WorkoutRecord.from_document(doc)
    assert record.planned_miles == 20.0
    assert record.actual_miles == 10.5
    assert record.actual_elev is None
    assert record.actual_pace == "7:30"
    assert record.is_logged


def test_cross_train_type_value() -> None:
    record = build_record(type=WorkoutType.CROSS_TRAIN)

    assert record.to_document()["type"] == "Cross-Train"
    assert WorkoutRecord.from_document(record.to_document()).type is WorkoutType.CROSS_TRAIN


def test_revert_restores_snapshot_values() -> None:
    record = build_record()
    record.capture_snapshot()
    record.type = WorkoutType.CROSS_TRAIN
    record.planned_miles = 0.0
    record.planned_pace = NOT_APPLICABLE
    record.is_altered = True

    record.revert_to_snapshot()
    assert record.plan_values() == build_record().plan_values()
    assert not record.is_altered
    assert record.has_snapshot


def test_race_marker_in_title() -> None:
    assert build_record(title="🏁 TACOMA HM").is_race_day
    assert not build_record().is_race_day


def test_formatted_line() -> None:
    record = build_record(actual_miles=19.5, actual_pace="7:50")

    assert record.formatted() == "2026-06-13 | Long | Long Run | 20 mi @ 7:45/mi | Done: 19.5 mi @ 7:50"


def test_is_altered_flag_reads_text_values() -> None:
    doc = build_record().to_document()

    for raw, expected in [("false", False), ("False", False), ("", False), ("true", True), (1, True), (0, False), (None, False)]:
        doc["isAltered"] = raw
        assert WorkoutRecord.from_document(doc).is_altered is expected
    del doc["isAltered"]
    assert WorkoutRecord.from_document(doc).is_altered is False
