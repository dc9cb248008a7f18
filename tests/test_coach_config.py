from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import coach_config
from coach_config import Config


def test_defaults(tmp_path) -> None:
    config = Config(config_path=tmp_path / "missing.yaml", env={})

    assert config.get("storage.key") == "baileyCoachData_v2"
    assert config.get_coordinates() == (47.16, -122.51)
    assert config.get_timezone() == "America/Los_Angeles"
    assert config.get_timeout() == 30
    assert config.get_shoe_capacity() == 350.0
    assert config.get("no.such.key", "fallback") == "fallback"


def test_yaml_merges_over_defaults(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("weather:\n  latitude: 40.0\nlogging:\n  level: debug\n", encoding="utf-8")

    config = Config(config_path=path, env={})

    assert config.get_coordinates() == (40.0, -122.51)
    assert config.get_log_level() == "DEBUG"


def test_env_overrides_yaml(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("storage:\n  key: from_yaml\n", encoding="utf-8")

    config = Config(
        config_path=path,
        env={"COACH_STORAGE_KEY": "from_env", "COACH_LATITUDE": "45.5", "COACH_DATA_DIR": str(tmp_path)},
    )

    assert config.get_storage_key() == "from_env"
    assert config.get_coordinates()[0] == 45.5
    assert config.get_data_dir() == tmp_path


def test_bad_env_value_is_ignored(tmp_path) -> None:
    config = Config(config_path=tmp_path / "missing.yaml", env={"COACH_LONGITUDE": "west"})

    assert config.get_coordinates()[1] == -122.51


def test_invalid_yaml_falls_back_to_defaults(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("storage: [unclosed\n", encoding="utf-8")

    assert Config(config_path=path, env={}).get_storage_key() == "baileyCoachData_v2"


def test_validate_reports_missing_strava_credentials(tmp_path) -> None:
    config = Config(config_path=tmp_path / "missing.yaml", env={})
    assert any("Strava" in error for error in config.validate())

    config = Config(config_path=tmp_path / "missing.yaml", env={"STRAVA_ACCESS_TOKEN": "tok"})
    assert config.validate() == []


def test_repr_masks_secrets(tmp_path) -> None:
    config = Config(
        config_path=tmp_path / "missing.yaml",
        env={"STRAVA_CLIENT_SECRET": "hunter2", "STRAVA_REFRESH_TOKEN": "r-123"},
    )

    text = repr(config)
    assert "hunter2" not in text
    assert "r-123" not in text
    assert "***MASKED***" in text
    assert config.get_strava_setting("client_secret") == "hunter2"


def test_get_config_returns_shared_instance(isolated_config) -> None:
    assert coach_config.get_config() is isolated_config
    assert coach_config.get_config() is coach_config.get_config()
