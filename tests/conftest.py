from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import coach_config


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Defaults only: no config.yaml and no environment overrides."""
    config = coach_config.Config(config_path=tmp_path / "config.yaml", env={})
    config.set("storage.data_dir", str(tmp_path / "data"))
    monkeypatch.setattr(coach_config, "_config", config)
    return config
