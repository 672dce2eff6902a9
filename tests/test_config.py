from __future__ import annotations

import pytest
from pydantic import ValidationError

from time_motion_study.config import ENV_VARS, Config, loadConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    config = loadConfig()
    assert config == Config()
    assert config.storage_path == "timeMotionData.json"
    assert config.export_path == "time_motion_study.xlsx"
    assert config.study_name == "Time Motion Study"
    assert config.tick_interval == 0.01
    assert config.autosave_interval == 10.0
    assert config.log_file is None


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TMS_STORAGE_PATH", "/data/study.json")
    monkeypatch.setenv("TMS_AUTOSAVE_INTERVAL", "2.5")
    config = loadConfig()
    assert config.storage_path == "/data/study.json"
    assert config.autosave_interval == 2.5


def test_explicit_overrides_win_and_none_is_skipped(monkeypatch) -> None:
    monkeypatch.setenv("TMS_STUDY_NAME", "From env")
    config = loadConfig(study_name="From CLI", export_path=None)
    assert config.study_name == "From CLI"
    assert config.export_path == "time_motion_study.xlsx"


def test_rejects_non_positive_intervals(monkeypatch) -> None:
    monkeypatch.setenv("TMS_TICK_INTERVAL", "0")
    with pytest.raises(ValidationError):
        loadConfig()
