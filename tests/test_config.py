# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from task_tracker.config import Settings, get_settings


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in list(os.environ):
        if name.startswith("TASK_TRACKER_"):
            monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()

    assert s.app_name == "task-tracker"
    assert s.log_level == "WARNING"
    assert s.log_to_file is True
    assert s.data_dir == Path(".local/task_tracker")
    assert s.tasks_path == Path(".local/task_tracker") / "tasks.json"
    assert s.log_dir == s.data_dir
    assert s.due_soon_hours == 24


def test_values_from_env(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TASK_TRACKER_DATA_DIR", str(tmp_path))
    clean_env.setenv("TASK_TRACKER_LOG_LEVEL", "debug")
    clean_env.setenv("TASK_TRACKER_LOG_TO_FILE", "no")
    clean_env.setenv("TASK_TRACKER_DUE_SOON_HOURS", "48")

    s = Settings.from_env()

    assert s.tasks_path == tmp_path / "tasks.json"
    assert s.log_dir == tmp_path
    assert s.log_level == "DEBUG"
    assert s.log_to_file is False
    assert s.due_soon_hours == 48


def test_explicit_tasks_path_wins(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TASK_TRACKER_DATA_DIR", str(tmp_path / "data"))
    clean_env.setenv("TASK_TRACKER_TASKS_PATH", str(tmp_path / "elsewhere.json"))

    assert Settings.from_env().tasks_path == tmp_path / "elsewhere.json"


def test_malformed_numbers_fall_back_to_defaults(clean_env) -> None:
    clean_env.setenv("TASK_TRACKER_DUE_SOON_HOURS", "soon")

    assert Settings.from_env().due_soon_hours == 24


def test_get_settings_returns_module_instance() -> None:
    assert get_settings() is get_settings()
    assert isinstance(get_settings(), Settings)
