"""Unit tests for the configuration loader."""

import json
import pytest
from pathlib import Path

from focaplus.core.config import (
    get_data_directory,
    get_default_config,
    get_default_config_path,
    load_config,
    merge_defaults,
    pomodoro_seconds,
    save_config,
)


# ------------------------------------------------------------------
# get_data_directory
# ------------------------------------------------------------------

def test_get_data_directory_returns_path():
    result = get_data_directory()
    assert isinstance(result, Path)
    assert "FocaPlus" in str(result) or ".focaplus" in str(result)


def test_get_data_directory_macos(monkeypatch):
    monkeypatch.setattr("focaplus.core.config.sys.platform", "darwin")
    result = get_data_directory()
    assert result == Path.home() / "Library" / "Application Support" / "FocaPlus"


def test_get_data_directory_windows(monkeypatch):
    monkeypatch.setattr("focaplus.core.config.sys.platform", "win32")
    monkeypatch.setenv("APPDATA", "/fake/appdata")
    result = get_data_directory()
    assert result == Path("/fake/appdata") / "FocaPlus"


def test_get_data_directory_windows_no_appdata(monkeypatch):
    monkeypatch.setattr("focaplus.core.config.sys.platform", "win32")
    monkeypatch.delenv("APPDATA", raising=False)
    result = get_data_directory()
    assert result == Path.home() / "AppData" / "Roaming" / "FocaPlus"


def test_get_data_directory_linux(monkeypatch):
    monkeypatch.setattr("focaplus.core.config.sys.platform", "linux")
    result = get_data_directory()
    assert result == Path.home() / ".focaplus"


def test_default_config_path_is_in_data_directory():
    assert get_default_config_path() == get_data_directory() / "config.json"


# ------------------------------------------------------------------
# get_default_config
# ------------------------------------------------------------------

def test_default_config_has_required_keys():
    cfg = get_default_config()
    assert "api_base_url" in cfg
    assert "request_timeout_seconds" in cfg
    assert "pomodoro" in cfg
    assert "default_activity_type" in cfg
    assert "dashboard_port" in cfg
    assert "database_path" in cfg


def test_default_config_backend_values():
    cfg = get_default_config()
    assert cfg["api_base_url"] == "http://localhost:8080/api/v1"
    assert cfg["request_timeout_seconds"] == 10


def test_default_config_pomodoro_values():
    pom = get_default_config()["pomodoro"]
    assert pom["study_minutes"] == 25
    assert pom["rest_minutes"] == 5


# ------------------------------------------------------------------
# save_config / load_config round-trip
# ------------------------------------------------------------------

def test_save_and_load_round_trip(tmp_path):
    cfg_path = tmp_path / "config.json"
    original = get_default_config()
    save_config(original, cfg_path)
    loaded = load_config(cfg_path)
    assert loaded == original


def test_save_creates_parent_directories(tmp_path):
    cfg_path = tmp_path / "nested" / "deep" / "config.json"
    save_config({"key": "value"}, cfg_path)
    assert cfg_path.exists()
    loaded = load_config(cfg_path)
    assert loaded["key"] == "value"


def test_save_keeps_non_ascii(tmp_path):
    cfg_path = tmp_path / "config.json"
    save_config({"default_activity_type": "Estudar para Avaliação"}, cfg_path)
    assert "Avaliação" in cfg_path.read_text(encoding="utf-8")


# ------------------------------------------------------------------
# load_config - default creation on first launch
# ------------------------------------------------------------------

def test_load_creates_default_when_missing(tmp_path):
    cfg_path = tmp_path / "config.json"
    assert not cfg_path.exists()
    loaded = load_config(cfg_path)
    assert cfg_path.exists()
    assert loaded == get_default_config()


def test_load_created_default_is_valid_json(tmp_path):
    cfg_path = tmp_path / "config.json"
    load_config(cfg_path)
    with open(cfg_path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    assert isinstance(data, dict)


# ------------------------------------------------------------------
# load_config - error handling
# ------------------------------------------------------------------

def test_load_invalid_json_returns_defaults(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("not valid json {{{", encoding="utf-8")
    loaded = load_config(cfg_path)
    assert loaded == get_default_config()


def test_load_json_array_returns_defaults(tmp_path):
    """Top-level JSON must be an object, not an array."""
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("[1, 2, 3]", encoding="utf-8")
    loaded = load_config(cfg_path)
    assert loaded == get_default_config()


def test_load_empty_file_returns_defaults(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("", encoding="utf-8")
    loaded = load_config(cfg_path)
    assert loaded == get_default_config()


# ------------------------------------------------------------------
# load_config - custom values preserved, missing keys filled
# ------------------------------------------------------------------

def test_load_preserves_custom_values(tmp_path):
    cfg_path = tmp_path / "config.json"
    save_config({"dashboard_port": 8000, "custom_key": "hello"}, cfg_path)
    loaded = load_config(cfg_path)
    assert loaded["dashboard_port"] == 8000
    assert loaded["custom_key"] == "hello"
    assert loaded["api_base_url"] == "http://localhost:8080/api/v1"


def test_load_merges_nested_pomodoro(tmp_path):
    cfg_path = tmp_path / "config.json"
    save_config({"pomodoro": {"study_minutes": 50}}, cfg_path)
    loaded = load_config(cfg_path)
    assert loaded["pomodoro"] == {"study_minutes": 50, "rest_minutes": 5}


def test_merge_defaults_does_not_mutate_defaults():
    defaults = {"pomodoro": {"study_minutes": 25, "rest_minutes": 5}}
    merge_defaults({"pomodoro": {"rest_minutes": 10}}, defaults)
    assert defaults["pomodoro"]["rest_minutes"] == 5


# ------------------------------------------------------------------
# pomodoro_seconds
# ------------------------------------------------------------------

def test_pomodoro_seconds_defaults():
    assert pomodoro_seconds(get_default_config()) == (1500, 300)


def test_pomodoro_seconds_custom():
    assert pomodoro_seconds({"pomodoro": {"study_minutes": 50, "rest_minutes": 10}}) == (3000, 600)


def test_pomodoro_seconds_missing_section():
    assert pomodoro_seconds({}) == (1500, 300)


def test_pomodoro_seconds_null_section():
    assert pomodoro_seconds({"pomodoro": None}) == (1500, 300)


@pytest.mark.parametrize("study, rest", [(0, 0), (-10, 5), ("25", 5), (25, None), (0.001, 5)])
def test_pomodoro_seconds_invalid_lengths_use_defaults(study, rest):
    study_seconds, rest_seconds = pomodoro_seconds(
        {"pomodoro": {"study_minutes": study, "rest_minutes": rest}}
    )
    assert study_seconds == 1500
    assert rest_seconds == 300


def test_load_config_with_null_pomodoro_still_starts(tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(json.dumps({"pomodoro": None}), encoding="utf-8")
    assert pomodoro_seconds(load_config(cfg_path)) == (1500, 300)
