"""Configuration loader for FocaPlus.

Handles loading, saving, and default creation of config.json.
Resolves platform-appropriate data directories:
  - macOS:   ~/Library/Application Support/FocaPlus
  - Windows: %APPDATA%/FocaPlus
  - Other:   ~/.focaplus
"""

import copy
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def get_data_directory() -> Path:
    """Return the platform-appropriate data directory for FocaPlus."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    else:
        base = Path.home()
        return base / ".focaplus"
    return base / "FocaPlus"


def get_default_config() -> dict[str, Any]:
    """Return the default configuration dictionary."""
    data_dir = get_data_directory()
    return {
        "api_base_url": "http://localhost:8080/api/v1",
        "request_timeout_seconds": 10,
        "pomodoro": {
            "study_minutes": 25,
            "rest_minutes": 5,
        },
        "default_activity_type": "Estudar Conteúdo",
        "dashboard_port": 5555,
        "database_path": str(data_dir / "focaplus.db"),
    }


def get_default_config_path() -> Path:
    """Return the default path for config.json."""
    return get_data_directory() / "config.json"


def merge_defaults(data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Return *data* with any keys missing from it filled in from *defaults*.

    Nested dictionaries are merged one level at a time.
    """
    merged = copy.deepcopy(defaults)
    for key, value in data.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_defaults(value, merged[key])
        else:
            merged[key] = value
    return merged


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from a JSON file.

    If *path* is ``None``, the platform default location is used.
    When the file does not exist, a default configuration is created,
    written to disk, and returned.  If the file exists but is invalid
    JSON, the error is logged and defaults are returned.  Keys missing
    from the file take their default values.
    """
    config_path = Path(path) if path is not None else get_default_config_path()

    if not config_path.exists():
        logger.info("Config file not found at %s, creating defaults.", config_path)
        defaults = get_default_config()
        save_config(defaults, config_path)
        return defaults

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError("Top-level JSON value must be an object")
        return merge_defaults(data, get_default_config())
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        logger.error("Failed to load config from %s: %s; using defaults.", config_path, exc)
        return get_default_config()


def save_config(config: dict[str, Any], path: str | Path | None = None) -> None:
    """Write *config* to a JSON file.

    If *path* is ``None``, the platform default location is used.
    Parent directories are created automatically.
    """
    config_path = Path(path) if path is not None else get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)
        fh.write("\n")


def _positive_minutes(section: dict[str, Any], key: str, default: int) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value * 60 < 1:
        logger.warning("Invalid pomodoro.%s %r; using %d.", key, value, default)
        return default
    return value


def pomodoro_seconds(config: dict[str, Any]) -> tuple[int, int]:
    """Return ``(study_seconds, rest_seconds)`` from the pomodoro section.

    A missing or malformed section, or a non-positive length, falls back to
    the 25/5 minute defaults.
    """
    pomodoro = config.get("pomodoro")
    if not isinstance(pomodoro, dict):
        pomodoro = {}
    study = int(_positive_minutes(pomodoro, "study_minutes", 25) * 60)
    rest = int(_positive_minutes(pomodoro, "rest_minutes", 5) * 60)
    return study, rest
