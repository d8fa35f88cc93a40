"""
User settings persistence: remember the mosaic radius and last-used
folders across application restarts.

Settings are stored in a JSON file in the user's config directory
(provided by ``config.config_dir()``).  A missing or corrupt file falls
back to defaults; an individual invalid value falls back to its own
default.  This module is Qt-free.

The on-disk format uses a versioned envelope::

    {
        "version": 1,
        "settings": {
            "radius": 5,
            "last_open_dir": "/home/user/Pictures",
            "last_save_dir": null
        }
    }
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from mosaic_editor.config import RADIUS_DEFAULT, RADIUS_MAX, RADIUS_MIN, config_dir

logger = logging.getLogger(__name__)

_SETTINGS_FILENAME = "settings.json"
_FORMAT_VERSION = 1


@dataclass
class Settings:
    radius: int = RADIUS_DEFAULT
    last_open_dir: str | None = None
    last_save_dir: str | None = None


def _settings_path() -> Path:
    return config_dir() / _SETTINGS_FILENAME


# =============================================================================
# Validation
# =============================================================================
def _radius_error(value: object) -> str | None:
    if not isinstance(value, int) or isinstance(value, bool):
        return f"radius must be an integer, got {value!r}"
    if not RADIUS_MIN <= value <= RADIUS_MAX:
        return f"radius must be in {RADIUS_MIN}..{RADIUS_MAX}, got {value}"
    return None


def _dir_error(key: str, value: object) -> str | None:
    if value is not None and (not isinstance(value, str) or not value.strip()):
        return f"{key} must be a non-empty string or null, got {value!r}"
    return None


def validate_settings(data: object) -> list[str]:
    """
    Validate a settings dict.

    Returns a list of error strings (empty means valid).  Unknown keys
    are ignored.
    """
    if not isinstance(data, dict):
        return ["Settings data must be a dict"]

    errors: list[str] = []
    if "radius" in data:
        err = _radius_error(data["radius"])
        if err:
            errors.append(err)
    for key in ("last_open_dir", "last_save_dir"):
        if key in data:
            err = _dir_error(key, data[key])
            if err:
                errors.append(err)
    return errors


# =============================================================================
# Load / Save
# =============================================================================
def load_settings() -> Settings:
    """
    Load settings from settings.json.

    Never raises: returns defaults when the file is missing, unreadable,
    or has the wrong envelope, and drops individual invalid values.
    """
    path = _settings_path()

    if not path.exists():
        logger.debug("No settings file at %s, using defaults", path)
        return Settings()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read settings (%s), using defaults", exc)
        return Settings()

    if not isinstance(raw, dict) or raw.get("version") != _FORMAT_VERSION:
        logger.warning("Settings version mismatch or invalid format, using defaults")
        return Settings()

    data = raw.get("settings")
    if not isinstance(data, dict):
        logger.warning("Settings file missing 'settings' dict, using defaults")
        return Settings()

    settings = Settings()
    if "radius" in data and _radius_error(data["radius"]) is None:
        settings.radius = data["radius"]
    for key in ("last_open_dir", "last_save_dir"):
        if key in data and _dir_error(key, data[key]) is None:
            setattr(settings, key, data[key])

    errors = validate_settings(data)
    if errors:
        logger.warning("Ignoring invalid settings:\n  %s", "\n  ".join(errors))

    logger.info("Loaded settings from %s", path)
    return settings


def save_settings(settings: Settings) -> None:
    """
    Write settings to settings.json in a versioned envelope.

    Raises ValueError if *settings* holds invalid values.  Write failures
    are logged, not raised: losing preferences must not block closing.
    """
    data = asdict(settings)
    errors = validate_settings(data)
    if errors:
        raise ValueError("Invalid settings:\n  " + "\n  ".join(errors))

    envelope = {"version": _FORMAT_VERSION, "settings": data}
    path = _settings_path()
    try:
        path.write_text(json.dumps(envelope, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Saved settings to %s", path)
    except OSError as exc:
        logger.error("Could not write settings to %s: %s", path, exc)
