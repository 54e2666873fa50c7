"""Loading and saving user settings, and the local profile provider.

The settings are stored as a list of dictionaries to preserve order.
Each dictionary contains ``key``, ``value`` and ``type`` entries.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List

from lifttrack import DATA_DIR, DEFAULT_REST_DURATION
from lifttrack.exceptions import ProfileError
from lifttrack.models import User, UserProfile
from lifttrack.ports import ProfilePort

# Path to the JSON file where settings are persisted.
SETTINGS_PATH = DATA_DIR / "settings.json"

# Default settings to initialize the file on first run.
DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "units", "value": "lb", "type": "choice"},
    {"key": "default_rest_timer", "value": DEFAULT_REST_DURATION, "type": "int"},
    {"key": "display_name", "value": "Lifter", "type": "str"},
    {"key": "email", "value": "", "type": "str"},
]

PROFILE_KEYS = ("display_name", "email", "units", "default_rest_timer")

# Internal cache so each settings file is only read from disk once.
_settings_cache: Dict[Path, List[Dict[str, Any]]] = {}


def load_settings(path: Path = SETTINGS_PATH) -> List[Dict[str, Any]]:
    """Load settings from ``path`` or create defaults."""
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            if isinstance(data, list):
                return data
            logging.warning("Ignoring malformed settings file %s", path)
        except (OSError, ValueError):
            logging.exception("Could not read settings from %s", path)
    defaults = [dict(item) for item in DEFAULT_SETTINGS]
    save_settings(defaults, path)
    return defaults


def save_settings(settings: List[Dict[str, Any]], path: Path = SETTINGS_PATH) -> None:
    """Persist ``settings`` to ``path``."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(settings, fh)
    except OSError as exc:
        logging.exception("Could not write settings to %s", path)
        raise ProfileError(f"Could not save settings: {exc}") from exc


def get_settings(path: Path = SETTINGS_PATH) -> List[Dict[str, Any]]:
    """Return the cached settings list, loading from disk if needed."""
    if path not in _settings_cache:
        _settings_cache[path] = load_settings(path)
    return _settings_cache[path]


def clear_cache() -> None:
    _settings_cache.clear()


def get_value(key: str, default: Any = None, path: Path = SETTINGS_PATH) -> Any:
    """Fetch the value associated with ``key``."""
    for item in get_settings(path):
        if item.get("key") == key:
            return item.get("value")
    return default


def set_value(key: str, value: Any, path: Path = SETTINGS_PATH) -> None:
    """Update ``key`` with ``value`` and persist the change."""
    settings = get_settings(path)
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings, path)


class LocalProfile(ProfilePort):
    """Single-user profile kept in the settings file.

    A user id is generated on first use and stored alongside the other
    settings so saved sessions stay attributed to the same user.
    """

    def __init__(self, path: Path = SETTINGS_PATH):
        self.path = Path(path)

    def current_user(self) -> User | None:
        user_id = get_value("user_id", path=self.path)
        if not user_id:
            user_id = uuid.uuid4().hex
            set_value("user_id", user_id, self.path)
        return User(
            id=user_id,
            display_name=get_value("display_name", "Lifter", self.path),
            email=get_value("email", "", self.path),
        )

    def user_profile(self) -> UserProfile | None:
        values = {
            key: get_value(key, path=self.path)
            for key in PROFILE_KEYS
        }
        return UserProfile.model_validate(
            {k: v for k, v in values.items() if v is not None}
        )

    def update_profile(self, **fields) -> UserProfile:
        for key in fields:
            if key not in PROFILE_KEYS:
                raise KeyError(f"Unknown profile field '{key}'")
        # validate before writing anything
        profile = UserProfile.model_validate(
            {**self.user_profile().model_dump(), **fields}
        )
        for key, value in fields.items():
            set_value(key, value, self.path)
        return profile
