from __future__ import annotations

"""Utility functions for loading and saving user settings.

The settings are stored as a list of dictionaries to preserve order.
Each dictionary contains ``key``, ``value`` and ``type`` entries.
"""

from dataclasses import dataclass
import json
import logging
from typing import Any, List, Dict

from core import DATA_DIR, DEFAULT_NOTIFICATION_TIME, DEFAULT_REST_DURATION, REST_DURATIONS

# Path to the JSON file where settings are persisted.
SETTINGS_PATH = DATA_DIR / "settings.json"

# Default settings to initialize the file on first run.
DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "rest_timer_duration", "value": DEFAULT_REST_DURATION, "type": "choice"},
    {"key": "notifications_enabled", "value": False, "type": "bool"},
    {"key": "notification_time", "value": DEFAULT_NOTIFICATION_TIME, "type": "time"},
    {"key": "sound_on", "value": True, "type": "bool"},
]

# Internal cache so settings are only read from disk once.
_settings_cache: List[Dict[str, Any]] | None = None


def load_settings() -> List[Dict[str, Any]]:
    """Load settings from :data:`SETTINGS_PATH` or create defaults."""
    if SETTINGS_PATH.exists():
        try:
            with SETTINGS_PATH.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
                if isinstance(data, list):
                    return data
        except (OSError, ValueError):
            logging.warning("Unreadable settings file %s, using defaults", SETTINGS_PATH)
    defaults = [dict(item) for item in DEFAULT_SETTINGS]
    save_settings(defaults)
    return defaults


def save_settings(settings: List[Dict[str, Any]]) -> None:
    """Persist ``settings`` to :data:`SETTINGS_PATH`."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with SETTINGS_PATH.open("w", encoding="utf-8") as fh:
        json.dump(settings, fh)


def get_settings() -> List[Dict[str, Any]]:
    """Return the cached settings list, loading from disk if needed."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def reset_cache() -> None:
    """Forget cached settings so the next access rereads the file."""
    global _settings_cache
    _settings_cache = None


def get_value(key: str) -> Any:
    """Fetch the value associated with ``key``.

    Keys missing from an older settings file fall back to their default.
    """
    for item in get_settings():
        if item.get("key") == key:
            return item.get("value")
    for item in DEFAULT_SETTINGS:
        if item["key"] == key:
            return item["value"]
    return None


def set_value(key: str, value: Any) -> None:
    """Update ``key`` with ``value`` and persist the change."""
    settings = get_settings()
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings)


def parse_time(text: str) -> tuple[int, int]:
    """Return ``(hour, minute)`` for an ``"HH:MM"`` string."""
    hour, _, minute = str(text).partition(":")
    h, m = int(hour), int(minute or 0)
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"Invalid time '{text}'")
    return h, m


@dataclass(frozen=True)
class AppConfig:
    """Settings snapshot handed to the state machines at construction."""

    rest_duration: int = DEFAULT_REST_DURATION
    notifications_enabled: bool = False
    notification_hour: int = 18
    notification_minute: int = 0
    sound_on: bool = True


def load_config() -> AppConfig:
    """Build an :class:`AppConfig` from the persisted settings."""
    rest = get_value("rest_timer_duration")
    if rest not in REST_DURATIONS:
        rest = DEFAULT_REST_DURATION
    try:
        hour, minute = parse_time(get_value("notification_time"))
    except (TypeError, ValueError):
        hour, minute = parse_time(DEFAULT_NOTIFICATION_TIME)
    return AppConfig(
        rest_duration=rest,
        notifications_enabled=bool(get_value("notifications_enabled")),
        notification_hour=hour,
        notification_minute=minute,
        sound_on=bool(get_value("sound_on")),
    )
