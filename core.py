"""Shared constants used by the backend modules and the screens."""

from __future__ import annotations

from pathlib import Path

# Preset rest durations offered by the rest timer overlay, in seconds
REST_DURATIONS = (30, 60, 90, 120, 180)

# Default rest duration between sets in seconds
DEFAULT_REST_DURATION = 90

# Seconds added by the "+30" button on the rest timer
REST_EXTEND_STEP = 30

# Identifier of the single pending notification owned by the rest timer
REST_TIMER_NOTIFICATION_ID = "rest-timer"

# Default reminder time ("HH:MM") for the weekly workout notifications
DEFAULT_NOTIFICATION_TIME = "18:00"

DATA_DIR = Path(__file__).resolve().parent / "data"

# SQLite database holding finished sessions and completed exercises
DEFAULT_DB_PATH = DATA_DIR / "fittrack.db"

# Key-value snapshot of in-progress workouts
DEFAULT_SNAPSHOT_PATH = DATA_DIR / "workout_snapshot.json"
