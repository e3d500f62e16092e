"""Backend state machines and persistence for FitTrack."""

from __future__ import annotations

from core import (
    DEFAULT_DB_PATH,
    DEFAULT_REST_DURATION,
    DEFAULT_SNAPSHOT_PATH,
    REST_DURATIONS,
)

__all__ = [
    "DEFAULT_DB_PATH",
    "DEFAULT_REST_DURATION",
    "DEFAULT_SNAPSHOT_PATH",
    "REST_DURATIONS",
]
