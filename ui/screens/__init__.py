"""UI screen modules for FitTrack."""

from .session import (
    ExerciseRow,
    RestTimerOverlay,
    WorkoutScreen,
)
from .general import (
    HistoryScreen,
    HomeScreen,
    ProgressScreen,
    SettingsScreen,
)

__all__ = [
    "ExerciseRow",
    "HistoryScreen",
    "HomeScreen",
    "ProgressScreen",
    "RestTimerOverlay",
    "SettingsScreen",
    "WorkoutScreen",
]
