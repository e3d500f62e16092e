"""Screens used during an active workout session."""

from .rest_timer_overlay import RestTimerOverlay
from .workout_screen import ExerciseRow, WorkoutScreen

__all__ = [
    "ExerciseRow",
    "RestTimerOverlay",
    "WorkoutScreen",
]
