"""Screens not directly part of the workout session loop."""

from .history_screen import HistoryScreen
from .home_screen import HomeScreen
from .progress_screen import ProgressScreen
from .settings_screen import SettingsScreen

__all__ = [
    "HistoryScreen",
    "HomeScreen",
    "ProgressScreen",
    "SettingsScreen",
]
