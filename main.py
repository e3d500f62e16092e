from kivymd.app import MDApp
from kivy.lang import Builder
from kivy.core.window import Window
from kivymd.toast import toast
from pathlib import Path
import logging
import os
import sys

from assets.sounds import AlertFeedback, SoundSystem
from backend import settings as app_settings
from backend.catalog import WorkoutDay
from backend.history import HistoryStore
from backend.notifications import (
    NotificationScheduler,
    cancel_weekly_reminders,
    schedule_weekly_reminders,
)
from backend.snapshot_store import SnapshotStore
from backend.workout_progress import WorkoutProgress, has_started_snapshot
from core import DEFAULT_DB_PATH, DEFAULT_SNAPSHOT_PATH
from ui.screens import (
    HistoryScreen,
    HomeScreen,
    ProgressScreen,
    RestTimerOverlay,
    SettingsScreen,
    WorkoutScreen,
)


if os.name == "nt" or sys.platform.startswith("win"):
    Window.size = (280, 280 * (20 / 9))


class FitTrackApp(MDApp):
    """Application object owning the stores and the per-day trackers."""

    history: HistoryStore | None = None
    snapshots: SnapshotStore | None = None
    notifications: NotificationScheduler | None = None
    sound: SoundSystem | None = None
    alert: AlertFeedback | None = None
    config_values: app_settings.AppConfig | None = None
    rest_overlay: RestTimerOverlay | None = None

    def build(self):
        self.theme_cls.primary_palette = "Orange"
        self.config_values = app_settings.load_config()
        self.history = HistoryStore(DEFAULT_DB_PATH)
        self.snapshots = SnapshotStore(DEFAULT_SNAPSHOT_PATH)
        self.sound = SoundSystem(enabled=self.config_values.sound_on)
        self.alert = AlertFeedback(self.sound)
        self.notifications = NotificationScheduler(on_deliver=self._on_notification)
        self.trackers: dict[str, WorkoutProgress] = {}
        self.apply_reminders()
        return Builder.load_file(str(Path(__file__).with_name("main.kv")))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def reload_config(self) -> None:
        """Re-read settings after the settings screen changed them."""
        self.config_values = app_settings.load_config()
        self.sound.set_enabled(self.config_values.sound_on)
        self.apply_reminders()

    def apply_reminders(self) -> None:
        cfg = self.config_values
        if cfg.notifications_enabled:
            schedule_weekly_reminders(
                self.notifications, cfg.notification_hour, cfg.notification_minute
            )
        else:
            cancel_weekly_reminders(self.notifications)

    def _on_notification(self, notification) -> None:
        toast(notification.title)

    # ------------------------------------------------------------------
    # Workouts
    # ------------------------------------------------------------------
    def get_tracker(self, day: WorkoutDay) -> WorkoutProgress:
        """Return the tracker for ``day``, resuming any saved snapshot."""
        day = WorkoutDay(day)
        tracker = self.trackers.get(day.value)
        if tracker is None:
            tracker = WorkoutProgress(day, self.snapshots, history=self.history)
            tracker.resume()
            self.trackers[day.value] = tracker
        return tracker

    def interrupted_days(self) -> list[WorkoutDay]:
        """Days whose snapshot holds a started workout."""
        return [day for day in WorkoutDay if has_started_snapshot(self.snapshots, day.value)]

    def open_workout(self, day: WorkoutDay) -> None:
        screen = self.root.get_screen("workout")
        screen.load_day(WorkoutDay(day))
        self.root.current = "workout"

    def show_rest_timer(self, *args) -> None:
        if self.rest_overlay is not None:
            return
        self.rest_overlay = RestTimerOverlay()
        self.rest_overlay.bind(on_dismiss=self._rest_overlay_closed)
        self.rest_overlay.open()

    def _rest_overlay_closed(self, *args) -> None:
        self.rest_overlay = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def on_pause(self):
        for tracker in self.trackers.values():
            if tracker.is_started:
                tracker.persist()
        logging.info("App paused, workout snapshots written")
        return True

    def on_resume(self):
        if self.rest_overlay is not None:
            self.rest_overlay.refresh()
        for tracker in self.trackers.values():
            tracker.tick()


if __name__ == "__main__":
    FitTrackApp().run()
