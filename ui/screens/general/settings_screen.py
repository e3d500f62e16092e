"""Screen for modifying app settings."""

from kivymd.uix.screen import MDScreen
from kivymd.app import MDApp
from kivymd.toast import toast
from kivy.properties import ListProperty, StringProperty
import logging

from backend import settings as app_settings
from core import REST_DURATIONS


class SettingsScreen(MDScreen):
    """Display and persist user-configurable settings."""

    return_to = StringProperty("home")
    """Name of the screen to return to when leaving settings."""
    rest_choices = ListProperty([str(d) for d in REST_DURATIONS])

    def on_pre_enter(self, *args) -> None:
        """Populate controls from stored settings."""
        self.ids.notifications_toggle.active = bool(
            app_settings.get_value("notifications_enabled")
        )
        self.ids.notification_time.text = str(app_settings.get_value("notification_time"))
        self.ids.rest_duration.text = str(app_settings.get_value("rest_timer_duration"))
        sound_on = app_settings.get_value("sound_on")
        self.ids.sound_toggle.active = True if sound_on is None else bool(sound_on)
        return super().on_pre_enter(*args)

    def on_notifications_toggle(self, switch, value: bool) -> None:
        app_settings.set_value("notifications_enabled", bool(value))
        MDApp.get_running_app().reload_config()

    def on_notification_time(self, text: str) -> None:
        """Store a new reminder time typed as ``HH:MM``."""
        try:
            hour, minute = app_settings.parse_time(text)
        except ValueError:
            logging.warning("Rejected reminder time %r", text)
            toast("Use the HH:MM format")
            return
        app_settings.set_value("notification_time", f"{hour:02d}:{minute:02d}")
        MDApp.get_running_app().reload_config()

    def on_rest_duration(self, value: str) -> None:
        app_settings.set_value("rest_timer_duration", int(value))
        MDApp.get_running_app().reload_config()

    def on_sound_toggle(self, switch, value: bool) -> None:
        """Handle sound enable/disable toggling."""
        app_settings.set_value("sound_on", bool(value))
        MDApp.get_running_app().reload_config()
