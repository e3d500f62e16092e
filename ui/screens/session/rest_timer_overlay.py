from kivymd.app import MDApp
from kivy.uix.modalview import ModalView
from kivy.clock import Clock
from kivy.properties import (
    BooleanProperty,
    ListProperty,
    NumericProperty,
    ObjectProperty,
    StringProperty,
)

from backend.rest_timer import RestTimer
from core import REST_DURATIONS

# Delay between the countdown reaching zero and the overlay closing itself
AUTO_CLOSE_DELAY = 1.0


class RestTimerOverlay(ModalView):
    """Full-screen countdown shown between sets.

    The overlay owns a fresh :class:`RestTimer` for every presentation and
    closes the timer (cancelling its notification) when it is dismissed.
    Tapping outside only dismisses while the countdown is idle.
    """

    timer = ObjectProperty(None, allownone=True)
    timer_label = StringProperty("")
    progress = NumericProperty(1.0)
    is_running = BooleanProperty(False)
    selected_duration = NumericProperty(0)
    durations = ListProperty(list(REST_DURATIONS))

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        app = MDApp.get_running_app()
        self.timer = RestTimer(
            config=getattr(app, "config_values", None),
            scheduler=getattr(app, "notifications", None),
            alert=getattr(app, "alert", None),
        )
        self.timer.bind(
            remaining=self._sync,
            selected_duration=self._sync,
            is_running=self._sync,
            on_finished=self._on_finished,
        )
        self._close_event = None
        self._sync()

    def _sync(self, *args):
        timer = self.timer
        self.timer_label = timer.formatted
        self.progress = timer.progress
        self.is_running = timer.is_running
        self.selected_duration = timer.selected_duration
        self.auto_dismiss = not timer.is_running

    def select_duration(self, duration: int) -> None:
        self.timer.select_duration(int(duration))

    def start(self) -> None:
        self.timer.start()

    def extend(self) -> None:
        self.timer.extend()

    def skip(self) -> None:
        self.timer.skip()
        self.dismiss()

    def refresh(self) -> None:
        """Called when the app returns to the foreground."""
        self.timer.refresh_on_foreground()

    def _on_finished(self, *args):
        self._close_event = Clock.schedule_once(lambda dt: self.dismiss(), AUTO_CLOSE_DELAY)

    def on_dismiss(self):
        if self._close_event is not None:
            self._close_event.cancel()
            self._close_event = None
        self.timer.close()
