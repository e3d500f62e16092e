"""Countdown shown between sets.

``end_timestamp`` is the source of truth while the timer runs.  The one second
tick only refreshes ``remaining`` for display, and the same recompute runs when
the app returns to the foreground, so time spent suspended is accounted for.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from kivy.clock import Clock
from kivy.event import EventDispatcher
from kivy.properties import BooleanProperty, NumericProperty

from backend.settings import AppConfig
from backend.utils import format_countdown
from core import (
    DEFAULT_REST_DURATION,
    REST_DURATIONS,
    REST_EXTEND_STEP,
    REST_TIMER_NOTIFICATION_ID,
)

NOTIFICATION_TITLE = "Rest is over"
NOTIFICATION_BODY = "Time for the next set"


class RestTimer(EventDispatcher):
    """Single countdown with start, extend, stop and finish transitions.

    Observers bind to the Kivy properties for display and to the
    ``on_finished`` event, which fires once per countdown that reaches zero.
    ``remaining`` still reads ``0`` while ``on_finished`` handlers run and is
    reset to ``selected_duration`` right after.

    :param scheduler: object with ``schedule``/``cancel`` like
        :class:`backend.notifications.NotificationScheduler`.
    :param alert: object with a ``timer_finished()`` method playing the
        foreground sound and haptic pattern.
    """

    remaining = NumericProperty(DEFAULT_REST_DURATION)
    selected_duration = NumericProperty(DEFAULT_REST_DURATION)
    is_running = BooleanProperty(False)
    end_timestamp = NumericProperty(None, allownone=True)

    __events__ = ("on_finished",)

    def __init__(
        self,
        config: AppConfig | None = None,
        scheduler=None,
        alert=None,
        clock=None,
        time_func: Callable[[], float] = time.time,
    ):
        super().__init__()
        config = config or AppConfig()
        duration = config.rest_duration
        if duration not in REST_DURATIONS:
            duration = DEFAULT_REST_DURATION
        self.selected_duration = duration
        self.remaining = duration
        self.scheduler = scheduler
        self.alert = alert
        self._clock = clock or Clock
        self._time = time_func
        self._tick_event = None

    def on_finished(self, *args):
        pass

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def progress(self) -> float:
        if self.selected_duration <= 0:
            return 0.0
        return min(1.0, self.remaining / self.selected_duration)

    @property
    def formatted(self) -> str:
        return format_countdown(self.remaining)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def select_duration(self, duration: int) -> bool:
        """Pick one of :data:`core.REST_DURATIONS`; ignored while running."""
        if duration not in REST_DURATIONS:
            raise ValueError(f"Unsupported rest duration: {duration}")
        if self.is_running:
            return False
        self.selected_duration = duration
        self.remaining = duration
        return True

    def start(self) -> bool:
        if self.is_running:
            return False
        self.end_timestamp = self._time() + self.remaining
        self.is_running = True
        self._schedule_notification()
        self._tick_event = self._clock.schedule_interval(self.tick, 1)
        return True

    def extend(self, seconds: int = REST_EXTEND_STEP) -> bool:
        """Push the end of a running countdown back by ``seconds``."""
        if not self.is_running:
            return False
        self.end_timestamp += seconds
        self.remaining += seconds
        self._schedule_notification()
        return True

    def tick(self, dt=None) -> None:
        if self.is_running:
            self._recompute()

    def refresh_on_foreground(self) -> None:
        """Recompute ``remaining`` after the app was suspended."""
        if self.is_running:
            self._recompute()

    def stop(self) -> None:
        """Cancel the countdown and return to the selected duration."""
        self._cancel_notification()
        self._reset()

    skip = stop

    def close(self) -> None:
        """Overlay dismissed; nothing may fire after this."""
        self.stop()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _recompute(self) -> None:
        left = self.end_timestamp - self._time()
        self.remaining = max(0, math.ceil(left))
        if self.remaining <= 0:
            self._finish()

    def _finish(self) -> None:
        self._cancel_notification()
        self.is_running = False
        self.end_timestamp = None
        self._cancel_tick()
        logging.info("Rest timer finished after %s seconds", self.selected_duration)
        if self.alert is not None:
            self.alert.timer_finished()
        self.dispatch("on_finished")
        self.remaining = self.selected_duration

    def _reset(self) -> None:
        self._cancel_tick()
        self.is_running = False
        self.end_timestamp = None
        self.remaining = self.selected_duration

    def _cancel_tick(self) -> None:
        if self._tick_event is not None:
            self._tick_event.cancel()
            self._tick_event = None

    def _schedule_notification(self) -> None:
        if self.scheduler is None:
            return
        self.scheduler.schedule(
            REST_TIMER_NOTIFICATION_ID,
            self.end_timestamp,
            NOTIFICATION_TITLE,
            NOTIFICATION_BODY,
        )

    def _cancel_notification(self) -> None:
        if self.scheduler is not None:
            self.scheduler.cancel(REST_TIMER_NOTIFICATION_ID)
