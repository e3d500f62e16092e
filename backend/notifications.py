"""Local notification scheduling on top of the Kivy clock.

Each notification is identified by a string.  Scheduling under an identifier
that is already pending replaces the earlier request, so an identifier never
has more than one pending notification.  Scheduling and cancelling are fire
and forget: failures are logged and otherwise ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import partial
import logging
import time
from typing import Callable

from kivy.clock import Clock

# Weekday numbers used in the reminder identifiers (Sunday is 1).
REMINDER_WEEKDAYS = (2, 4, 6)
REMINDER_TITLE = "Workout time!"
REMINDER_BODY = "Don't forget today's workout"


@dataclass(frozen=True)
class Notification:
    identifier: str
    fire_time: float
    title: str
    body: str
    repeats_weekly: bool = False


class NotificationScheduler:
    """Keep at most one pending notification per identifier.

    ``on_deliver`` is called with the :class:`Notification` when it fires.
    Weekly notifications are re-armed one week later after delivery.
    """

    def __init__(
        self,
        on_deliver: Callable[[Notification], None] | None = None,
        clock=None,
        time_func: Callable[[], float] = time.time,
    ):
        self.on_deliver = on_deliver
        self._clock = clock or Clock
        self._time = time_func
        self._pending: dict[str, Notification] = {}
        self._events: dict[str, object] = {}

    def schedule(
        self,
        identifier: str,
        fire_time: float,
        title: str,
        body: str,
        repeats_weekly: bool = False,
    ) -> None:
        """Schedule a notification, replacing any pending one for ``identifier``."""
        self.cancel(identifier)
        note = Notification(identifier, fire_time, title, body, repeats_weekly)
        try:
            delay = max(0.0, fire_time - self._time())
            self._events[identifier] = self._clock.schedule_once(
                partial(self._deliver, identifier), delay
            )
        except Exception:
            logging.exception("Failed to schedule notification %s", identifier)
            return
        self._pending[identifier] = note

    def cancel(self, identifier: str) -> None:
        self._pending.pop(identifier, None)
        event = self._events.pop(identifier, None)
        if event is None:
            return
        try:
            event.cancel()
        except Exception:
            logging.exception("Failed to cancel notification %s", identifier)

    def cancel_all(self) -> None:
        for identifier in list(self._events):
            self.cancel(identifier)

    def pending(self) -> dict[str, Notification]:
        """Return a copy of the pending notifications keyed by identifier."""
        return dict(self._pending)

    def _next_weekly(self, note: Notification) -> float:
        """Next occurrence of ``note`` strictly after now.

        Weeks missed while the app was suspended are skipped rather than
        delivered one after another.
        """
        fire = datetime.fromtimestamp(note.fire_time)
        base = datetime.fromtimestamp(max(self._time(), note.fire_time))
        weekday = fire.isoweekday() % 7 + 1
        return next_weekly_fire(base, weekday, fire.hour, fire.minute).timestamp()

    def _deliver(self, identifier: str, dt) -> None:
        note = self._pending.pop(identifier, None)
        self._events.pop(identifier, None)
        if note is None:
            return
        if note.repeats_weekly:
            self.schedule(
                identifier, self._next_weekly(note), note.title, note.body, True
            )
        if self.on_deliver is not None:
            try:
                self.on_deliver(note)
            except Exception:
                logging.exception("Notification handler failed for %s", identifier)


def next_weekly_fire(now: datetime, weekday: int, hour: int, minute: int) -> datetime:
    """Return the next datetime after ``now`` on ``weekday`` at ``hour:minute``.

    ``weekday`` uses the Sunday=1 numbering of the reminder identifiers.
    """
    iso_weekday = 7 if weekday == 1 else weekday - 1
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    candidate += timedelta(days=(iso_weekday - now.isoweekday()) % 7)
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


def schedule_weekly_reminders(
    scheduler: NotificationScheduler,
    hour: int,
    minute: int,
    now: datetime | None = None,
) -> list[str]:
    """Replace any earlier reminders with the Mon/Wed/Fri ones."""
    now = now or datetime.now()
    cancel_weekly_reminders(scheduler)
    identifiers = []
    for weekday in REMINDER_WEEKDAYS:
        identifier = f"workout-{weekday}"
        fire = next_weekly_fire(now, weekday, hour, minute)
        scheduler.schedule(
            identifier,
            fire.timestamp(),
            REMINDER_TITLE,
            REMINDER_BODY,
            repeats_weekly=True,
        )
        identifiers.append(identifier)
    logging.info("Scheduled workout reminders at %02d:%02d", hour, minute)
    return identifiers


def cancel_weekly_reminders(scheduler: NotificationScheduler) -> None:
    for weekday in REMINDER_WEEKDAYS:
        scheduler.cancel(f"workout-{weekday}")
