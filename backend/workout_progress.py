"""Set, weight and effort tracking for one workout day.

Every mutation is followed by a snapshot write to the key-value store, so an
interrupted workout resumes exactly where it was left.  Snapshot keys are
scoped per day as ``<purpose>_<day>`` which keeps trackers for different days
apart.  The snapshot is only a recovery aid: once a workout is finished the
history store holds the permanent records and the snapshot is cleared.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Iterable

from kivy.clock import Clock
from kivy.event import EventDispatcher
from kivy.properties import BooleanProperty, NumericProperty

from backend.catalog import (
    EffortLevel,
    ExerciseCategory,
    ExerciseTemplate,
    WorkoutDay,
    categories_for,
)
from backend.history import CompletedExerciseRecord, WorkoutSessionRecord
from backend.utils import format_clock

SNAPSHOT_PURPOSES = ("is_started", "start_time", "completed_sets", "weights", "efforts")


def has_started_snapshot(store, day_id: str) -> bool:
    """Return ``True`` if ``store`` holds a started workout for ``day_id``."""
    return bool(store.get(f"is_started_{day_id}", False))


class WorkoutProgress(EventDispatcher):
    """In-progress workout for a single :class:`WorkoutDay`.

    Events:

    ``on_change``
        Fired after any mutation, resume or reset.
    ``on_rest_prompt``
        Fired with the exercise name after a set that is not the
        exercise's last one; the screen shows the rest timer in response.

    Mutators return ``False`` when their precondition does not hold and
    leave the state untouched.
    """

    is_started = BooleanProperty(False)
    start_timestamp = NumericProperty(None, allownone=True)
    elapsed = NumericProperty(0)

    __events__ = ("on_change", "on_rest_prompt")

    def __init__(
        self,
        day,
        store,
        history=None,
        categories: Iterable[ExerciseCategory] | None = None,
        clock=None,
        time_func: Callable[[], float] = time.time,
    ):
        super().__init__()
        self.day_id = day.value if isinstance(day, WorkoutDay) else str(day)
        if categories is None:
            categories = categories_for(self.day_id)
        self.categories = tuple(categories)
        self.store = store
        self.history = history
        self._clock = clock or Clock
        self._time = time_func
        self._tick_event = None

        self._templates: dict[str, ExerciseTemplate] = {
            ex.name: ex for cat in self.categories for ex in cat.exercises
        }
        self.completed_sets: dict[str, int] = {}
        self.weights: dict[str, float] = {}
        self.efforts: dict[str, EffortLevel] = {}
        self.last_weights: dict[str, float] = {}
        if history is not None:
            self.prefill_weights(history)

    def on_change(self, *args):
        pass

    def on_rest_prompt(self, exercise_name):
        pass

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def exercises(self) -> list[ExerciseTemplate]:
        return list(self._templates.values())

    @property
    def total_exercises(self) -> int:
        return sum(len(cat.exercises) for cat in self.categories)

    @property
    def completed_exercises_count(self) -> int:
        return sum(1 for name in self._templates if self.is_exercise_complete(name))

    @property
    def progress_ratio(self) -> float:
        total = self.total_exercises
        if total == 0:
            return 0.0
        return self.completed_exercises_count / total

    @property
    def formatted_elapsed(self) -> str:
        return format_clock(self.elapsed)

    def template(self, name: str) -> ExerciseTemplate:
        try:
            return self._templates[name]
        except KeyError:
            raise KeyError(f"Exercise '{name}' is not part of {self.day_id}") from None

    def completed(self, name: str) -> int:
        self.template(name)
        return self.completed_sets.get(name, 0)

    def is_exercise_complete(self, name: str) -> bool:
        return self.completed(name) >= self.template(name).sets

    def weight_for(self, name: str) -> float:
        """Weight to display: recorded, last used, catalog default, or 0."""
        if name in self.weights:
            return self.weights[name]
        if name in self.last_weights:
            return self.last_weights[name]
        default = self.template(name).default_weight
        return float(default) if default is not None else 0.0

    def prefill_weights(self, history) -> dict[str, float]:
        """Load the most recent non-zero weight per exercise of this day.

        These only seed the displayed weight; nothing is recorded until the
        user sets a weight.
        """
        self.last_weights = {
            name: weight
            for name, weight in history.last_weights(self.day_id).items()
            if name in self._templates
        }
        return self.last_weights

    def current_elapsed(self) -> float:
        if not self.is_started or self.start_timestamp is None:
            return 0.0
        return max(0.0, self._time() - self.start_timestamp)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self) -> bool:
        if self.is_started:
            return False
        self.completed_sets = {}
        self.weights = {}
        self.efforts = {}
        self.start_timestamp = self._time()
        self.is_started = True
        self.elapsed = 0
        self.persist()
        self._start_tick()
        logging.info("Started workout %s", self.day_id)
        self.dispatch("on_change")
        return True

    def complete_set(self, name: str) -> bool:
        template = self.template(name)
        current = self.completed_sets.get(name, 0)
        if not self.is_started or current >= template.sets:
            return False
        self.completed_sets[name] = current + 1
        self.persist()
        self.dispatch("on_change")
        if current + 1 < template.sets:
            self.dispatch("on_rest_prompt", name)
        return True

    def decrement_set(self, name: str) -> bool:
        self.template(name)
        current = self.completed_sets.get(name, 0)
        if current <= 0:
            return False
        self.completed_sets[name] = current - 1
        self.persist()
        self.dispatch("on_change")
        return True

    def set_weight(self, name: str, value: float) -> bool:
        self.template(name)
        if value < 0:
            raise ValueError("Weight cannot be negative")
        if not self.is_started:
            return False
        self.weights[name] = float(value)
        self.persist()
        self.dispatch("on_change")
        return True

    def set_effort(self, name: str, level) -> bool:
        """Record ``level`` for ``name``; ``None`` clears the rating."""
        self.template(name)
        level = EffortLevel(level) if level is not None else None
        if not self.is_started:
            return False
        if level is None:
            self.efforts.pop(name, None)
        else:
            self.efforts[name] = level
        self.persist()
        self.dispatch("on_change")
        return True

    def tick(self, dt=None) -> None:
        self.elapsed = self.current_elapsed()

    def finish(self, *, confirmed: bool) -> WorkoutSessionRecord | None:
        """Write the workout to history and reset the tracker.

        Nothing happens unless the user confirmed and the workout was
        started.  Returns the stored session record.
        """
        if not confirmed or not self.is_started:
            return None
        now = self._time()
        duration = max(0.0, now - self.start_timestamp)
        date = datetime.fromtimestamp(now)
        total = self.total_exercises
        done = self.completed_exercises_count
        record = WorkoutSessionRecord(
            date=date,
            workout_day=self.day_id,
            duration=duration,
            is_completed=done == total,
            total_exercises=total,
            completed_exercises=done,
        )
        if self.history is not None:
            exercises = [
                CompletedExerciseRecord(
                    exercise_name=ex.name,
                    sets=ex.sets,
                    reps=ex.reps,
                    weight=self.weight_for(ex.name),
                    completed_sets=self.completed_sets.get(ex.name, 0),
                    date=date,
                    workout_day=self.day_id,
                    effort_level=self.efforts.get(ex.name),
                )
                for ex in self.exercises
            ]
            # A failed write leaves the tracker started so finishing can be retried
            record, _saved = self.history.add_workout(record, exercises)
            self.prefill_weights(self.history)
        logging.info(
            "Finished workout %s: %s/%s exercises in %s",
            self.day_id,
            done,
            total,
            format_clock(duration),
        )
        self.clear_snapshot()
        self._reset()
        return record

    def cancel(self) -> None:
        """Drop the in-progress workout without writing history."""
        self.clear_snapshot()
        self._reset()

    # ------------------------------------------------------------------
    # Snapshot handling
    # ------------------------------------------------------------------
    def _key(self, purpose: str) -> str:
        return f"{purpose}_{self.day_id}"

    def persist(self) -> None:
        """Write the current state to the snapshot store.

        Failures are logged; the in-memory state stays authoritative.
        """
        try:
            self.store.set(self._key("is_started"), bool(self.is_started))
            self.store.set(self._key("start_time"), self.start_timestamp)
            self.store.set(self._key("completed_sets"), dict(self.completed_sets))
            self.store.set(self._key("weights"), dict(self.weights))
            self.store.set(
                self._key("efforts"),
                {name: int(level) for name, level in self.efforts.items()},
            )
        except (OSError, TypeError, ValueError):
            logging.exception("Failed to snapshot workout %s", self.day_id)

    def clear_snapshot(self) -> None:
        try:
            for purpose in SNAPSHOT_PURPOSES:
                self.store.remove(self._key(purpose))
        except OSError:
            logging.exception("Failed to clear snapshot for %s", self.day_id)

    def has_snapshot(self) -> bool:
        return has_started_snapshot(self.store, self.day_id)

    def resume(self) -> bool:
        """Reload an interrupted workout from the snapshot.

        A missing or unreadable snapshot leaves a fresh, unstarted tracker.
        Returns ``True`` when a started workout was restored.
        """
        try:
            if not self.store.get(self._key("is_started"), False):
                self._reset()
                return False
            start = float(self.store.get(self._key("start_time")))
            completed = {
                str(name): int(count)
                for name, count in (self.store.get(self._key("completed_sets")) or {}).items()
            }
            weights = {
                str(name): float(value)
                for name, value in (self.store.get(self._key("weights")) or {}).items()
            }
            efforts = {
                str(name): EffortLevel(int(value))
                for name, value in (self.store.get(self._key("efforts")) or {}).items()
            }
        except (AttributeError, TypeError, ValueError):
            logging.warning("Unreadable snapshot for %s, starting fresh", self.day_id)
            self._reset()
            return False

        self.completed_sets = {
            name: min(max(0, count), self._templates[name].sets)
            for name, count in completed.items()
            if name in self._templates
        }
        self.weights = {
            name: value
            for name, value in weights.items()
            if name in self._templates and value >= 0
        }
        self.efforts = {
            name: level for name, level in efforts.items() if name in self._templates
        }
        self.start_timestamp = start
        self.is_started = True
        self.elapsed = self.current_elapsed()
        self._start_tick()
        logging.info("Resumed workout %s", self.day_id)
        self.dispatch("on_change")
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _start_tick(self) -> None:
        self._stop_tick()
        self._tick_event = self._clock.schedule_interval(self.tick, 1)

    def _stop_tick(self) -> None:
        if self._tick_event is not None:
            self._tick_event.cancel()
            self._tick_event = None

    def _reset(self) -> None:
        self._stop_tick()
        self.is_started = False
        self.start_timestamp = None
        self.elapsed = 0
        self.completed_sets = {}
        self.weights = {}
        self.efforts = {}
        self.dispatch("on_change")
