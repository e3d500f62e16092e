"""Static three-day workout plan.

The catalog never changes at runtime.  Screens and the workout tracker look
exercises up by name, which is unique within a workout day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class WorkoutDay(str, Enum):
    """One of the three fixed training programs."""

    DAY1 = "day1"
    DAY2 = "day2"
    DAY3 = "day3"

    @property
    def title(self) -> str:
        return _DAY_INFO[self]["title"]

    @property
    def short_title(self) -> str:
        return _DAY_INFO[self]["short_title"]

    @property
    def weekday(self) -> int:
        """ISO weekday the workout is planned for (Monday is 1)."""
        return _DAY_INFO[self]["weekday"]

    @property
    def accent_color(self) -> str:
        return _DAY_INFO[self]["accent_color"]

    @classmethod
    def for_weekday(cls, iso_weekday: int) -> "WorkoutDay | None":
        """Return the day planned for ``iso_weekday`` or ``None`` on rest days."""
        for day in cls:
            if day.weekday == iso_weekday:
                return day
        return None


_DAY_INFO = {
    WorkoutDay.DAY1: {
        "title": "Chest • Shoulders • Triceps",
        "short_title": "Chest",
        "weekday": 1,
        "accent_color": "orange",
    },
    WorkoutDay.DAY2: {
        "title": "Back • Biceps",
        "short_title": "Back",
        "weekday": 3,
        "accent_color": "blue",
    },
    WorkoutDay.DAY3: {
        "title": "Legs • Abs",
        "short_title": "Legs",
        "weekday": 5,
        "accent_color": "green",
    },
}


class EffortLevel(IntEnum):
    """Coarse self-rating recorded after an exercise."""

    EASY = 1
    NORMAL = 2
    HARD = 3

    @property
    def title(self) -> str:
        return self.name.capitalize()

    @property
    def hint(self) -> str:
        return {
            EffortLevel.EASY: "Increase the weight",
            EffortLevel.NORMAL: "Working weight",
            EffortLevel.HARD: "At the limit",
        }[self]


@dataclass(frozen=True)
class ExerciseTemplate:
    """Catalog entry for one named exercise.

    Equality and hashing only consider ``name``.
    """

    name: str
    sets: int = field(compare=False)
    reps: int = field(compare=False)
    default_weight: float | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.sets <= 0 or self.reps <= 0:
            raise ValueError(f"{self.name}: sets and reps must be positive")

    @property
    def sets_reps_text(self) -> str:
        return f"{self.sets}×{self.reps}"


@dataclass(frozen=True)
class ExerciseCategory:
    name: str
    exercises: tuple[ExerciseTemplate, ...]


def _ex(name: str, sets: int, reps: int, weight: float | None = None) -> ExerciseTemplate:
    return ExerciseTemplate(name, sets, reps, weight)


WORKOUT_PLAN: dict[WorkoutDay, tuple[ExerciseCategory, ...]] = {
    WorkoutDay.DAY1: (
        ExerciseCategory("Warm-up", (_ex("Bike or elliptical", 1, 5),)),
        ExerciseCategory(
            "Core activation",
            (_ex("Dead bug", 3, 10), _ex("Plank", 3, 30)),
        ),
        ExerciseCategory(
            "Chest",
            (_ex("Pec deck fly", 3, 15, 25), _ex("Machine chest press", 4, 12, 10)),
        ),
        ExerciseCategory(
            "Shoulders",
            (
                _ex("Seated machine press", 3, 12, 20),
                _ex("Dumbbell lateral raise", 3, 15),
            ),
        ),
        ExerciseCategory(
            "Triceps",
            (_ex("Rope pushdown", 3, 15, 30), _ex("Assisted dips", 3, 10)),
        ),
        ExerciseCategory("Cardio", (_ex("Walking", 1, 20),)),
    ),
    WorkoutDay.DAY2: (
        ExerciseCategory("Warm-up", (_ex("Cardio", 1, 5),)),
        ExerciseCategory(
            "Core activation",
            (_ex("Dead bug", 3, 10), _ex("Side plank", 3, 20)),
        ),
        ExerciseCategory(
            "Back",
            (
                _ex("Wide-grip lat pulldown", 4, 12),
                _ex("Seated cable row", 4, 12),
                _ex("Hammer strength row", 3, 12),
            ),
        ),
        ExerciseCategory(
            "Biceps",
            (_ex("Biceps curl", 3, 12), _ex("Hammer curl", 3, 12)),
        ),
        ExerciseCategory("Rear delts", (_ex("Reverse pec deck", 3, 15),)),
        ExerciseCategory("Cardio", (_ex("Walking", 1, 20),)),
    ),
    WorkoutDay.DAY3: (
        ExerciseCategory("Warm-up", (_ex("Cardio", 1, 5),)),
        ExerciseCategory(
            "Activation",
            (_ex("Glute bridge", 3, 15), _ex("Dead bug", 3, 10)),
        ),
        ExerciseCategory(
            "Legs",
            (
                _ex("Leg press", 4, 12, 20),
                _ex("Leg extension", 3, 15, 25),
                _ex("Lying leg curl", 3, 15),
                _ex("Hip adduction", 3, 15, 30),
                _ex("Hip abduction", 3, 15, 35),
                _ex("Calf raise", 3, 20, 10),
            ),
        ),
        ExerciseCategory(
            "Abs",
            (_ex("Machine crunch", 3, 15, 30), _ex("Captain's chair leg raise", 3, 10)),
        ),
        ExerciseCategory("Cardio", (_ex("Walking", 1, 20),)),
    ),
}


def categories_for(day: WorkoutDay | str) -> tuple[ExerciseCategory, ...]:
    """Return the ordered exercise categories for ``day``."""
    return WORKOUT_PLAN[WorkoutDay(day)]


def exercises_for(day: WorkoutDay | str) -> list[ExerciseTemplate]:
    """Return every exercise of ``day`` in display order."""
    return [ex for cat in categories_for(day) for ex in cat.exercises]


def total_exercises(day: WorkoutDay | str) -> int:
    return sum(len(cat.exercises) for cat in categories_for(day))


def find_exercise(day: WorkoutDay | str, name: str) -> ExerciseTemplate:
    """Return the template called ``name`` or raise ``KeyError``."""
    for ex in exercises_for(day):
        if ex.name == name:
            return ex
    raise KeyError(f"Exercise '{name}' not found in {WorkoutDay(day).value}")
