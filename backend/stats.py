"""Aggregations behind the home, history and progress screens.

All functions are pure: they take records already read from
:class:`backend.history.HistoryStore` and a reference ``now``.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Sequence

from backend.history import CompletedExerciseRecord, WorkoutSessionRecord
from backend.utils import format_minutes


def _months_back(moment: datetime, months: int) -> datetime:
    month = moment.month - months
    year = moment.year
    while month <= 0:
        month += 12
        year -= 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class TimePeriod(Enum):
    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "three_months"

    @property
    def title(self) -> str:
        return {
            TimePeriod.WEEK: "Week",
            TimePeriod.MONTH: "Month",
            TimePeriod.THREE_MONTHS: "3 months",
        }[self]

    @property
    def expected_workouts(self) -> int:
        """Planned workouts in the period at three sessions per week."""
        return {
            TimePeriod.WEEK: 3,
            TimePeriod.MONTH: 12,
            TimePeriod.THREE_MONTHS: 36,
        }[self]

    def start_date(self, now: datetime | None = None) -> datetime:
        now = now or datetime.now()
        if self is TimePeriod.WEEK:
            return now - timedelta(days=7)
        if self is TimePeriod.MONTH:
            return _months_back(now, 1)
        return _months_back(now, 3)


@dataclass(frozen=True)
class WeightPoint:
    date: date
    weight: float


def start_of_week(now: datetime) -> datetime:
    """Midnight of the Monday of ``now``'s week."""
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def filter_sessions(
    sessions: Iterable[WorkoutSessionRecord],
    period: TimePeriod,
    now: datetime | None = None,
) -> list[WorkoutSessionRecord]:
    start = period.start_date(now)
    return [s for s in sessions if s.date >= start]


def average_duration_minutes(sessions: Sequence[WorkoutSessionRecord]) -> int:
    if not sessions:
        return 0
    total = sum(int(s.duration) for s in sessions)
    return total // len(sessions) // 60


def completion_rate(sessions: Sequence[WorkoutSessionRecord]) -> int:
    """Percentage of sessions where every exercise was completed."""
    if not sessions:
        return 0
    completed = sum(1 for s in sessions if s.is_completed)
    return completed * 100 // len(sessions)


def regularity_rate(sessions: Sequence[WorkoutSessionRecord], period: TimePeriod) -> int:
    expected = period.expected_workouts
    if expected <= 0:
        return 0
    return min(100, len(sessions) * 100 // expected)


def total_minutes(sessions: Iterable[WorkoutSessionRecord]) -> int:
    return sum(int(s.duration) // 60 for s in sessions)


def format_total_time(sessions: Iterable[WorkoutSessionRecord]) -> str:
    return format_minutes(total_minutes(sessions))


def sessions_this_week(
    sessions: Iterable[WorkoutSessionRecord], now: datetime | None = None
) -> int:
    start = start_of_week(now or datetime.now())
    return sum(1 for s in sessions if s.date >= start)


def minutes_this_week(
    sessions: Iterable[WorkoutSessionRecord], now: datetime | None = None
) -> int:
    start = start_of_week(now or datetime.now())
    return total_minutes(s for s in sessions if s.date >= start)


def exercise_names_with_weight(exercises: Iterable[CompletedExerciseRecord]) -> list[str]:
    """Sorted names of exercises that were ever logged with a weight."""
    return sorted({e.exercise_name for e in exercises if e.weight > 0})


def weight_progression(
    exercises: Iterable[CompletedExerciseRecord], name: str
) -> list[WeightPoint]:
    """Heaviest weight per calendar day for ``name``, oldest first."""
    per_day: dict[date, float] = {}
    for rec in exercises:
        if rec.exercise_name != name or rec.weight <= 0:
            continue
        day = rec.date.date()
        per_day[day] = max(per_day.get(day, 0.0), rec.weight)
    return [WeightPoint(day, weight) for day, weight in sorted(per_day.items())]


def weight_change(points: Sequence[WeightPoint]) -> float:
    """Difference between the last and first point (0 for fewer than two)."""
    if len(points) < 2:
        return 0.0
    return points[-1].weight - points[0].weight


def activity_days(
    sessions: Iterable[WorkoutSessionRecord], now: datetime | None = None
) -> list[tuple[date, bool]]:
    """Days from four weeks before this week's Monday up to today.

    Each entry pairs the date with whether a workout happened that day.
    """
    now = now or datetime.now()
    first = (start_of_week(now) - timedelta(days=28)).date()
    worked = {s.date.date() for s in sessions}
    days = []
    current = first
    while current <= now.date():
        days.append((current, current in worked))
        current += timedelta(days=1)
    return days
