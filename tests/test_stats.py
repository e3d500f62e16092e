from datetime import date, datetime, timedelta

import pytest

from backend import stats
from backend.history import CompletedExerciseRecord, WorkoutSessionRecord

NOW = datetime(2024, 5, 15, 12, 0)  # a Wednesday


def _session(days_ago, minutes=30, completed=True):
    return WorkoutSessionRecord(
        date=NOW - timedelta(days=days_ago),
        workout_day="day1",
        duration=minutes * 60,
        is_completed=completed,
        total_exercises=10,
        completed_exercises=10 if completed else 5,
    )


def _exercise(name, weight, when):
    return CompletedExerciseRecord(name, 3, 10, weight, 3, when, "day1")


def test_period_start_dates():
    assert stats.TimePeriod.WEEK.start_date(NOW) == NOW - timedelta(days=7)
    assert stats.TimePeriod.MONTH.start_date(NOW) == datetime(2024, 4, 15, 12, 0)
    assert stats.TimePeriod.THREE_MONTHS.start_date(NOW) == datetime(2024, 2, 15, 12, 0)


def test_month_start_clamps_short_months():
    assert stats.TimePeriod.MONTH.start_date(datetime(2024, 3, 31)) == datetime(2024, 2, 29)
    assert stats.TimePeriod.THREE_MONTHS.start_date(datetime(2024, 1, 15)) == datetime(2023, 10, 15)


def test_filter_sessions_by_period():
    sessions = [_session(1), _session(10), _session(40)]
    assert len(stats.filter_sessions(sessions, stats.TimePeriod.WEEK, NOW)) == 1
    assert len(stats.filter_sessions(sessions, stats.TimePeriod.MONTH, NOW)) == 2
    assert len(stats.filter_sessions(sessions, stats.TimePeriod.THREE_MONTHS, NOW)) == 3


def test_rates():
    sessions = [_session(1, 40), _session(3, 50, completed=False), _session(5, 60)]
    assert stats.average_duration_minutes(sessions) == 50
    assert stats.completion_rate(sessions) == 66
    assert stats.regularity_rate(sessions, stats.TimePeriod.WEEK) == 100
    assert stats.regularity_rate(sessions, stats.TimePeriod.MONTH) == 25


def test_empty_aggregates_are_zero():
    assert stats.average_duration_minutes([]) == 0
    assert stats.completion_rate([]) == 0
    assert stats.total_minutes([]) == 0
    assert stats.format_total_time([]) == "0m"


def test_total_time_formatting():
    sessions = [_session(1, 45), _session(2, 50)]
    assert stats.total_minutes(sessions) == 95
    assert stats.format_total_time(sessions) == "1h 35m"


def test_this_week_counts_from_monday():
    sessions = [_session(0, 30), _session(2, 20), _session(3, 60)]
    assert stats.start_of_week(NOW) == datetime(2024, 5, 13)
    assert stats.sessions_this_week(sessions, NOW) == 2
    assert stats.minutes_this_week(sessions, NOW) == 50


def test_weight_progression_takes_daily_maximum():
    day1 = datetime(2024, 5, 6, 18)
    day2 = datetime(2024, 5, 8, 18)
    records = [
        _exercise("Squat", 70, day2),
        _exercise("Squat", 60, day1),
        _exercise("Squat", 65, day1 + timedelta(hours=1)),
        _exercise("Squat", 0, day2),
        _exercise("Lunge", 20, day2),
    ]
    points = stats.weight_progression(records, "Squat")
    assert points == [
        stats.WeightPoint(date(2024, 5, 6), 65),
        stats.WeightPoint(date(2024, 5, 8), 70),
    ]
    assert stats.weight_change(points) == 5
    assert stats.weight_change(points[:1]) == 0
    assert stats.exercise_names_with_weight(records) == ["Lunge", "Squat"]


def test_activity_days_cover_five_weeks():
    days = stats.activity_days([_session(0), _session(9)], NOW)
    assert days[0][0] == date(2024, 4, 15)
    assert days[-1][0] == NOW.date()
    worked = [d for d, flag in days if flag]
    assert worked == [date(2024, 5, 6), date(2024, 5, 15)]


@pytest.mark.parametrize(
    "period, expected", [("week", 3), ("month", 12), ("three_months", 36)]
)
def test_expected_workouts(period, expected):
    assert stats.TimePeriod(period).expected_workouts == expected
