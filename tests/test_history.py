from datetime import datetime, timedelta
import sqlite3

import pytest

from backend.catalog import EffortLevel
from backend.history import CompletedExerciseRecord, HistoryStore, WorkoutSessionRecord


def _session(day="day1", when=None, duration=1800.0, completed=True):
    return WorkoutSessionRecord(
        date=when or datetime(2024, 5, 6, 18, 0),
        workout_day=day,
        duration=duration,
        is_completed=completed,
        total_exercises=10,
        completed_exercises=10 if completed else 6,
    )


def _exercise(name, weight, when, day="day1", effort=None):
    return CompletedExerciseRecord(
        exercise_name=name,
        sets=3,
        reps=12,
        weight=weight,
        completed_sets=3,
        date=when,
        workout_day=day,
        effort_level=effort,
    )


def test_schema_created(tmp_path):
    db_path = tmp_path / "nested" / "history.db"
    HistoryStore(db_path)
    with sqlite3.connect(db_path) as conn:
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
    assert {"workout_sessions", "completed_exercises"} <= tables


def test_add_session_assigns_id(history):
    saved = history.add_session(_session())
    assert saved.id is not None
    [loaded] = history.get_sessions()
    assert loaded == saved
    assert loaded.formatted_duration == "30:00"


def test_sessions_sorted_newest_first(history):
    base = datetime(2024, 5, 6, 18, 0)
    for offset in (2, 0, 5):
        history.add_session(_session(when=base + timedelta(days=offset)))
    dates = [s.date for s in history.get_sessions()]
    assert dates == sorted(dates, reverse=True)


def test_get_sessions_filters(history):
    base = datetime(2024, 5, 6, 18, 0)
    history.add_session(_session("day1", base))
    history.add_session(_session("day2", base + timedelta(days=2)))
    history.add_session(_session("day1", base + timedelta(days=7)))
    assert len(history.get_sessions(since=base + timedelta(days=1))) == 2
    assert [s.workout_day for s in history.get_sessions(workout_day="day2")] == ["day2"]
    assert history.last_session("day1").date == base + timedelta(days=7)
    assert history.last_session("day3") is None


def test_delete_session_removes_only_that_record(history):
    records = [history.add_session(_session(when=datetime(2024, 5, d, 18))) for d in (1, 2, 3)]
    assert history.delete_session(records[1].id)
    remaining = history.get_sessions()
    assert len(remaining) == 2
    assert records[1].id not in {s.id for s in remaining}


def test_delete_missing_session_returns_false(history):
    history.add_session(_session())
    assert history.delete_session(999) is False
    assert len(history.get_sessions()) == 1


def test_completed_exercise_round_trips_effort(history):
    when = datetime(2024, 5, 6, 18, 0)
    saved = history.add_completed_exercise(_exercise("Squat", 60, when, effort=EffortLevel.HARD))
    [loaded] = history.get_completed_exercises(exercise_name="Squat")
    assert loaded == saved
    assert loaded.effort_level is EffortLevel.HARD
    assert loaded.is_completed


def test_delete_completed_exercise(history):
    when = datetime(2024, 5, 6, 18, 0)
    first = history.add_completed_exercise(_exercise("Squat", 60, when))
    history.add_completed_exercise(_exercise("Lunge", 20, when))
    assert history.delete_completed_exercise(first.id)
    assert [e.exercise_name for e in history.get_completed_exercises()] == ["Lunge"]


def test_last_weights_uses_latest_non_zero(history):
    old = datetime(2024, 5, 1, 18, 0)
    new = datetime(2024, 5, 8, 18, 0)
    history.add_completed_exercise(_exercise("Squat", 50, old))
    history.add_completed_exercise(_exercise("Squat", 55, new))
    history.add_completed_exercise(_exercise("Plank", 0, new))
    history.add_completed_exercise(_exercise("Row", 30, new, day="day2"))
    assert history.last_weights("day1") == {"Squat": 55}


@pytest.mark.parametrize("seconds, text", [(0, "0:00"), (65, "1:05"), (3725, "62:05")])
def test_formatted_duration(seconds, text):
    assert _session(duration=seconds).formatted_duration == text


def test_add_workout_writes_session_and_exercises(history):
    when = datetime(2024, 5, 6, 18, 0)
    session, saved = history.add_workout(
        _session(when=when), [_exercise("Squat", 60, when), _exercise("Lunge", 20, when)]
    )
    assert session.id is not None
    assert all(rec.id is not None for rec in saved)
    assert history.get_sessions() == [session]
    assert len(history.get_completed_exercises()) == 2


def test_add_workout_rolls_back_on_failure(history, monkeypatch):
    when = datetime(2024, 5, 6, 18, 0)

    def broken_insert(conn, record):
        raise sqlite3.IntegrityError("constraint failed")

    monkeypatch.setattr(history, "_insert_exercise", broken_insert)
    with pytest.raises(sqlite3.IntegrityError):
        history.add_workout(_session(when=when), [_exercise("Squat", 60, when)])
    assert history.get_sessions() == []
