"""Persistent history of finished workouts.

Sessions and completed exercises are append-only rows in SQLite.  Dates are
stored as UNIX timestamps and converted to :class:`datetime` on the way out.
Reporting screens only read from here; the user may delete single rows.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
import logging
import sqlite3
from pathlib import Path
from typing import Iterable

from backend.catalog import EffortLevel
from backend.utils import format_clock
from core import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS workout_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date REAL NOT NULL,
    workout_day TEXT NOT NULL,
    duration REAL NOT NULL DEFAULT 0,
    is_completed INTEGER NOT NULL DEFAULT 0,
    total_exercises INTEGER NOT NULL DEFAULT 0,
    completed_exercises INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS completed_exercises (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    exercise_name TEXT NOT NULL,
    sets INTEGER NOT NULL,
    reps INTEGER NOT NULL,
    weight REAL NOT NULL DEFAULT 0,
    completed_sets INTEGER NOT NULL DEFAULT 0,
    date REAL NOT NULL,
    workout_day TEXT NOT NULL,
    effort_level INTEGER
);
CREATE INDEX IF NOT EXISTS idx_sessions_date ON workout_sessions (date);
CREATE INDEX IF NOT EXISTS idx_completed_name ON completed_exercises (exercise_name, date);
"""


@dataclass(frozen=True)
class WorkoutSessionRecord:
    date: datetime
    workout_day: str
    duration: float = 0.0
    is_completed: bool = False
    total_exercises: int = 0
    completed_exercises: int = 0
    id: int | None = None

    @property
    def formatted_duration(self) -> str:
        return format_clock(self.duration)


@dataclass(frozen=True)
class CompletedExerciseRecord:
    exercise_name: str
    sets: int
    reps: int
    weight: float
    completed_sets: int
    date: datetime
    workout_day: str
    effort_level: EffortLevel | None = None
    id: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.completed_sets >= self.sets


def _session_from_row(row) -> WorkoutSessionRecord:
    sid, date, day, duration, completed, total, done = row
    return WorkoutSessionRecord(
        date=datetime.fromtimestamp(date),
        workout_day=day,
        duration=duration,
        is_completed=bool(completed),
        total_exercises=total,
        completed_exercises=done,
        id=sid,
    )


def _exercise_from_row(row) -> CompletedExerciseRecord:
    eid, name, sets, reps, weight, done, date, day, effort = row
    return CompletedExerciseRecord(
        exercise_name=name,
        sets=sets,
        reps=reps,
        weight=weight,
        completed_sets=done,
        date=datetime.fromtimestamp(date),
        workout_day=day,
        effort_level=EffortLevel(effort) if effort is not None else None,
        id=eid,
    )


class HistoryStore:
    """Read and append workout history in the database at ``db_path``."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def ensure_schema(self) -> None:
        """Create the history tables if they do not exist yet."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)

    # ------------------------------------------------------------------
    # Appending
    # ------------------------------------------------------------------
    def _insert_session(self, conn: sqlite3.Connection, record: WorkoutSessionRecord) -> int:
        cursor = conn.execute(
            """
            INSERT INTO workout_sessions
                (date, workout_day, duration, is_completed,
                 total_exercises, completed_exercises)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.date.timestamp(),
                record.workout_day,
                record.duration,
                int(record.is_completed),
                record.total_exercises,
                record.completed_exercises,
            ),
        )
        return cursor.lastrowid

    def _insert_exercise(
        self, conn: sqlite3.Connection, record: CompletedExerciseRecord
    ) -> int:
        cursor = conn.execute(
            """
            INSERT INTO completed_exercises
                (exercise_name, sets, reps, weight, completed_sets,
                 date, workout_day, effort_level)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.exercise_name,
                record.sets,
                record.reps,
                record.weight,
                record.completed_sets,
                record.date.timestamp(),
                record.workout_day,
                int(record.effort_level) if record.effort_level is not None else None,
            ),
        )
        return cursor.lastrowid

    def add_session(self, record: WorkoutSessionRecord) -> WorkoutSessionRecord:
        """Insert ``record`` and return it with its new ``id``."""
        with self._connect() as conn:
            new_id = self._insert_session(conn, record)
        logging.info("Saved %s session %s", record.workout_day, new_id)
        return replace(record, id=new_id)

    def add_completed_exercise(
        self, record: CompletedExerciseRecord
    ) -> CompletedExerciseRecord:
        with self._connect() as conn:
            new_id = self._insert_exercise(conn, record)
        return replace(record, id=new_id)

    def add_workout(
        self,
        session: WorkoutSessionRecord,
        exercises: Iterable[CompletedExerciseRecord],
    ) -> tuple[WorkoutSessionRecord, list[CompletedExerciseRecord]]:
        """Insert a finished workout and its exercises in one transaction.

        Either every row is written or, when any insert fails, none is and
        the :class:`sqlite3.Error` propagates to the caller.
        """
        with self._connect() as conn:
            session_id = self._insert_session(conn, session)
            saved = [
                replace(rec, id=self._insert_exercise(conn, rec)) for rec in exercises
            ]
        logging.info(
            "Saved %s session %s with %s exercises",
            session.workout_day,
            session_id,
            len(saved),
        )
        return replace(session, id=session_id), saved

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_sessions(
        self,
        since: datetime | None = None,
        workout_day: str | None = None,
        limit: int | None = None,
    ) -> list[WorkoutSessionRecord]:
        """Return sessions, most recent first."""
        query = (
            "SELECT id, date, workout_day, duration, is_completed, "
            "total_exercises, completed_exercises FROM workout_sessions"
        )
        clauses, params = [], []
        if since is not None:
            clauses.append("date >= ?")
            params.append(since.timestamp())
        if workout_day is not None:
            clauses.append("workout_day = ?")
            params.append(workout_day)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_session_from_row(row) for row in rows]

    def get_completed_exercises(
        self,
        exercise_name: str | None = None,
        workout_day: str | None = None,
        since: datetime | None = None,
    ) -> list[CompletedExerciseRecord]:
        """Return completed-exercise rows, most recent first."""
        query = (
            "SELECT id, exercise_name, sets, reps, weight, completed_sets, "
            "date, workout_day, effort_level FROM completed_exercises"
        )
        clauses, params = [], []
        if exercise_name is not None:
            clauses.append("exercise_name = ?")
            params.append(exercise_name)
        if workout_day is not None:
            clauses.append("workout_day = ?")
            params.append(workout_day)
        if since is not None:
            clauses.append("date >= ?")
            params.append(since.timestamp())
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY date DESC, id DESC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_exercise_from_row(row) for row in rows]

    def last_session(self, workout_day: str) -> WorkoutSessionRecord | None:
        sessions = self.get_sessions(workout_day=workout_day, limit=1)
        return sessions[0] if sessions else None

    def last_weights(self, workout_day: str) -> dict[str, float]:
        """Return the most recently recorded non-zero weight per exercise."""
        weights: dict[str, float] = {}
        for rec in self.get_completed_exercises(workout_day=workout_day):
            if rec.weight > 0 and rec.exercise_name not in weights:
                weights[rec.exercise_name] = rec.weight
        return weights

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------
    def delete_session(self, session_id: int) -> bool:
        """Delete one session row; return ``True`` if it existed."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM workout_sessions WHERE id = ?", (session_id,)
            )
            deleted = cursor.rowcount > 0
        if deleted:
            logging.info("Deleted session %s", session_id)
        return deleted

    def delete_completed_exercise(self, record_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM completed_exercises WHERE id = ?", (record_id,)
            )
            return cursor.rowcount > 0
