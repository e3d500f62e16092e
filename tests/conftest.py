import os
from pathlib import Path
import sys

import pytest

# Kivy reads these when it is first imported
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_WINDOW", "sdl2")
os.environ.setdefault("SDL_VIDEODRIVER", "offscreen")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.catalog import ExerciseCategory, ExerciseTemplate  # noqa: E402
from backend.history import HistoryStore  # noqa: E402
from backend.snapshot_store import SnapshotStore  # noqa: E402


class FakeTime:
    """Wall clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEvent:
    def __init__(self, clock, callback, timeout, repeat):
        self.clock = clock
        self.callback = callback
        self.timeout = timeout
        self.repeat = repeat
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self, dt=None):
        if self.cancelled:
            return
        if not self.repeat:
            self.cancelled = True
        self.callback(self.timeout if dt is None else dt)


class FakeClock:
    """Records Kivy Clock schedules so tests can fire them by hand."""

    def __init__(self):
        self.events: list[FakeEvent] = []

    def schedule_once(self, callback, timeout=0):
        event = FakeEvent(self, callback, timeout, repeat=False)
        self.events.append(event)
        return event

    def schedule_interval(self, callback, timeout):
        event = FakeEvent(self, callback, timeout, repeat=True)
        self.events.append(event)
        return event

    @property
    def active(self) -> list[FakeEvent]:
        return [e for e in self.events if not e.cancelled]

    def tick(self, dt=1):
        """Fire every active repeating event once."""
        for event in [e for e in self.active if e.repeat]:
            event.fire(dt)


class RecordingScheduler:
    """Notification scheduler double keeping the same one-per-id contract."""

    def __init__(self):
        self.pending = {}
        self.calls = []

    def schedule(self, identifier, fire_time, title, body, repeats_weekly=False):
        self.calls.append(("schedule", identifier, fire_time))
        self.pending[identifier] = fire_time

    def cancel(self, identifier):
        self.calls.append(("cancel", identifier))
        self.pending.pop(identifier, None)


class RecordingAlert:
    def __init__(self):
        self.count = 0

    def timer_finished(self):
        self.count += 1


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def alert() -> RecordingAlert:
    return RecordingAlert()


@pytest.fixture
def snapshot_store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "snapshot.json")


@pytest.fixture
def history(tmp_path: Path) -> HistoryStore:
    return HistoryStore(tmp_path / "history.db")


@pytest.fixture
def day_categories() -> tuple[ExerciseCategory, ...]:
    """A small workout day with 18 target sets across five exercises."""
    return (
        ExerciseCategory("Warm-up", (ExerciseTemplate("Plank", 3, 30),)),
        ExerciseCategory(
            "Main",
            (
                ExerciseTemplate("Bench press", 4, 10, 40),
                ExerciseTemplate("Cable row", 4, 12),
                ExerciseTemplate("Leg press", 4, 12, 80),
            ),
        ),
        ExerciseCategory("Arms", (ExerciseTemplate("Biceps curl", 3, 12, 10),)),
    )
