from pathlib import Path
import logging

from kivy.core.audio import SoundLoader
from kivy.clock import Clock

try:  # pragma: no cover - jnius is only available on Android
    from jnius import autoclass  # type: ignore
except Exception:  # pragma: no cover - allow import on non-Android
    autoclass = None  # type: ignore

# Gap between the haptic pulses played when the rest timer ends
PULSE_INTERVAL = 0.4
PULSE_COUNT = 3
PULSE_MS = 150


class SoundSystem:
    """Manage playback of short feedback sounds.

    Sounds are loaded lazily from the ``assets/sounds`` directory to keep
    memory usage minimal.  Missing files are ignored.
    """

    def __init__(self, enabled: bool = True):
        self._base = Path(__file__).resolve().parent
        self._cache: dict[str, object] = {}
        self.enabled = enabled

    def _load(self, name: str):
        snd = self._cache.get(name)
        if snd is None:
            path = self._base / f"{name}.wav"
            snd = SoundLoader.load(str(path))
            self._cache[name] = snd
        return snd

    def play(self, name: str) -> None:
        """Play a named sound if available and sound is enabled."""
        if not self.enabled:
            return
        snd = self._load(name)
        if snd:
            snd.stop()
            snd.play()

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = bool(enabled)


class Haptics:
    """Short vibration pulses through the Android vibrator service."""

    def __init__(self):
        self._vibrator = None
        if autoclass is None:
            return
        try:  # pragma: no cover - Android-only classes
            activity = autoclass("org.kivy.android.PythonActivity").mActivity
            context = autoclass("android.content.Context")
            self._vibrator = activity.getSystemService(context.VIBRATOR_SERVICE)
        except Exception:  # pragma: no cover - running off-device
            logging.info("Vibrator service unavailable")

    @property
    def available(self) -> bool:
        return self._vibrator is not None

    def pulse(self, *_args) -> None:
        if self._vibrator is None:
            return
        try:  # pragma: no cover - Android-only
            self._vibrator.vibrate(PULSE_MS)
        except Exception:
            logging.exception("Vibration failed")


class AlertFeedback:
    """Foreground alert played when the rest timer reaches zero."""

    def __init__(self, sound: SoundSystem, haptics: Haptics | None = None, clock=None):
        self.sound = sound
        self.haptics = haptics or Haptics()
        self._clock = clock or Clock

    def timer_finished(self) -> None:
        """One sound followed by three success pulses ``PULSE_INTERVAL`` apart."""
        self.sound.play("timer_done")
        for idx in range(PULSE_COUNT):
            self._clock.schedule_once(self.haptics.pulse, idx * PULSE_INTERVAL)
