"""Utility helpers used across backend modules."""

from __future__ import annotations


def format_clock(seconds: float) -> str:
    """Return ``seconds`` as ``M:SS`` (minutes are not capped at 60)."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def format_countdown(seconds: float) -> str:
    """Return ``M:SS`` for a minute or more, otherwise just the seconds."""
    total = max(0, int(seconds))
    if total >= 60:
        return format_clock(total)
    return str(total)


def format_minutes(minutes: int) -> str:
    """Return a total like ``"1h 05m"`` or ``"45m"``."""
    minutes = max(0, int(minutes))
    if minutes >= 60:
        return f"{minutes // 60}h {minutes % 60:02d}m"
    return f"{minutes}m"
