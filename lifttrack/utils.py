"""Display formatting helpers.

Stored numbers carry no unit; the user's preferred unit is only attached
here when rendering.
"""

from __future__ import annotations


def format_weight(weight: float, unit: str = "lb") -> str:
    if float(weight).is_integer():
        weight = int(weight)
    return f"{weight}{unit}"


def format_volume(volume: float) -> str:
    """Return ``volume`` as ``12.3k`` above one thousand, else with separators."""

    if volume >= 1000:
        return f"{volume / 1000:.1f}k"
    if float(volume).is_integer():
        return f"{int(volume):,}"
    return f"{volume:,}"


def format_duration(seconds: int) -> str:
    """Return a compact duration such as ``1h 5m``, ``4m 10s`` or ``45s``."""

    hours, rem = divmod(int(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_timer_display(seconds: int) -> str:
    """Return ``m:ss`` for the rest timer."""

    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"
