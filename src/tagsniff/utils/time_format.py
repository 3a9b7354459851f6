"""Duration formatting helpers for CLI output."""

from __future__ import annotations

import math

UNKNOWN_DURATION = "--:--"


def format_duration(seconds: float | None) -> str:
    """Format seconds as MM:SS.s, or H:MM:SS.s from one hour; unknown as --:--."""
    if seconds is None:
        return UNKNOWN_DURATION
    try:
        numeric = float(seconds)
    except (TypeError, ValueError):
        return UNKNOWN_DURATION
    if not math.isfinite(numeric) or numeric <= 0:
        return UNKNOWN_DURATION
    tenths = int(round(numeric * 10))
    whole, fraction = divmod(tenths, 10)
    hours, remainder = divmod(whole, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}.{fraction}"
    return f"{minutes:02d}:{secs:02d}.{fraction}"
