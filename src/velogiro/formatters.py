"""Formatting utilities for display."""

import math


def format_duration(seconds: float) -> str:
    """Format seconds as a short ride duration.

    Hours are omitted when zero and seconds are only shown for rides under
    an hour; a unit preceded by a larger one is zero-padded to two digits.
    Examples: ``45s``, ``5m 07s``, ``1h 05m``.
    """
    if not math.isfinite(seconds) or seconds <= 0:
        return "0m"

    hours, remainder = divmod(round(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []

    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0:
        parts.append(f"{minutes:02d}m" if hours > 0 else f"{minutes}m")
    if hours == 0 and secs > 0:
        parts.append(f"{secs:02d}s" if minutes > 0 else f"{secs}s")

    return " ".join(parts) or "0m"


def format_axis_time_label(seconds: float) -> str:
    """Format a time-axis tick label as XhYYm or Ym."""
    if not math.isfinite(seconds) or seconds < 0:
        return "0m"
    hours, minutes = divmod(round(seconds / 60), 60)
    if hours > 0:
        return f"{hours}h{minutes:02d}m"
    return f"{minutes}m"


def format_distance(distance_km: float) -> str:
    """Format a distance tick value, dropping a trailing .0."""
    if distance_km == int(distance_km):
        return f"{int(distance_km)} km"
    return f"{distance_km:g} km"
