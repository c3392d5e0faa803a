"""Fixed 15-minute trading periods."""

from __future__ import annotations

import math

PERIOD_SECONDS = 900


def current_period(now_seconds: float) -> int:
    """Start (unix seconds) of the period containing *now_seconds*."""
    return math.floor(now_seconds / PERIOD_SECONDS) * PERIOD_SECONDS


def time_remaining(now_seconds: float) -> int:
    """Whole seconds until the current period ends, never negative."""
    now = math.floor(now_seconds)
    return max(0, current_period(now) + PERIOD_SECONDS - now)


def format_remaining(seconds: int) -> str:
    """Render a countdown as ``"12m 05s"``."""
    minutes, rem = divmod(max(0, int(seconds)), 60)
    return f"{minutes}m {rem:02d}s"
