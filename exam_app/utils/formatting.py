"""Display helpers for times and scores."""

from __future__ import annotations

from exam_app.constants.exam_constants import (
    PASSING_SCORE_PERCENTAGE,
    TIMER_CRITICAL_SECONDS,
    TIMER_WARNING_SECONDS,
)


def format_time(seconds: int) -> str:
    """Format a duration as MM:SS."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def format_time_verbose(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    if minutes == 0:
        return f"{secs} second{'s' if secs != 1 else ''}"
    if secs == 0:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{minutes} min {secs} sec"


def timer_level(seconds_remaining: int) -> str:
    """'critical' under a minute, 'warning' under five, otherwise 'normal'."""
    if seconds_remaining < TIMER_CRITICAL_SECONDS:
        return "critical"
    if seconds_remaining < TIMER_WARNING_SECONDS:
        return "warning"
    return "normal"


def score_band(percentage: int) -> str:
    if percentage >= PASSING_SCORE_PERCENTAGE:
        return "good"
    if percentage >= 60:
        return "fair"
    return "poor"
