"""Compact human durations: 45s, 5m, 3h, 2d, 1w, 3mo, 1y 2mo."""

from datetime import UTC, datetime

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY


def format_duration(seconds: float) -> str:
    seconds = max(int(seconds), 0)
    if seconds < MINUTE:
        return f"{seconds}s"
    if seconds < HOUR:
        return f"{seconds // MINUTE}m"
    if seconds < DAY:
        return f"{seconds // HOUR}h"
    if seconds < WEEK:
        return f"{seconds // DAY}d"
    if seconds < MONTH:
        return f"{seconds // WEEK}w"
    if seconds < YEAR:
        return f"{seconds // MONTH}mo"
    years = seconds // YEAR
    months = (seconds % YEAR) // MONTH
    return f"{years}y {months}mo" if months else f"{years}y"


def format_time_ago(moment: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"{format_duration((now - moment).total_seconds())} ago"


def maturity_label(age_seconds: float) -> str:
    if age_seconds < DAY:
        return "Very New"
    if age_seconds < WEEK:
        return "New"
    if age_seconds < MONTH:
        return "Recent"
    if age_seconds < YEAR:
        return "Established"
    return "Long-established"


def from_millis(value: int | None) -> datetime | None:
    """DexScreener epoch-milliseconds to aware UTC datetime; None if unusable."""
    if value is None or value <= 0:
        return None
    try:
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
