"""Display helpers for result summaries."""

from datetime import datetime


def format_duration(seconds: float) -> str:
    """
    Format a duration in seconds.

    Returns:
        "12.5s" below a minute, otherwise "2m 5s"
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}m {secs:.0f}s"


def format_percent(passed: int, failed: int) -> str:
    """Pass rate of executed tests; skipped tests are not part of the total."""
    total = passed + failed
    if total == 0:
        return "0%"
    return f"{passed / total * 100:.1f}%"


def format_date(value: datetime) -> str:
    """e.g. "Jan 22, 2026, 10:30 AM"."""
    return f"{value:%b} {value.day}, {value.year}, {value:%I:%M %p}"
