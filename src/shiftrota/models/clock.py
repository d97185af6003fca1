"""
Clock Helpers
=============
"HH:MM" parsing and formatting plus ISO date conversion, shared by the
models and the solver.
"""
from datetime import date, datetime
from typing import Union

from shiftrota.utils.logging_setup import get_logger

logger = get_logger("shiftrota.models.clock")

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(time: str) -> int:
    """Parse "HH:MM" to minutes since midnight. Malformed input reads as 0."""
    try:
        hours, minutes = str(time).strip().split(":")[:2]
        return int(hours) * 60 + int(minutes)
    except (ValueError, AttributeError):
        logger.debug(f"Malformed time string {time!r}, treating as 00:00")
        return 0


def minutes_to_time(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM" (wrapping past 24h)."""
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def end_minutes(start: str, end: str) -> int:
    """End of a span in minutes, pushed past midnight if it ends before it starts."""
    s, e = time_to_minutes(start), time_to_minutes(end)
    return e + MINUTES_PER_DAY if e < s else e


def duration_hours(start: str, end: str) -> float:
    """Length of [start, end) in hours; a negative span wraps past midnight."""
    return (end_minutes(start, end) - time_to_minutes(start)) / 60


def format_time_label(time24: Union[str, int]) -> str:
    """
    12-hour compact label used in names and messages.

    >>> format_time_label("16:00")
    '4p'
    >>> format_time_label("07:15")
    '7:15a'
    """
    minutes = time24 if isinstance(time24, int) else time_to_minutes(time24)
    minutes %= MINUTES_PER_DAY
    hours, mins = divmod(minutes, 60)
    period = "p" if hours >= 12 else "a"
    hour12 = hours % 12 or 12
    if mins == 0:
        return f"{hour12}{period}"
    return f"{hour12}:{mins:02d}{period}"


def format_span(start: str, end: str) -> str:
    return f"{format_time_label(start)}-{format_time_label(end)}"


def to_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
