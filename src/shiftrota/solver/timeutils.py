"""
Time Utilities
==============
Minute-of-day arithmetic on "HH:MM" strings and week/date helpers.
All functions are pure.
"""
from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

from shiftrota.models.clock import (
    MINUTES_PER_DAY,
    duration_hours,
    end_minutes,
    format_span,
    format_time_label,
    minutes_to_time,
    time_to_minutes,
    to_date,
)
from shiftrota.models.shift import ALL_DAYS, DayOfWeek

Interval = Tuple[int, int]


def in_range(time: str, start: str, end: str) -> bool:
    """Half-open containment: start <= time < end."""
    t = time_to_minutes(time)
    return time_to_minutes(start) <= t < time_to_minutes(end)


def ranges_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """True if [start_a, end_a) and [start_b, end_b) share any instant."""
    return (time_to_minutes(start_a) < end_minutes(start_b, end_b)
            and end_minutes(start_a, end_a) > time_to_minutes(start_b))


def merge_intervals(intervals: List[Interval]) -> List[Interval]:
    """Union of intervals: sort by start, then sweep forward merging overlaps."""
    merged: List[Interval] = []
    for start, end in sorted(intervals):
        if end <= start:
            continue
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def subtract_intervals(span: Interval, covered: List[Interval]) -> List[Interval]:
    """Parts of ``span`` not covered by the (merged, sorted) ``covered`` list."""
    gaps: List[Interval] = []
    cursor, stop = span
    for start, end in covered:
        if end <= cursor:
            continue
        if start >= stop:
            break
        if start > cursor:
            gaps.append((cursor, start))
        cursor = max(cursor, end)
        if cursor >= stop:
            break
    if cursor < stop:
        gaps.append((cursor, stop))
    return gaps


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def week_start(anchor: Union[date, datetime, str]) -> date:
    """Monday of the week containing ``anchor``."""
    d = to_date(anchor)
    return d - timedelta(days=d.weekday())


def date_for_day(monday: date, day: DayOfWeek) -> str:
    """ISO date of ``day`` in the week starting ``monday``."""
    return (monday + timedelta(days=day.offset)).isoformat()


def day_for_date(iso: str) -> DayOfWeek:
    return ALL_DAYS[to_date(iso).weekday()]


def week_minutes(monday: date, iso: str, time: str) -> int:
    """Minutes from Monday 00:00 of the week to ``time`` on ``iso``."""
    offset = (to_date(iso) - monday).days
    return offset * MINUTES_PER_DAY + time_to_minutes(time)
