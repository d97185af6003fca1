"""
Day Policy
==========
Business-wide closure and early-close state per day, computed once from the
override list before any shift exists and threaded through every stage that
creates or keeps assignments.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from shiftrota.models.overrides import BusinessClosed, EarlyClose, Override
from shiftrota.models.shift import ALL_DAYS, DayOfWeek

from .timeutils import end_minutes, format_time_label, minutes_to_time, time_to_minutes


@dataclass(frozen=True)
class DayPolicy:
    closed: bool = False
    early_close: Optional[str] = None

    def clamp(self, start: str, end: str) -> Optional[Tuple[str, str]]:
        """
        Fit [start, end) into the day's opening window.

        Returns None when the day is closed or the span starts at/after the
        early-close time; otherwise the span with its end truncated to the
        close time where it runs past it.
        """
        if self.closed:
            return None
        if self.early_close is None:
            return start, end
        close = time_to_minutes(self.early_close)
        if time_to_minutes(start) >= close:
            return None
        if end_minutes(start, end) > close:
            return start, minutes_to_time(close)
        return start, end

    def warning_text(self, day: DayOfWeek) -> Optional[str]:
        if self.closed:
            return f"{day.label} - CLOSED"
        if self.early_close:
            return f"{day.label} - Closing early at {format_time_label(self.early_close)}"
        return None


OPEN = DayPolicy()


def compute_day_policies(overrides: Iterable[Override]) -> Dict[DayOfWeek, DayPolicy]:
    """
    Build the policy for every day of the week, Monday → Sunday.

    Several early closes on one day resolve to the earliest time.
    """
    closed = set()
    early: Dict[DayOfWeek, str] = {}
    for o in overrides:
        if isinstance(o, BusinessClosed):
            closed.add(o.day)
        elif isinstance(o, EarlyClose):
            current = early.get(o.day)
            if current is None or time_to_minutes(o.close_time) < time_to_minutes(current):
                early[o.day] = o.close_time

    return {
        day: DayPolicy(closed=day in closed, early_close=None if day in closed else early.get(day))
        for day in ALL_DAYS
    }
