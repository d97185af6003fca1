"""Staffing slot label normalization."""
import re
from typing import Optional

from shiftrota.models.shift import DayOfWeek

from .timeutils import time_to_minutes

_DINNER_N = re.compile(r"\b(dinn?er)\s*(\d+)\b")
_OPENER = re.compile(r"\bopen(er|ing)?\b")
_BAR = re.compile(r"\bbar\b|\bbartend(er|ing)?\b")
_MID = re.compile(r"\bmid\b|\blunch\b")
_CLOSER = re.compile(r"\bclos(e|er|ing)\b")


def normalize_slot_label(
    label: Optional[str],
    day: DayOfWeek,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> str:
    """
    Map free-text slot labels onto the canonical set used across the app:
    Opener, Weekend Opener, 2nd Server, 3rd Server, Mid Shift, Bar, Closer,
    Dinner, Dinner N. Unknown labels are returned whitespace-normalized;
    empty labels become "Shift".
    """
    raw = " ".join(str(label or "").split())
    if not raw:
        return "Shift"
    lower = raw.lower()

    m = _DINNER_N.search(lower)
    if m and int(m.group(2)) > 0:
        return f"Dinner {int(m.group(2))}"

    if "weekend" in lower and _OPENER.search(lower):
        return "Weekend Opener"
    if _OPENER.search(lower):
        # Weekend openers that run to 3pm or later get the weekend label
        if end_time and day.is_weekend and time_to_minutes(end_time) >= 15 * 60:
            return "Weekend Opener"
        return "Opener"
    if _BAR.search(lower):
        return "Bar"
    if _MID.search(lower):
        return "Mid Shift"
    if re.search(r"\b(2nd|second)\b", lower):
        return "2nd Server"
    if re.search(r"\b(3rd|third)\b", lower):
        return "3rd Server"
    if _CLOSER.search(lower):
        return "Closer"
    if re.search(r"\bdinn?er\b", lower):
        return "Dinner"
    return raw


def label_implies_bartender(label: str) -> bool:
    return bool(_BAR.search(label.lower()))
