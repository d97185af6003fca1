"""
Business Rules and Constants
============================
Central source of truth for shift windows, skill thresholds and the fallback
staffing template.
"""
from dataclasses import dataclass, field
from typing import Dict


# Sentinel employee ids used on the wire for business-wide rules
ALL_EMPLOYEES = "__ALL__"
CLOSE_EARLY = "__CLOSE_EARLY__"


@dataclass
class RulesConfig:
    """Business rules constants."""

    # Skill ratings (0-5 scale)
    bartender_threshold: int = 3

    # Hours
    overtime_threshold_hours: float = 38.0

    # Bucket boundaries (hour of start time)
    morning_before_hour: int = 12
    night_from_hour: int = 15
    # LockedShift only knows morning/night; anything starting before this is "morning"
    lock_night_from_hour: int = 15

    # Legacy shift windows
    morning_start: str = "07:15"
    morning_end: str = "14:00"
    night_start: str = "16:00"
    night_end: str = "21:00"

    # Opening time used by staffing template checks
    business_open: str = "07:15"

    # Fallback template when no staffing data is supplied at all:
    # {day: (morning headcount, night headcount)}; the business is closed Mondays
    # and Sunday nights.
    fallback_staffing: Dict[str, tuple] = field(default_factory=lambda: {
        "monday": (0, 0),
        "tuesday": (2, 2),
        "wednesday": (2, 2),
        "thursday": (2, 2),
        "friday": (2, 2),
        "saturday": (2, 2),
        "sunday": (2, 0),
    })


RULES = RulesConfig()
