"""
Staffing Template Validation
============================
Heuristic checks on a week's slot-form staffing template, surfaced to
managers before a schedule is generated. Issues are advisory; the engine
runs regardless.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from shiftrota.models.rules import RULES
from shiftrota.models.shift import ALL_DAYS, DayOfWeek
from shiftrota.models.staffing import WeeklyStaffingNeeds
from shiftrota.utils.logging_setup import get_logger, log_function_call

from .labels import label_implies_bartender, normalize_slot_label
from .timeutils import time_to_minutes

logger = get_logger("shiftrota.solver.staffing")

NOON = 12 * 60

# Days on which the opener is expected to be done by noon
SHORT_OPENER_DAYS = (DayOfWeek.TUESDAY, DayOfWeek.WEDNESDAY, DayOfWeek.THURSDAY, DayOfWeek.FRIDAY)


class StaffingIssueType(str, Enum):
    MULTIPLE_OPENERS_AT_OPEN = "multiple_openers_at_open"
    BAR_STARTS_TOO_EARLY = "bar_starts_too_early"
    OPENER_ENDS_TOO_LATE = "opener_ends_too_late"


@dataclass(frozen=True)
class StaffingIssue:
    day: DayOfWeek
    type: StaffingIssueType
    message: str

    def to_dict(self) -> dict:
        return {"day": self.day.value, "type": self.type.value, "message": self.message}


@log_function_call
def validate_staffing_needs(
    needs: WeeklyStaffingNeeds,
    open_times: Optional[Dict[DayOfWeek, str]] = None,
) -> List[StaffingIssue]:
    """
    Check a staffing template for common setup mistakes.

    Monday is skipped (the business does not open then by default).

    Args:
        needs: Weekly staffing template
        open_times: Business opening time per day; defaults to RULES.business_open

    Returns:
        Issues in day order
    """
    open_times = open_times or {}
    issues = []

    for day in ALL_DAYS[1:]:
        open_time = open_times.get(day, RULES.business_open)
        open_mins = time_to_minutes(open_time)
        staffing = needs.for_day(day)
        slots = staffing.slots if staffing else []
        labelled = [
            (slot, normalize_slot_label(slot.label, day, slot.start_time, slot.end_time))
            for slot in slots
        ]

        openers = [
            slot for slot, label in labelled
            if "opener" in label.lower() and time_to_minutes(slot.start_time) == open_mins
        ]
        if len(openers) > 1:
            issues.append(StaffingIssue(
                day, StaffingIssueType.MULTIPLE_OPENERS_AT_OPEN,
                f"More than one opener starts at {open_time} on {day.label}. "
                f"This usually causes two openers to be scheduled.",
            ))

        if any(label_implies_bartender(label) and time_to_minutes(slot.start_time) < NOON
               for slot, label in labelled):
            issues.append(StaffingIssue(
                day, StaffingIssueType.BAR_STARTS_TOO_EARLY,
                f"Bar starts before noon on {day.label}. If you do not need bar coverage "
                f"in the morning, rename or move this slot.",
            ))

        if day in SHORT_OPENER_DAYS:
            opener = next(
                (slot for slot, label in labelled
                 if label == "Opener" and time_to_minutes(slot.start_time) == open_mins),
                None,
            )
            if opener is not None and time_to_minutes(opener.end_time) > NOON:
                issues.append(StaffingIssue(
                    day, StaffingIssueType.OPENER_ENDS_TOO_LATE,
                    f"Opener on {day.label} ends at {opener.end_time}. If the opener should be "
                    f"done by 12:00, shorten this slot.",
                ))

    for issue in issues:
        logger.warning(f"Staffing: {issue.message}")
    return issues
