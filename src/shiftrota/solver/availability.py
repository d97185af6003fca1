"""
Availability & Restriction Evaluator
====================================
Decides whether an employee may take a candidate shift. Fails closed: an
exclusion covering the date, or a missing/unavailable day record, rejects.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from shiftrota.models.employee import Employee, RestrictionType
from shiftrota.models.schedule import ScheduleAssignment
from shiftrota.models.shift import DayOfWeek, ShiftType
from shiftrota.utils.logging_setup import get_logger

from .timeutils import (
    end_minutes,
    format_time_label,
    in_range,
    ranges_overlap,
    time_to_minutes,
    week_minutes,
)

logger = get_logger("shiftrota.solver.availability")


@dataclass(frozen=True)
class RestrictionCheck:
    allowed: bool
    reason: Optional[str] = None


ALLOWED = RestrictionCheck(True)


def is_available(
    employee: Employee,
    day: DayOfWeek,
    date: str,
    shift_type: ShiftType,
    start_time: str,
) -> bool:
    """
    Check declared availability for a shift starting at ``start_time``.

    An entry matches when its type is ``any`` or equals ``shift_type`` (and the
    shift starts no earlier than the entry's optional start bound), or when a
    ``custom`` entry's own range contains ``start_time``.
    """
    for exclusion in employee.exclusions:
        if exclusion.contains(date):
            return False

    day_avail = employee.day_availability(day)
    if day_avail is None or not day_avail.available:
        return False

    start = time_to_minutes(start_time)
    for entry in day_avail.shifts:
        if entry.type is ShiftType.ANY or entry.type is shift_type:
            if entry.start_time and start < time_to_minutes(entry.start_time):
                continue
            return True
        if entry.type is ShiftType.CUSTOM and entry.start_time and entry.end_time:
            if in_range(start_time, entry.start_time, entry.end_time):
                return True

    return False


def check_restrictions(
    employee: Employee,
    day: DayOfWeek,
    shift_start: str,
    shift_end: str,
) -> RestrictionCheck:
    """
    Evaluate the employee's hard restrictions for [shift_start, shift_end).

    The first violated restriction wins.
    """
    start = time_to_minutes(shift_start)
    end = end_minutes(shift_start, shift_end)

    for r in employee.restrictions:
        if not r.applies_to(day):
            continue

        if r.type is RestrictionType.NO_BEFORE and r.time:
            if start < time_to_minutes(r.time):
                return RestrictionCheck(False, _reason(f"Can't start before {format_time_label(r.time)}", r.reason))

        elif r.type is RestrictionType.NO_AFTER and r.time:
            if end > time_to_minutes(r.time):
                return RestrictionCheck(False, _reason(f"Can't work after {format_time_label(r.time)}", r.reason))

        elif r.type is RestrictionType.UNAVAILABLE_RANGE and r.start_time and r.end_time:
            if ranges_overlap(shift_start, shift_end, r.start_time, r.end_time):
                span = f"{format_time_label(r.start_time)}-{format_time_label(r.end_time)}"
                return RestrictionCheck(False, _reason(f"Unavailable {span}", r.reason))

    return ALLOWED


def _reason(message: str, detail: str) -> str:
    return f"{message} ({detail})" if detail else message


def has_min_rest(
    monday: date,
    employee_id: str,
    candidate_date: str,
    candidate_start: str,
    candidate_end: str,
    min_rest_hours: float,
    existing: Iterable[ScheduleAssignment],
) -> bool:
    """
    True if the candidate does not overlap and leaves at least
    ``min_rest_hours`` between it and every timed assignment of the employee.
    """
    min_rest = max(0.0, min_rest_hours) * 60
    if min_rest == 0:
        return True

    cand_start = week_minutes(monday, candidate_date, candidate_start)
    cand_end = cand_start + end_minutes(candidate_start, candidate_end) - time_to_minutes(candidate_start)

    for a in existing:
        if a.employee_id != employee_id or not a.start_time or not a.end_time:
            continue
        a_start = week_minutes(monday, a.date, a.start_time)
        a_end = a_start + end_minutes(a.start_time, a.end_time) - time_to_minutes(a.start_time)

        if cand_start < a_end and cand_end > a_start:
            return False
        if cand_start >= a_end and cand_start - a_end < min_rest:
            return False
        if a_start >= cand_end and a_start - cand_end < min_rest:
            return False

    return True
