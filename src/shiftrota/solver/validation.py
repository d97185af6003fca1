"""
Safety Net & Override Verification
==================================
Final independent passes over a week's assignments:

- ``enforce_day_policies`` re-derives date → day and strips or truncates
  anything that breaks a closure or early close.
- ``verify_overrides`` checks every employee-level override against the final
  list and reports ``rule_violation`` conflicts. It never repairs.
- ``find_double_bookings`` lists overlapping assignments of one employee on
  one date.
"""
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from shiftrota.models.overrides import VERIFIED_RULES, Exclude, Override
from shiftrota.models.schedule import (
    ConflictType,
    ScheduleAssignment,
    ScheduleConflict,
    ScheduleWarning,
    WarningType,
)
from shiftrota.models.shift import ALL_DAYS, DayOfWeek, Shift, ShiftType
from shiftrota.utils.logging_setup import get_logger, log_constraint

from .day_policy import OPEN, DayPolicy
from .slots import infer_shift_type
from .timeutils import date_for_day, day_for_date, end_minutes, time_to_minutes

logger = get_logger("shiftrota.solver.validation")


def policy_warnings(policies: Mapping[DayOfWeek, DayPolicy], monday) -> List[ScheduleWarning]:
    """One ``coverage_needed`` warning per closed or early-closing day, Monday → Sunday."""
    warnings = []
    for day in ALL_DAYS:
        text = policies.get(day, OPEN).warning_text(day)
        if text:
            warnings.append(ScheduleWarning(WarningType.COVERAGE_NEEDED, text, date=date_for_day(monday, day)))
    return warnings


def enforce_day_policies(
    assignments: Sequence[ScheduleAssignment],
    policies: Mapping[DayOfWeek, DayPolicy],
) -> Tuple[List[ScheduleAssignment], int]:
    """
    Drop assignments on closed days or starting at/after an early close, and
    truncate ends past the close.

    Returns:
        (kept assignments in original order, number removed)
    """
    kept = []
    removed = 0
    for a in assignments:
        policy = policies.get(day_for_date(a.date), OPEN)
        if policy.closed:
            removed += 1
            logger.warning(f"Safety net: removed {a.employee_id} {a.shift_id} on closed {a.date}")
            continue
        if policy.early_close and a.start_time and a.end_time:
            window = policy.clamp(a.start_time, a.end_time)
            if window is None:
                removed += 1
                logger.warning(f"Safety net: removed {a.employee_id} {a.shift_id} starting after close on {a.date}")
                continue
            if window[1] != a.end_time:
                logger.warning(f"Safety net: truncated {a.employee_id} {a.shift_id} to {window[1]} on {a.date}")
                a = replace(a, end_time=window[1])
        kept.append(a)
    return kept, removed


def assignment_type(a: ScheduleAssignment, shift_lookup: Mapping[str, Shift]) -> ShiftType:
    """Shift type of an assignment: its built shift's type, else bucketed from the start time."""
    shift = shift_lookup.get(a.shift_id)
    if shift is not None:
        return shift.shift_type
    if a.start_time:
        return infer_shift_type(a.start_time)
    if "night" in a.shift_id:
        return ShiftType.NIGHT
    return ShiftType.MORNING


def verify_overrides(
    assignments: Sequence[ScheduleAssignment],
    overrides: Iterable[Override],
    policies: Mapping[DayOfWeek, DayPolicy],
    monday,
    names: Optional[Mapping[str, str]] = None,
    shift_lookup: Optional[Mapping[str, Shift]] = None,
) -> List[ScheduleConflict]:
    """
    Report every exclude/assign/custom-time override the final list does not honor.

    Business-wide overrides are enforced by ``enforce_day_policies`` and are
    not checked here; nor is anything on a closed day.
    """
    names = names or {}
    shift_lookup = shift_lookup or {}
    conflicts = []

    for o in overrides:
        if not isinstance(o, VERIFIED_RULES):
            continue
        if policies.get(o.day, OPEN).closed:
            continue

        date = date_for_day(monday, o.day)
        name = names.get(o.employee_id, o.employee_id)
        theirs = [a for a in assignments if a.employee_id == o.employee_id and a.date == date]
        matching = [a for a in theirs if o.shift_type.matches(assignment_type(a, shift_lookup))]
        what = "" if o.shift_type is ShiftType.ANY else f" {o.shift_type.value}"

        if isinstance(o, Exclude):
            ok = not matching
            message = f"{name} is scheduled{what} on {o.day.label} despite being excluded"
            shift_id = matching[0].shift_id if matching else ""
        else:
            ok = bool(matching)
            if theirs and not matching:
                message = f"{name} should work{what} on {o.day.label} but is scheduled for a different shift"
            else:
                message = f"{name} should work{what} on {o.day.label} but is not scheduled"
            shift_id = theirs[0].shift_id if theirs else ""

        log_constraint(logger, o.describe(names), ok)
        if not ok:
            conflicts.append(ScheduleConflict(
                type=ConflictType.RULE_VIOLATION,
                shift_id=shift_id,
                date=date,
                message=message,
                employee_id=o.employee_id,
            ))

    return conflicts


def find_double_bookings(
    assignments: Sequence[ScheduleAssignment],
) -> List[Tuple[ScheduleAssignment, ScheduleAssignment]]:
    """Pairs of timed assignments of the same employee on the same date that overlap."""
    by_key: Dict[Tuple[str, str], List[ScheduleAssignment]] = {}
    for a in assignments:
        if a.start_time and a.end_time:
            by_key.setdefault((a.employee_id, a.date), []).append(a)

    clashes = []
    for items in by_key.values():
        for i, first in enumerate(items):
            for second in items[i + 1:]:
                if (time_to_minutes(first.start_time) < end_minutes(second.start_time, second.end_time)
                        and time_to_minutes(second.start_time) < end_minutes(first.start_time, first.end_time)):
                    clashes.append((first, second))
    return clashes
