"""
Bartender Coverage Gap-Fill
===========================
Every employee rated below the bartending threshold must be shadowed, for
their whole shift, by at least one qualified employee working at the same
time. For each date this pass intersects the low-skill intervals with the
union of bartender intervals, and fills each uncovered gap from the full
roster or reports a ``no_bartender`` conflict.

The per-date assignment list is re-read after every insertion, so a
bartender added for one gap also covers (and is not re-added for) later gaps.
"""
from dataclasses import dataclass
from datetime import date as date_type
from typing import Dict, List, Optional, Sequence

from shiftrota.models.employee import Employee
from shiftrota.models.schedule import (
    ConflictType,
    ScheduleAssignment,
    ScheduleConflict,
    ScheduleWarning,
    WarningType,
)
from shiftrota.models.shift import ALL_DAYS, DayOfWeek
from shiftrota.utils.logging_setup import get_logger, log_constraint

from .availability import check_restrictions, has_min_rest, is_available
from .day_policy import OPEN, DayPolicy
from .ledger import AssignmentLedger
from .overrides import DayOverrides
from .slots import infer_shift_type
from .timeutils import (
    Interval,
    date_for_day,
    end_minutes,
    format_span,
    merge_intervals,
    minutes_to_time,
    subtract_intervals,
    time_to_minutes,
)

logger = get_logger("shiftrota.solver.coverage")


@dataclass
class GapFillResult:
    added: List[ScheduleAssignment]
    conflicts: List[ScheduleConflict]
    warnings: List[ScheduleWarning]


def _interval(a: ScheduleAssignment) -> Interval:
    return time_to_minutes(a.start_time), end_minutes(a.start_time, a.end_time)


def bartender_intervals(
    assignments: Sequence[ScheduleAssignment],
    by_id: Dict[str, Employee],
    threshold: int,
    exclude_employee: Optional[str] = None,
) -> List[Interval]:
    """Merged intervals during which at least one bartender is present."""
    intervals = [
        _interval(a) for a in assignments
        if a.start_time and a.end_time
        and a.employee_id != exclude_employee
        and a.employee_id in by_id
        and by_id[a.employee_id].is_bartender(threshold)
    ]
    return merge_intervals(intervals)


def find_coverage_gaps(
    low: ScheduleAssignment,
    assignments: Sequence[ScheduleAssignment],
    by_id: Dict[str, Employee],
    threshold: int,
) -> List[Interval]:
    """Sub-intervals of ``low``'s shift with no bartender on the floor."""
    covered = bartender_intervals(assignments, by_id, threshold, exclude_employee=low.employee_id)
    return subtract_intervals(_interval(low), covered)


def _find_gap_bartender(
    roster: Sequence[Employee],
    ledger: AssignmentLedger,
    monday: date_type,
    day: DayOfWeek,
    date: str,
    start: str,
    end: str,
    overrides: DayOverrides,
    threshold: int,
    min_rest_hours: float,
) -> Optional[Employee]:
    shift_type = infer_shift_type(start)
    for emp in roster:
        if not emp.is_bartender(threshold):
            continue
        if ledger.is_assigned(emp.id, date):
            continue
        if overrides.is_excluded(emp.id, shift_type):
            continue
        if not check_restrictions(emp, day, start, end).allowed:
            continue
        if not is_available(emp, day, date, shift_type, start):
            continue
        if not has_min_rest(monday, emp.id, date, start, end, min_rest_hours, ledger.assignments):
            continue
        return emp
    return None


def fill_bartender_gaps(
    ledger: AssignmentLedger,
    roster: Sequence[Employee],
    monday: date_type,
    policies: Dict[DayOfWeek, DayPolicy],
    day_overrides: Dict[DayOfWeek, DayOverrides],
    threshold: int,
    min_rest_hours: float = 0.0,
) -> GapFillResult:
    """
    Run the gap-fill pass over the whole week, Monday → Sunday.

    New assignments go straight into ``ledger``.
    """
    by_id = {e.id: e for e in roster}
    result = GapFillResult(added=[], conflicts=[], warnings=[])

    for day in ALL_DAYS:
        if policies.get(day, OPEN).closed:
            continue
        date = date_for_day(monday, day)

        low_skill = [
            a for a in ledger.on_date(date)
            if a.start_time and a.end_time
            and a.employee_id in by_id
            and not by_id[a.employee_id].is_bartender(threshold)
        ]

        for low in low_skill:
            low_name = by_id[low.employee_id].name
            gaps = find_coverage_gaps(low, ledger.on_date(date), by_id, threshold)
            log_constraint(logger, f"Bartender covers {low_name} on {day.label}", not gaps,
                           f"{len(gaps)} gap(s)" if gaps else "")

            for gap_start, gap_end in gaps:
                start, end = minutes_to_time(gap_start), minutes_to_time(gap_end)
                span = format_span(start, end)
                bartender = _find_gap_bartender(
                    roster, ledger, monday, day, date, start, end,
                    day_overrides[day], threshold, min_rest_hours,
                )

                if bartender is None:
                    result.conflicts.append(ScheduleConflict(
                        type=ConflictType.NO_BARTENDER,
                        shift_id=low.shift_id,
                        date=date,
                        message=f"No bartender available to cover {low_name} ({span}) on {day.label}",
                        employee_id=low.employee_id,
                        start_time=start,
                        end_time=end,
                    ))
                    continue

                added = ScheduleAssignment(
                    shift_id=f"{day.short}-bartender-gap-{bartender.id}-{start.replace(':', '')}",
                    employee_id=bartender.id,
                    date=date,
                    start_time=start,
                    end_time=end,
                )
                if ledger.add(added):
                    result.added.append(added)
                    result.warnings.append(ScheduleWarning(
                        type=WarningType.COVERAGE_NEEDED,
                        message=f"Auto-added {bartender.name} ({span}) to cover {low_name} on {day.label}",
                        employee_id=bartender.id,
                        date=date,
                    ))
                    logger.info(f"{day.label}: added {bartender.name} {span} to cover {low_name}")

    return result
