"""
Assignment Engine
=================
Greedy weekly shift allocation.

Stages, in order:
    1. Day policies (closures/early close) from the override list
    2. Shift building per day
    3. Seeding: carried-over locked shifts, then fixed employee schedules
    4. Per day: custom-time synthesis, then assign_shift for every shift,
       then the follow-up queue of synthesized coverage shifts
    5. Bartender gap-fill
    6. Safety net and override verification
    7. Under-hours/overtime warnings

Every stage only fills employee/date pairs that are still empty.
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Dict, Iterable, List, Optional, Sequence, Union

from shiftrota.models.employee import Employee, SetScheduleEntry
from shiftrota.models.options import SchedulerOptions
from shiftrota.models.overrides import CustomTime, Override, parse_overrides
from shiftrota.models.rules import RULES
from shiftrota.models.schedule import (
    ConflictType,
    LockedShift,
    ScheduleAssignment,
    ScheduleConflict,
    ScheduleWarning,
    WarningType,
    WeeklySchedule,
)
from shiftrota.models.shift import ALL_DAYS, DayOfWeek, Shift, ShiftType
from shiftrota.models.staffing import WeeklyStaffingNeeds
from shiftrota.utils.logging_setup import SolverLogger, get_logger
from shiftrota.utils.structured_logging import get_structured_logger

from .availability import check_restrictions, has_min_rest, is_available
from .coverage import fill_bartender_gaps
from .day_policy import OPEN, DayPolicy, compute_day_policies
from .ledger import AssignmentLedger
from .overrides import DayOverrides, plan_custom_time, resolve_overrides
from .slots import build_week_shifts
from .stats import calculate_employee_stats
from .timeutils import (
    date_for_day,
    duration_hours,
    format_span,
    time_to_minutes,
    week_start,
)
from .validation import (
    assignment_type,
    enforce_day_policies,
    find_double_bookings,
    policy_warnings,
    verify_overrides,
)

logger = get_logger("shiftrota.solver.engine")
slog = SolverLogger("shiftrota.solver.engine")


@dataclass
class WeekState:
    """Everything the per-shift assignment step reads and updates."""
    monday: date_type
    roster: List[Employee]
    options: SchedulerOptions
    policies: Dict[DayOfWeek, DayPolicy]
    day_overrides: Dict[DayOfWeek, DayOverrides]
    ledger: AssignmentLedger
    shift_lookup: Dict[str, Shift] = field(default_factory=dict)
    consumed: List[CustomTime] = field(default_factory=list)
    conflicts: List[ScheduleConflict] = field(default_factory=list)
    warnings: List[ScheduleWarning] = field(default_factory=list)

    def __post_init__(self):
        self.by_id = {e.id: e for e in self.roster}

    def warn_once(self, warning: ScheduleWarning) -> None:
        if warning not in self.warnings:
            self.warnings.append(warning)


def lock_bucket(assignment: ScheduleAssignment) -> ShiftType:
    """Morning/night bucket of a prior assignment, as LockedShift sees it."""
    if assignment.start_time:
        if time_to_minutes(assignment.start_time) // 60 >= RULES.lock_night_from_hour:
            return ShiftType.NIGHT
        return ShiftType.MORNING
    return ShiftType.NIGHT if "night" in assignment.shift_id else ShiftType.MORNING


def lock_matches(lock: LockedShift, assignment: ScheduleAssignment, shift_lookup: Dict[str, Shift]) -> bool:
    """True if ``assignment`` is the one ``lock`` pins: same bucket, or same shift type (mid)."""
    if assignment.employee_id != lock.employee_id:
        return False
    return (lock.shift_type.matches(lock_bucket(assignment))
            or lock.shift_type.matches(assignment_type(assignment, shift_lookup)))


# ========== Seeding ==========

def seed_locked_shifts(
    state: WeekState,
    locked_shifts: Iterable[LockedShift],
    existing_assignments: Sequence[ScheduleAssignment],
) -> int:
    """
    Carry pinned assignments over from the previous run.

    The matching prior assignment is copied verbatim, except that its end is
    truncated on an early-closed day; it is dropped on a closed day or when it
    starts at/after the close.
    """
    seeded = 0
    for lock in locked_shifts:
        emp = state.by_id.get(lock.employee_id)
        if emp is None:
            logger.debug(f"Lock for unknown/inactive employee {lock.employee_id} skipped")
            continue
        policy = state.policies.get(lock.day, OPEN)
        if policy.closed:
            continue

        date = date_for_day(state.monday, lock.day)
        prior = next(
            (a for a in existing_assignments
             if a.date == date and lock_matches(lock, a, state.shift_lookup)),
            None,
        )
        if prior is None:
            logger.info(f"Lock {emp.name} {lock.day.label} {lock.shift_type.value}: no matching prior assignment")
            continue
        if state.ledger.is_assigned(emp.id, date):
            continue

        assignment = prior
        if prior.start_time and prior.end_time:
            window = policy.clamp(prior.start_time, prior.end_time)
            if window is None:
                logger.info(f"Lock {emp.name} {lock.day.label}: dropped, starts after close")
                continue
            if window[1] != prior.end_time:
                assignment = ScheduleAssignment(prior.shift_id, prior.employee_id, prior.date, *window)

        hours = None
        if not (assignment.start_time and assignment.end_time):
            shift = state.shift_lookup.get(assignment.shift_id)
            hours = shift.duration if shift else 0.0
        if state.ledger.add(assignment, hours):
            seeded += 1
            slog.detail("locked", f"{emp.name} {lock.day.label} {assignment.shift_id}")
    return seeded


def _set_schedule_times(
    entry: SetScheduleEntry,
    staffing_needs: Optional[WeeklyStaffingNeeds],
) -> tuple:
    if entry.start_time and entry.end_time:
        return entry.start_time, entry.end_time
    day_staffing = staffing_needs.for_day(entry.day) if staffing_needs else None
    if entry.shift_type is ShiftType.NIGHT:
        return (
            (day_staffing and day_staffing.night_start) or RULES.night_start,
            (day_staffing and day_staffing.night_end) or RULES.night_end,
        )
    return (
        (day_staffing and day_staffing.morning_start) or RULES.morning_start,
        (day_staffing and day_staffing.morning_end) or RULES.morning_end,
    )


def seed_set_schedules(
    state: WeekState,
    shifts_by_day: Dict[DayOfWeek, List[Shift]],
    staffing_needs: Optional[WeeklyStaffingNeeds],
) -> int:
    """
    Apply fixed per-employee schedules, day by day in roster order.

    An entry whose times equal a built shift of the same bucket takes a seat
    on that shift; otherwise it becomes its own fixed assignment.
    """
    seeded = 0
    for day in ALL_DAYS:
        policy = state.policies.get(day, OPEN)
        if policy.closed:
            continue
        date = date_for_day(state.monday, day)
        overrides = state.day_overrides[day]

        for emp in state.roster:
            for entry in emp.set_schedule:
                if entry.day is not day or state.ledger.is_assigned(emp.id, date):
                    continue
                if overrides.is_excluded(emp.id, entry.shift_type):
                    logger.debug(f"{emp.name}: fixed {day.label} {entry.shift_type.value} excluded by override")
                    continue
                if any(x.contains(date) for x in emp.exclusions):
                    continue

                window = policy.clamp(*_set_schedule_times(entry, staffing_needs))
                if window is None:
                    continue
                start, end = window

                shift_id = f"{day.short}-fixed-{emp.id}-{entry.shift_type.value}"
                for shift in shifts_by_day.get(day, []):
                    if (shift.start_time, shift.end_time) == (start, end) \
                            and entry.shift_type.matches(shift.shift_type) \
                            and state.ledger.filled(date, shift.id) < shift.required_staff:
                        shift_id = shift.id
                        break

                if state.ledger.add(ScheduleAssignment(shift_id, emp.id, date, start, end)):
                    seeded += 1
                    slog.detail("fixed", f"{emp.name} {day.label} {format_span(start, end)}")
    return seeded


# ========== Per-shift assignment ==========

def _eligible(state: WeekState, emp: Employee, shift: Shift, date: str) -> bool:
    day = shift.day
    if state.ledger.is_assigned(emp.id, date):
        return False
    if state.day_overrides[day].is_excluded(emp.id, shift.shift_type):
        return False
    if shift.requires_solo and emp.alone_scale < state.options.alone_threshold:
        logger.trace(f"{emp.name} rejected for {shift.id}: aloneScale {emp.alone_scale} below solo threshold")
        return False
    check = check_restrictions(emp, day, shift.start_time, shift.end_time)
    if not check.allowed:
        logger.trace(f"{emp.name} rejected for {shift.id}: {check.reason}")
        return False
    if not is_available(emp, day, date, shift.shift_type, shift.start_time):
        return False
    return has_min_rest(
        state.monday, emp.id, date, shift.start_time, shift.end_time,
        state.options.min_rest_between_shifts_hours, state.ledger.assignments,
    )


def assign_shift(shift: Shift, date: str, state: WeekState) -> List[ScheduleAssignment]:
    """
    Fill the open seats of one shift.

    Forced overrides go first and bypass availability and restrictions;
    exclude still outranks them. Remaining seats go to eligible candidates,
    prioritized employees first, then fewest hours so far (roster order on
    ties). Seats still open afterwards become a ``no_coverage`` conflict.
    """
    state.shift_lookup.setdefault(shift.id, shift)
    overrides = state.day_overrides[shift.day]
    remaining = shift.required_staff - state.ledger.filled(date, shift.id)
    added: List[ScheduleAssignment] = []
    if remaining <= 0:
        return added

    def take(emp: Employee) -> None:
        nonlocal remaining
        a = ScheduleAssignment(shift.id, emp.id, date, shift.start_time, shift.end_time)
        if state.ledger.add(a, shift.duration):
            added.append(a)
            remaining -= 1

    # a. Forced
    if shift.reserved_for:
        forced_ids = [shift.reserved_for]
    else:
        forced_ids = [o.employee_id for o in overrides.forced_for(shift.shift_type, state.consumed)]
    for emp_id in forced_ids:
        if remaining <= 0:
            break
        emp = state.by_id.get(emp_id)
        if emp is None:
            logger.debug(f"Forced employee {emp_id} not on the active roster")
            continue
        if state.ledger.is_assigned(emp_id, date):
            continue
        if overrides.is_excluded(emp_id, shift.shift_type):
            slog.constraint(f"{emp.name} forced onto {shift.id}", False, "excluded by override")
            continue
        take(emp)
        slog.detail("forced", f"{emp.name} → {shift.id}")

    # b-d. Candidates
    if remaining > 0 and not shift.reserved_for:
        prioritized = set(overrides.prioritized_ids(shift.shift_type))
        candidates = [e for e in state.roster if _eligible(state, e, shift, date)]
        candidates.sort(key=lambda e: (0, 0.0) if e.id in prioritized else (1, state.ledger.hours.get(e.id, 0.0)))
        for emp in candidates:
            if remaining <= 0:
                break
            take(emp)

    if remaining > 0:
        filled = shift.required_staff - remaining
        state.conflicts.append(ScheduleConflict(
            type=ConflictType.NO_COVERAGE,
            shift_id=shift.id,
            date=date,
            message=f"Need {shift.required_staff} for {shift.name or shift.id} on {shift.day.label} "
                    f"({format_span(shift.start_time, shift.end_time)}), only found {filled}",
            start_time=shift.start_time,
            end_time=shift.end_time,
        ))
        logger.warning(f"{shift.day.label} {shift.id}: {remaining} seat(s) unfilled")
    return added


def _apply_custom_times(
    state: WeekState,
    day: DayOfWeek,
    date: str,
    shifts: List[Shift],
    follow_up: deque,
) -> None:
    """Split or add shifts for the day's custom-time overrides."""
    policy = state.policies.get(day, OPEN)
    overrides = state.day_overrides[day]
    primary = list(shifts)

    for ct in overrides.custom_times:
        emp = state.by_id.get(ct.employee_id)
        if emp is None or state.ledger.is_assigned(emp.id, date):
            continue
        if overrides.is_excluded(emp.id, ct.shift_type):
            continue
        plan = plan_custom_time(ct, emp, primary, policy)
        if plan is None:
            continue

        if not plan.is_split:
            # Filled right away so the employee is not drawn into a regular shift first
            state.consumed.append(ct)
            assign_shift(plan.shift, date, state)
            continue

        base = plan.shift
        if state.ledger.filled(date, base.id) >= base.required_staff:
            logger.debug(f"{emp.name}: {base.id} already full, custom time left to forced pass")
            continue

        start, end = plan.worked
        state.ledger.add(ScheduleAssignment(base.id, emp.id, date, start, end), duration_hours(start, end))
        state.consumed.append(ct)
        follow_up.append(plan.coverage)
        state.shift_lookup.setdefault(plan.coverage.id, plan.coverage)
        state.warnings.append(ScheduleWarning(
            type=WarningType.COVERAGE_NEEDED,
            message=f"{plan.coverage.name}: {format_span(plan.coverage.start_time, plan.coverage.end_time)} "
                    f"on {day.label} needs coverage",
            employee_id=emp.id,
            date=date,
        ))
        slog.detail("split", f"{emp.name} works {format_span(start, end)} of {base.id}")


def _hours_warnings(state: WeekState, assignments: Sequence[ScheduleAssignment]) -> List[ScheduleWarning]:
    warnings = []
    for s in calculate_employee_stats(assignments, state.roster):
        if s.min_shifts and s.shifts < s.min_shifts:
            warnings.append(ScheduleWarning(
                WarningType.UNDER_HOURS,
                f"{s.name} wants {s.min_shifts} shifts but only scheduled for {s.shifts}",
                employee_id=s.employee_id,
            ))
        if s.hours > state.options.overtime_threshold_hours:
            warnings.append(ScheduleWarning(
                WarningType.OVERTIME,
                f"{s.name} is at {s.hours:.1f} hours (approaching overtime)",
                employee_id=s.employee_id,
            ))
    return warnings


# ========== Entry point ==========

def generate_schedule(
    week_anchor: Union[date_type, str],
    overrides: Iterable[Union[dict, Override]] = (),
    employees: Sequence[Employee] = (),
    staffing_needs: Optional[WeeklyStaffingNeeds] = None,
    locked_shifts: Iterable[LockedShift] = (),
    existing_assignments: Sequence[ScheduleAssignment] = (),
    options: Optional[SchedulerOptions] = None,
) -> WeeklySchedule:
    """
    Build one week's schedule from scratch.

    Inputs are never mutated. Constraint failures come back as conflicts and
    warnings on the result.

    Args:
        week_anchor: Any date in the target week
        overrides: Override variants or their wire dicts, in insertion order
        employees: Roster; inactive employees are ignored
        staffing_needs: Week template; None uses the fallback template
        locked_shifts: Pins to carry over from ``existing_assignments``
        existing_assignments: The previous run's assignments
        options: Thresholds; defaults to SchedulerOptions()

    Returns:
        WeeklySchedule
    """
    options = options or SchedulerOptions()
    monday = week_start(week_anchor)
    overrides = parse_overrides(overrides)
    roster = [e for e in employees if e.is_active]

    slog.phase("Day Policies")
    policies = compute_day_policies(overrides)
    state = WeekState(
        monday=monday,
        roster=roster,
        options=options,
        policies=policies,
        day_overrides=resolve_overrides(overrides),
        ledger=AssignmentLedger(e.id for e in roster),
    )
    logger.info(f"Week of {monday.isoformat()}: {len(roster)} active employees, {len(overrides)} overrides")

    slog.phase("Building Shifts")
    shifts_by_day = build_week_shifts(staffing_needs, policies)
    for day_shifts in shifts_by_day.values():
        for shift in day_shifts:
            state.shift_lookup[shift.id] = shift
    for w in policy_warnings(policies, monday):
        state.warn_once(w)

    slog.phase("Seeding")
    slog.step(f"Locked shifts: {seed_locked_shifts(state, locked_shifts, existing_assignments)} carried over")
    slog.step(f"Fixed schedules: {seed_set_schedules(state, shifts_by_day, staffing_needs)} applied")

    slog.phase("Assigning Shifts")
    for day in ALL_DAYS:
        if policies[day].closed:
            slog.step(f"{day.label}: closed")
            continue
        date = date_for_day(monday, day)
        shifts = list(shifts_by_day[day])
        follow_up: deque = deque()

        slog.enter(day.label)
        _apply_custom_times(state, day, date, shifts, follow_up)
        for shift in shifts:
            assign_shift(shift, date, state)
        while follow_up:
            assign_shift(follow_up.popleft(), date, state)
        slog.exit(f"{day.label}: {len(state.ledger.on_date(date))} assignments")

    slog.phase("Bartender Coverage")
    gap_fill = fill_bartender_gaps(
        state.ledger, roster, monday, policies, state.day_overrides,
        options.bartending_threshold, options.min_rest_between_shifts_hours,
    )
    state.warnings.extend(gap_fill.warnings)
    state.conflicts.extend(gap_fill.conflicts)
    slog.step(f"{len(gap_fill.added)} bartender(s) added, {len(gap_fill.conflicts)} gap(s) unfilled")

    slog.phase("Verification")
    assignments, removed = enforce_day_policies(state.ledger.assignments, policies)
    slog.constraint("Closures respected before safety net", removed == 0, f"{removed} removed" if removed else "")
    for w in policy_warnings(policies, monday):
        state.warn_once(w)

    names = {e.id: e.name for e in employees}
    state.conflicts.extend(verify_overrides(
        assignments, overrides, policies, monday, names, state.shift_lookup,
    ))
    clashes = find_double_bookings(assignments)
    slog.constraint("No double booking", not clashes, f"{len(clashes)} overlap(s)" if clashes else "")

    state.warnings.extend(_hours_warnings(state, assignments))

    schedule = WeeklySchedule(
        week_start=monday.isoformat(),
        assignments=assignments,
        conflicts=state.conflicts,
        warnings=state.warnings,
    )
    get_structured_logger("shiftrota.solver.engine").info(
        "schedule_generated",
        week_start=schedule.week_start,
        assignments=len(assignments),
        conflicts=len(schedule.conflicts),
        warnings=len(schedule.warnings),
    )
    return schedule
