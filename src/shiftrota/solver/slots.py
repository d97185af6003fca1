"""
Shift Slot Builder
==================
Turns a day's staffing requirement into concrete candidate shifts, applying
closures and early-close truncation before any assignment happens.

Slot form: one shift per slot, capacity 1, type inferred from the start hour
(<12 morning, >=15 night, otherwise mid); only night shifts require a
bartender. Legacy form: a "Morning Shift" and/or "Night Shift" with the
declared headcount.

After truncation, shifts that run alone for any stretch are marked
``requires_solo``.
"""
from dataclasses import replace
from typing import Dict, List, Optional

from shiftrota.models.rules import RULES
from shiftrota.models.shift import ALL_DAYS, DayOfWeek, Shift, ShiftType
from shiftrota.models.staffing import DayStaffing, WeeklyStaffingNeeds
from shiftrota.utils.logging_setup import get_logger, log_function_call

from .day_policy import OPEN, DayPolicy
from .labels import normalize_slot_label
from .timeutils import duration_hours, format_span, time_to_minutes

logger = get_logger("shiftrota.solver.slots")


def infer_shift_type(start_time: str) -> ShiftType:
    hour = time_to_minutes(start_time) // 60
    if hour < RULES.morning_before_hour:
        return ShiftType.MORNING
    if hour >= RULES.night_from_hour:
        return ShiftType.NIGHT
    return ShiftType.MID


def fallback_day_staffing(day: DayOfWeek) -> DayStaffing:
    """Legacy-form staffing used when no staffing data was supplied at all."""
    morning, night = RULES.fallback_staffing[day.value]
    return DayStaffing(morning=morning, night=night)


def _candidate_shifts(day: DayOfWeek, staffing: DayStaffing) -> List[Shift]:
    if staffing.slots:
        shifts = []
        for slot in staffing.slots:
            shift_type = infer_shift_type(slot.start_time)
            shifts.append(Shift(
                id=slot.id,
                day=day,
                shift_type=shift_type,
                start_time=slot.start_time,
                end_time=slot.end_time,
                required_staff=1,
                name=normalize_slot_label(slot.label, day, slot.start_time, slot.end_time),
                requires_bartender=shift_type is ShiftType.NIGHT,
            ))
        return shifts

    shifts = []
    if staffing.morning:
        shifts.append(Shift(
            id=f"{day.short}-morning",
            day=day,
            shift_type=ShiftType.MORNING,
            start_time=staffing.morning_start or RULES.morning_start,
            end_time=staffing.morning_end or RULES.morning_end,
            required_staff=staffing.morning,
            name="Morning Shift",
        ))
    if staffing.night:
        shifts.append(Shift(
            id=f"{day.short}-night",
            day=day,
            shift_type=ShiftType.NIGHT,
            start_time=staffing.night_start or RULES.night_start,
            end_time=staffing.night_end or RULES.night_end,
            required_staff=staffing.night,
            name="Night Shift",
            requires_bartender=True,
        ))
    return shifts


def apply_policy(shift: Shift, policy: DayPolicy) -> Optional[Shift]:
    """Truncate a shift to the day's policy, or drop it (None)."""
    window = policy.clamp(shift.start_time, shift.end_time)
    if window is None:
        return None
    start, end = window
    if duration_hours(start, end) <= 0:
        return None
    if (start, end) != (shift.start_time, shift.end_time):
        logger.debug(f"{shift.id}: truncated to {format_span(start, end)} (early close)")
        shift = replace(shift, start_time=start, end_time=end)
    return shift


def mark_solo_shifts(shifts: List[Shift]) -> List[Shift]:
    """
    Copy of ``shifts`` with ``requires_solo`` set on every shift that is the
    only one running during some stretch of the day.

    The day is cut at every start and end; each piece is probed at its
    midpoint. Multi-seat shifts and shifts without a positive same-day span
    are never solo.
    """
    spans = {}
    for i, s in enumerate(shifts):
        start, end = time_to_minutes(s.start_time), time_to_minutes(s.end_time)
        if start < end:
            spans[i] = (start, end)

    solo = set()
    cuts = sorted({m for span in spans.values() for m in span})
    for lo, hi in zip(cuts, cuts[1:]):
        mid = (lo + hi) // 2
        active = [i for i, (start, end) in spans.items() if start <= mid < end]
        if len(active) == 1 and shifts[active[0]].required_staff == 1:
            solo.add(active[0])

    return [replace(s, requires_solo=i in solo) for i, s in enumerate(shifts)]


def build_day_shifts(day: DayOfWeek, staffing: Optional[DayStaffing], policy: DayPolicy = OPEN) -> List[Shift]:
    """Concrete shifts for one day after closure/early-close filtering, solo stretches marked."""
    if policy.closed or staffing is None:
        return []
    shifts = []
    for shift in _candidate_shifts(day, staffing):
        kept = apply_policy(shift, policy)
        if kept is None:
            logger.debug(f"{shift.id}: dropped, starts at/after close on {day.label}")
            continue
        shifts.append(kept)
    return mark_solo_shifts(shifts)


@log_function_call
def build_week_shifts(
    needs: Optional[WeeklyStaffingNeeds],
    policies: Dict[DayOfWeek, DayPolicy],
) -> Dict[DayOfWeek, List[Shift]]:
    """
    Shifts for every day, Monday → Sunday.

    With ``needs`` None the fallback template applies (an explicit
    degradation, not an error).
    """
    if needs is None:
        logger.warning("No staffing data supplied, using fallback template")

    result = {}
    for day in ALL_DAYS:
        staffing = fallback_day_staffing(day) if needs is None else needs.for_day(day)
        result[day] = build_day_shifts(day, staffing, policies.get(day, OPEN))
        logger.debug(f"{day.label}: {len(result[day])} shifts")
    return result
