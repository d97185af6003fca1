"""
Override Resolver
=================
Groups employee-level overrides by day and answers, for a given shift, which
employees are forced, excluded or preferred. Also plans partial-day
(custom-time) coverage: an employee arriving late or leaving early takes the
part of a shift they actually work, and a synthetic capacity-1 shift is
queued for the remainder.

Precedence: business-wide closure/early-close (handled by DayPolicy) >
exclude > assign/custom_time > prioritize.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from shiftrota.models.employee import Employee
from shiftrota.models.overrides import FORCED_RULES, Assign, CustomTime, Exclude, Override, Prioritize
from shiftrota.models.shift import ALL_DAYS, DayOfWeek, Shift, ShiftType
from shiftrota.utils.logging_setup import get_logger

from .day_policy import OPEN, DayPolicy
from .slots import infer_shift_type
from .timeutils import format_span, time_to_minutes

logger = get_logger("shiftrota.solver.overrides")

Forced = Union[Assign, CustomTime]


@dataclass
class DayOverrides:
    """Employee-level overrides for one day, in their original order."""
    day: DayOfWeek
    excludes: List[Exclude] = field(default_factory=list)
    forced: List[Forced] = field(default_factory=list)
    prioritized: List[Prioritize] = field(default_factory=list)

    @property
    def custom_times(self) -> List[CustomTime]:
        return [o for o in self.forced if isinstance(o, CustomTime)]

    def is_excluded(self, employee_id: str, shift_type: ShiftType) -> bool:
        return any(
            o.employee_id == employee_id and o.shift_type.matches(shift_type)
            for o in self.excludes
        )

    def forced_for(self, shift_type: ShiftType, consumed: Iterable[Forced] = ()) -> List[Forced]:
        """Assign/custom-time overrides applying to a shift type, minus consumed ones."""
        consumed = list(consumed)
        return [
            o for o in self.forced
            if o.shift_type.matches(shift_type) and not any(o is c for c in consumed)
        ]

    def prioritized_ids(self, shift_type: ShiftType) -> List[str]:
        return [o.employee_id for o in self.prioritized if o.shift_type.matches(shift_type)]


def resolve_overrides(overrides: Iterable[Override]) -> Dict[DayOfWeek, DayOverrides]:
    """Bucket employee-level overrides by day, Monday → Sunday, keeping order."""
    result = {day: DayOverrides(day) for day in ALL_DAYS}
    for o in overrides:
        if isinstance(o, Exclude):
            result[o.day].excludes.append(o)
        elif isinstance(o, FORCED_RULES):
            result[o.day].forced.append(o)
        elif isinstance(o, Prioritize):
            result[o.day].prioritized.append(o)
    return result


@dataclass(frozen=True)
class CustomTimePlan:
    """
    How a custom-time override is realized.

    For a split, ``shift`` is the existing shift the employee takes a seat on
    for ``worked`` and ``coverage`` is the synthetic remainder shift. For a
    standalone custom shift, ``shift`` is the new reserved shift and
    ``coverage`` is None.
    """
    override: CustomTime
    shift: Shift
    worked: Tuple[str, str]
    coverage: Optional[Shift] = None

    @property
    def is_split(self) -> bool:
        return self.coverage is not None


def _custom_shift_type(start: str, end: str) -> ShiftType:
    start_hour = time_to_minutes(start) // 60
    end_hour = time_to_minutes(end) // 60
    if start_hour >= 14 or (start_hour >= 12 and end_hour >= 17):
        return ShiftType.NIGHT
    return ShiftType.MORNING


def _coverage_shift(base: Shift, employee: Employee, start: str, end: str, leaving_early: bool) -> Shift:
    verb = "leaves" if leaving_early else "arrives"
    return Shift(
        id=f"{base.id}-cover-{employee.id}",
        day=base.day,
        shift_type=infer_shift_type(start),
        start_time=start,
        end_time=end,
        required_staff=1,
        name=f"Cover {format_span(start, end)} ({employee.name} {verb} {'early' if leaving_early else 'late'})",
        requires_bartender=base.requires_bartender,
    )


def plan_custom_time(
    override: CustomTime,
    employee: Employee,
    shifts: List[Shift],
    policy: DayPolicy = OPEN,
) -> Optional[CustomTimePlan]:
    """
    Decide how a custom-time override lands on the day's shifts.

    - Leaving early (end inside a shift, start absent or equal to the shift's
      start): work [shift.start, end], cover [end, shift.end].
    - Arriving late (start inside a shift, end absent or equal to the shift's
      end): work [start, shift.end], cover [shift.start, start].
    - Both times given and adjacent to no shift: one standalone custom shift
      reserved for the employee.

    Returns None when nothing applies; the override then behaves like an
    assign override in the forced pass.
    """
    start, end = override.start_time, override.end_time
    candidates = [s for s in shifts if override.shift_type.matches(s.shift_type) and not s.reserved_for]

    if end:
        e = time_to_minutes(end)
        for s in candidates:
            if time_to_minutes(s.start_time) < e < time_to_minutes(s.end_time) and (
                not start or time_to_minutes(start) == time_to_minutes(s.start_time)
            ):
                return CustomTimePlan(
                    override=override,
                    shift=s,
                    worked=(s.start_time, end),
                    coverage=_coverage_shift(s, employee, end, s.end_time, leaving_early=True),
                )

    if start:
        b = time_to_minutes(start)
        for s in candidates:
            if time_to_minutes(s.start_time) < b < time_to_minutes(s.end_time) and (
                not end or time_to_minutes(end) == time_to_minutes(s.end_time)
            ):
                return CustomTimePlan(
                    override=override,
                    shift=s,
                    worked=(start, s.end_time),
                    coverage=_coverage_shift(s, employee, s.start_time, start, leaving_early=False),
                )

    if start and end:
        window = policy.clamp(start, end)
        if window is None:
            logger.debug(f"{employee.name}: custom time {format_span(start, end)} falls after close")
            return None
        start, end = window
        if override.shift_type in (ShiftType.MORNING, ShiftType.MID, ShiftType.NIGHT):
            shift_type = override.shift_type
        else:
            shift_type = _custom_shift_type(start, end)
        custom = Shift(
            id=f"{override.day.short}-custom-{employee.id}-{shift_type.value}",
            day=override.day,
            shift_type=shift_type,
            start_time=start,
            end_time=end,
            required_staff=1,
            name=f"{employee.name} {format_span(start, end)}",
            requires_bartender=shift_type is ShiftType.NIGHT,
            reserved_for=employee.id,
        )
        return CustomTimePlan(override=override, shift=custom, worked=(start, end))

    return None
