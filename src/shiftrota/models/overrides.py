"""
Override Rules
==============
Manager-authored rules that alter default assignment. The wire format is a
flat record ``{type, employeeId, day, shiftType, customStartTime,
customEndTime}`` where two sentinel employee ids mark business-wide rules;
inside the engine each rule is one explicit variant:

    BusinessClosed  - ``{type: exclude, employeeId: __ALL__}``
    EarlyClose      - ``{employeeId: __CLOSE_EARLY__, customEndTime}``
    Exclude         - employee is OFF for the day (or one shift type)
    Assign          - employee must work the day (or one shift type)
    CustomTime      - employee works a partial span (arrives late / leaves early)
    Prioritize      - employee goes first in the candidate order
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .clock import format_time_label
from .rules import ALL_EMPLOYEES, CLOSE_EARLY
from .shift import DayOfWeek, ShiftType, normalize_day


def _format_time(time24: Optional[str]) -> str:
    return format_time_label(time24) if time24 else ""


@dataclass(frozen=True)
class BusinessClosed:
    day: DayOfWeek
    id: str = ""
    note: str = ""

    def describe(self, names: Optional[Mapping[str, str]] = None) -> str:
        return f"{self.day.label} CLOSED"

    def to_dict(self) -> dict:
        return {"id": self.id, "type": "exclude", "employeeId": ALL_EMPLOYEES,
                "day": self.day.value, "shiftType": "any", "note": self.note}


@dataclass(frozen=True)
class EarlyClose:
    day: DayOfWeek
    close_time: str
    id: str = ""
    note: str = ""

    def describe(self, names: Optional[Mapping[str, str]] = None) -> str:
        return f"{self.day.label} Close at {_format_time(self.close_time)}"

    def to_dict(self) -> dict:
        return {"id": self.id, "type": "custom_time", "employeeId": CLOSE_EARLY,
                "day": self.day.value, "shiftType": "any",
                "customEndTime": self.close_time, "note": self.note}


@dataclass(frozen=True)
class Exclude:
    employee_id: str
    day: DayOfWeek
    shift_type: ShiftType = ShiftType.ANY
    id: str = ""
    note: str = ""

    def describe(self, names: Optional[Mapping[str, str]] = None) -> str:
        name = (names or {}).get(self.employee_id, self.employee_id)
        suffix = "" if self.shift_type is ShiftType.ANY else f" {self.shift_type.value}"
        return f"{name} OFF {self.day.label}{suffix}"

    def to_dict(self) -> dict:
        return {"id": self.id, "type": "exclude", "employeeId": self.employee_id,
                "day": self.day.value, "shiftType": self.shift_type.value, "note": self.note}


@dataclass(frozen=True)
class Assign:
    employee_id: str
    day: DayOfWeek
    shift_type: ShiftType = ShiftType.ANY
    id: str = ""
    note: str = ""

    def describe(self, names: Optional[Mapping[str, str]] = None) -> str:
        name = (names or {}).get(self.employee_id, self.employee_id)
        suffix = "" if self.shift_type is ShiftType.ANY else f" {self.shift_type.value}"
        return f"{name} {self.day.label}{suffix}"

    def to_dict(self) -> dict:
        return {"id": self.id, "type": "assign", "employeeId": self.employee_id,
                "day": self.day.value, "shiftType": self.shift_type.value, "note": self.note}


@dataclass(frozen=True)
class CustomTime:
    employee_id: str
    day: DayOfWeek
    shift_type: ShiftType = ShiftType.ANY
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    id: str = ""
    note: str = ""

    def describe(self, names: Optional[Mapping[str, str]] = None) -> str:
        name = (names or {}).get(self.employee_id, self.employee_id)
        start = _format_time(self.start_time) or "open"
        end = _format_time(self.end_time) or "close"
        return f"{name} {self.day.label} {start}-{end}"

    def to_dict(self) -> dict:
        d = {"id": self.id, "type": "custom_time", "employeeId": self.employee_id,
             "day": self.day.value, "shiftType": self.shift_type.value, "note": self.note}
        if self.start_time:
            d["customStartTime"] = self.start_time
        if self.end_time:
            d["customEndTime"] = self.end_time
        return d


@dataclass(frozen=True)
class Prioritize:
    employee_id: str
    day: DayOfWeek
    shift_type: ShiftType = ShiftType.ANY
    id: str = ""
    note: str = ""

    def describe(self, names: Optional[Mapping[str, str]] = None) -> str:
        name = (names or {}).get(self.employee_id, self.employee_id)
        suffix = "" if self.shift_type is ShiftType.ANY else f" {self.shift_type.value}"
        return f"Prefer {name} for {self.day.label}{suffix}"

    def to_dict(self) -> dict:
        return {"id": self.id, "type": "prioritize", "employeeId": self.employee_id,
                "day": self.day.value, "shiftType": self.shift_type.value, "note": self.note}


Override = Union[BusinessClosed, EarlyClose, Exclude, Assign, CustomTime, Prioritize]

# Variants that put an employee on the schedule
FORCED_RULES = (Assign, CustomTime)
# Variants the final schedule is checked against
VERIFIED_RULES = (Exclude,) + FORCED_RULES

OVERRIDE_TYPES = ("exclude", "assign", "custom_time", "prioritize")


def parse_override(raw: dict) -> Override:
    """
    Convert a wire-format override record into its variant.

    Business-wide detection runs first: the sentinel employee ids win over the
    ``type`` field.

    Raises:
        ValueError: unknown type, unknown day, or an early close without a time
    """
    kind = str(raw.get("type", "")).strip().lower()
    if kind not in OVERRIDE_TYPES:
        raise ValueError(f"Unknown override type: {raw.get('type')!r}")

    day = normalize_day(raw.get("day", ""))
    employee_id = str(raw.get("employeeId", ""))
    shift_type = ShiftType.from_string(raw.get("shiftType"))
    start = raw.get("customStartTime") or None
    end = raw.get("customEndTime") or None
    oid = str(raw.get("id", "") or "")
    note = str(raw.get("note", "") or "")

    if employee_id == ALL_EMPLOYEES and kind == "exclude":
        return BusinessClosed(day=day, id=oid, note=note)
    if employee_id == CLOSE_EARLY:
        if not end:
            raise ValueError(f"Early close on {day.value} has no customEndTime")
        return EarlyClose(day=day, close_time=end, id=oid, note=note)

    if kind == "exclude":
        return Exclude(employee_id, day, shift_type, id=oid, note=note)
    if kind == "assign":
        return Assign(employee_id, day, shift_type, id=oid, note=note)
    if kind == "custom_time":
        return CustomTime(employee_id, day, shift_type, start_time=start, end_time=end, id=oid, note=note)
    return Prioritize(employee_id, day, shift_type, id=oid, note=note)


def parse_overrides(raws: Iterable[Union[dict, Override]]) -> List[Override]:
    """Parse a merged override list, keeping its original order."""
    return [r if not isinstance(r, dict) else parse_override(r) for r in raws]


def describe_overrides(overrides: Iterable[Override], names: Optional[Dict[str, str]] = None) -> List[str]:
    """Human-readable one-liners for a list of overrides."""
    return [o.describe(names) for o in overrides]
