"""Schedule output models: assignments, diagnostics and the weekly result."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .clock import duration_hours, to_date
from .shift import ALL_DAYS, DayOfWeek, ShiftType, normalize_day


class ConflictType(str, Enum):
    """Unmet hard constraints."""
    NO_BARTENDER = "no_bartender"
    NO_COVERAGE = "no_coverage"
    RULE_VIOLATION = "rule_violation"


class WarningType(str, Enum):
    """Soft issues."""
    OVERTIME = "overtime"
    UNDER_HOURS = "under_hours"
    COVERAGE_NEEDED = "coverage_needed"


@dataclass(frozen=True)
class LockedShift:
    """A user pin that survives regeneration."""
    employee_id: str
    day: DayOfWeek
    shift_type: ShiftType = ShiftType.MORNING

    @classmethod
    def from_dict(cls, d: dict) -> "LockedShift":
        return cls(
            employee_id=str(d["employeeId"]),
            day=normalize_day(d["day"]),
            shift_type=ShiftType.from_string(d.get("shiftType", "morning")),
        )

    def to_dict(self) -> dict:
        return {"employeeId": self.employee_id, "day": self.day.value, "shiftType": self.shift_type.value}


@dataclass(frozen=True)
class ScheduleAssignment:
    """The atomic output unit. ``date`` is ISO YYYY-MM-DD."""
    shift_id: str
    employee_id: str
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.employee_id, self.date, self.shift_id)

    @classmethod
    def from_dict(cls, d: dict) -> "ScheduleAssignment":
        return cls(
            shift_id=str(d["shiftId"]),
            employee_id=str(d["employeeId"]),
            date=str(d["date"]),
            start_time=d.get("startTime") or None,
            end_time=d.get("endTime") or None,
        )

    def to_dict(self) -> dict:
        d = {"shiftId": self.shift_id, "employeeId": self.employee_id, "date": self.date}
        if self.start_time:
            d["startTime"] = self.start_time
        if self.end_time:
            d["endTime"] = self.end_time
        return d


@dataclass(frozen=True)
class ScheduleConflict:
    type: ConflictType
    shift_id: str
    date: str
    message: str
    employee_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    def to_dict(self) -> dict:
        d = {"type": self.type.value, "shiftId": self.shift_id, "date": self.date, "message": self.message}
        for key, value in (("employeeId", self.employee_id), ("startTime", self.start_time),
                           ("endTime", self.end_time)):
            if value:
                d[key] = value
        return d


@dataclass(frozen=True)
class ScheduleWarning:
    type: WarningType
    message: str
    employee_id: Optional[str] = None
    date: Optional[str] = None

    def to_dict(self) -> dict:
        d = {"type": self.type.value, "message": self.message}
        if self.employee_id:
            d["employeeId"] = self.employee_id
        if self.date:
            d["date"] = self.date
        return d


@dataclass
class WeeklySchedule:
    """Complete result of one generation run. Treated as immutable once returned."""

    week_start: str
    assignments: List[ScheduleAssignment] = field(default_factory=list)
    conflicts: List[ScheduleConflict] = field(default_factory=list)
    warnings: List[ScheduleWarning] = field(default_factory=list)

    def assignments_on(self, date: str) -> List[ScheduleAssignment]:
        return [a for a in self.assignments if a.date == date]

    def assignments_for(self, employee_id: str) -> List[ScheduleAssignment]:
        return [a for a in self.assignments if a.employee_id == employee_id]

    def conflicts_of(self, kind: ConflictType) -> List[ScheduleConflict]:
        return [c for c in self.conflicts if c.type == kind]

    def warnings_of(self, kind: WarningType) -> List[ScheduleWarning]:
        return [w for w in self.warnings if w.type == kind]

    def to_dataframe(self, names: Optional[Dict[str, str]] = None) -> pd.DataFrame:
        """Convert assignments to a DataFrame (one row per assignment)."""
        columns = ["date", "day", "employee_id", "name", "shift_id", "start_time", "end_time", "hours"]
        if not self.assignments:
            return pd.DataFrame(columns=columns)

        names = names or {}
        rows = [
            {
                "date": a.date,
                "day": ALL_DAYS[to_date(a.date).weekday()].label,
                "employee_id": a.employee_id,
                "name": names.get(a.employee_id, a.employee_id),
                "shift_id": a.shift_id,
                "start_time": a.start_time or "",
                "end_time": a.end_time or "",
                "hours": duration_hours(a.start_time, a.end_time) if a.start_time and a.end_time else 0.0,
            }
            for a in self.assignments
        ]
        return pd.DataFrame(rows, columns=columns).sort_values(["date", "start_time"], kind="stable").reset_index(drop=True)

    def summary(self) -> Dict[str, Any]:
        """Get summary dictionary for display."""
        return {
            "week_start": self.week_start,
            "assignments": len(self.assignments),
            "employees": len({a.employee_id for a in self.assignments}),
            "conflicts": {k.value: len(self.conflicts_of(k)) for k in ConflictType if self.conflicts_of(k)},
            "warnings": {k.value: len(self.warnings_of(k)) for k in WarningType if self.warnings_of(k)},
        }

    def to_dict(self) -> dict:
        return {
            "weekStart": self.week_start,
            "assignments": [a.to_dict() for a in self.assignments],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "warnings": [w.to_dict() for w in self.warnings],
        }
