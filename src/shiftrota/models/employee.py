"""Employee model: availability, restrictions, exclusions, fixed schedules."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .rules import RULES
from .shift import DayOfWeek, ShiftType, normalize_day


class RestrictionType(str, Enum):
    NO_BEFORE = "no_before"
    NO_AFTER = "no_after"
    UNAVAILABLE_RANGE = "unavailable_range"


@dataclass
class AvailableShift:
    """One declared availability entry for a day."""
    type: ShiftType = ShiftType.ANY
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "AvailableShift":
        return cls(
            type=ShiftType.from_string(d.get("type", "any")),
            start_time=d.get("startTime") or None,
            end_time=d.get("endTime") or None,
        )

    def to_dict(self) -> dict:
        d = {"type": self.type.value}
        if self.start_time:
            d["startTime"] = self.start_time
        if self.end_time:
            d["endTime"] = self.end_time
        return d


@dataclass
class DayAvailability:
    available: bool = True
    shifts: List[AvailableShift] = field(default_factory=lambda: [AvailableShift()])
    notes: str = ""

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["DayAvailability"]:
        if d is None:
            return None
        return cls(
            available=bool(d.get("available", False)),
            shifts=[AvailableShift.from_dict(s) for s in d.get("shifts", [])],
            notes=str(d.get("notes", "") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "shifts": [s.to_dict() for s in self.shifts],
            "notes": self.notes,
        }


@dataclass
class Restriction:
    """
    A hard time constraint.

    ``time`` is used by no_before/no_after, ``start_time``/``end_time`` by
    unavailable_range. An empty ``days`` list applies to every day.
    """
    type: RestrictionType
    time: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    days: List[DayOfWeek] = field(default_factory=list)
    reason: str = ""
    id: str = ""

    def applies_to(self, day: DayOfWeek) -> bool:
        return not self.days or day in self.days

    @classmethod
    def from_dict(cls, d: dict) -> "Restriction":
        return cls(
            type=RestrictionType(d["type"]),
            time=d.get("time") or None,
            start_time=d.get("startTime") or None,
            end_time=d.get("endTime") or None,
            days=[normalize_day(x) for x in d.get("days", []) or []],
            reason=str(d.get("reason", "") or ""),
            id=str(d.get("id", "") or ""),
        )

    def to_dict(self) -> dict:
        d = {"id": self.id, "type": self.type.value, "days": [x.value for x in self.days]}
        if self.time:
            d["time"] = self.time
        if self.start_time:
            d["startTime"] = self.start_time
        if self.end_time:
            d["endTime"] = self.end_time
        if self.reason:
            d["reason"] = self.reason
        return d


@dataclass
class Exclusion:
    """Inclusive blackout date range (ISO YYYY-MM-DD strings)."""
    start_date: str
    end_date: str
    reason: str = ""

    def contains(self, date: str) -> bool:
        return self.start_date <= date <= self.end_date


@dataclass
class Preferences:
    prefers_morning: bool = False
    prefers_mid: bool = False
    prefers_night: bool = False
    can_open: bool = False
    can_work_alone_extended: bool = False

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "Preferences":
        d = d or {}
        return cls(
            prefers_morning=bool(d.get("prefersMorning", False)),
            prefers_mid=bool(d.get("prefersMid", False)),
            prefers_night=bool(d.get("prefersNight", False)),
            can_open=bool(d.get("canOpen", False)),
            can_work_alone_extended=bool(d.get("canWorkAloneExtended", False)),
        )

    def to_dict(self) -> dict:
        return {
            "prefersMorning": self.prefers_morning,
            "prefersMid": self.prefers_mid,
            "prefersNight": self.prefers_night,
            "canOpen": self.can_open,
            "canWorkAloneExtended": self.can_work_alone_extended,
        }


@dataclass
class SetScheduleEntry:
    """Fixed recurring assignment (top priority after locked shifts)."""
    day: DayOfWeek
    shift_type: ShiftType = ShiftType.MORNING
    start_time: Optional[str] = None
    end_time: Optional[str] = None


@dataclass
class Employee:
    """A member of the roster. Read-only to the engine."""

    id: str
    name: str
    bartending_scale: int = 0
    alone_scale: int = 0
    availability: Dict[DayOfWeek, Optional[DayAvailability]] = field(default_factory=dict)
    restrictions: List[Restriction] = field(default_factory=list)
    exclusions: List[Exclusion] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)
    min_shifts_per_week: int = 0
    set_schedule: List[SetScheduleEntry] = field(default_factory=list)
    is_active: bool = True

    def __post_init__(self):
        self.name = str(self.name).strip() or str(self.id)
        self.bartending_scale = max(0, min(5, int(self.bartending_scale)))
        self.alone_scale = max(0, min(5, int(self.alone_scale)))
        if self.min_shifts_per_week < 0:
            self.min_shifts_per_week = 0

    def is_bartender(self, threshold: int = RULES.bartender_threshold) -> bool:
        """Bartender-qualified employees may cover lower-rated staff."""
        return self.bartending_scale >= threshold

    def day_availability(self, day: DayOfWeek) -> Optional[DayAvailability]:
        return self.availability.get(day)

    def to_dict(self) -> dict:
        """Convert to the camelCase wire format."""
        return {
            "id": self.id,
            "name": self.name,
            "bartendingScale": self.bartending_scale,
            "aloneScale": self.alone_scale,
            "availability": {
                day.value: (a.to_dict() if a is not None else None)
                for day, a in self.availability.items()
            },
            "restrictions": [r.to_dict() for r in self.restrictions],
            "exclusions": [
                {"startDate": e.start_date, "endDate": e.end_date, "reason": e.reason}
                for e in self.exclusions
            ],
            "preferences": self.preferences.to_dict(),
            "minShiftsPerWeek": self.min_shifts_per_week,
            "setSchedule": [
                {
                    "day": s.day.value,
                    "shiftType": s.shift_type.value,
                    **({"startTime": s.start_time} if s.start_time else {}),
                    **({"endTime": s.end_time} if s.end_time else {}),
                }
                for s in self.set_schedule
            ],
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Employee":
        """Create from the camelCase wire format."""
        availability = {
            normalize_day(day): DayAvailability.from_dict(value)
            for day, value in (d.get("availability") or {}).items()
        }
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            bartending_scale=int(d.get("bartendingScale", 0) or 0),
            alone_scale=int(d.get("aloneScale", 0) or 0),
            availability=availability,
            restrictions=[Restriction.from_dict(r) for r in d.get("restrictions") or []],
            exclusions=[
                Exclusion(
                    start_date=str(e["startDate"]),
                    end_date=str(e.get("endDate") or e["startDate"]),
                    reason=str(e.get("reason", "") or ""),
                )
                for e in d.get("exclusions") or []
            ],
            preferences=Preferences.from_dict(d.get("preferences")),
            min_shifts_per_week=int(d.get("minShiftsPerWeek", 0) or 0),
            set_schedule=[
                SetScheduleEntry(
                    day=normalize_day(s["day"]),
                    shift_type=ShiftType.from_string(s.get("shiftType", "morning")),
                    start_time=s.get("startTime") or None,
                    end_time=s.get("endTime") or None,
                )
                for s in d.get("setSchedule") or []
            ],
            is_active=d.get("isActive", True) is not False,
        )
