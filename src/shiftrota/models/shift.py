"""Shift type, day-of-week definitions and the concrete Shift record."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .clock import duration_hours


class ShiftType(str, Enum):
    """Time-of-day bucket a shift (or an availability/override entry) refers to."""
    ANY = "any"
    MORNING = "morning"
    MID = "mid"
    NIGHT = "night"
    CUSTOM = "custom"

    def matches(self, other: "ShiftType") -> bool:
        """True if a rule scoped to ``self`` applies to a shift of type ``other``."""
        return self is ShiftType.ANY or self is other

    @classmethod
    def from_string(cls, s: Optional[str]) -> "ShiftType":
        """Parse shift type from loose string formats, defaulting to ANY."""
        if s is None:
            return cls.ANY
        key = str(s).strip().lower()
        aliases = {
            "am": cls.MORNING, "open": cls.MORNING, "opener": cls.MORNING,
            "lunch": cls.MID,
            "pm": cls.NIGHT, "dinner": cls.NIGHT, "bar": cls.NIGHT, "close": cls.NIGHT,
            "": cls.ANY, "all": cls.ANY,
        }
        if key in aliases:
            return aliases[key]
        for member in cls:
            if member.value == key:
                return member
        return cls.ANY


class DayOfWeek(str, Enum):
    """Calendar days, declared Monday → Sunday (iteration order is significant)."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def short(self) -> str:
        return self.value[:3]

    @property
    def offset(self) -> int:
        """Days after Monday."""
        return ALL_DAYS.index(self)

    @property
    def is_weekend(self) -> bool:
        return self in (DayOfWeek.SATURDAY, DayOfWeek.SUNDAY)


ALL_DAYS = list(DayOfWeek)

DAY_ALIASES = {
    "mon": DayOfWeek.MONDAY, "tue": DayOfWeek.TUESDAY, "tues": DayOfWeek.TUESDAY,
    "wed": DayOfWeek.WEDNESDAY, "thu": DayOfWeek.THURSDAY, "thur": DayOfWeek.THURSDAY,
    "thurs": DayOfWeek.THURSDAY, "fri": DayOfWeek.FRIDAY, "sat": DayOfWeek.SATURDAY,
    "sun": DayOfWeek.SUNDAY,
}


def normalize_day(s) -> DayOfWeek:
    """
    Normalize a day string ("Tue", "tuesday", "TUESDAY") to a DayOfWeek.

    Raises:
        ValueError: if the string names no day
    """
    if isinstance(s, DayOfWeek):
        return s
    key = str(s).strip().lower()
    if key in DAY_ALIASES:
        return DAY_ALIASES[key]
    try:
        return DayOfWeek(key)
    except ValueError:
        raise ValueError(f"Unknown day of week: {s!r}") from None


@dataclass
class Shift:
    """
    A concrete shift on one day that needs ``required_staff`` people.

    ``requires_solo`` marks shifts with some stretch where no other shift of
    the day is running. ``reserved_for`` marks shifts synthesized for a
    single employee (standalone custom-time shifts); only that employee may
    fill them.
    """
    id: str
    day: DayOfWeek
    shift_type: ShiftType
    start_time: str
    end_time: str
    required_staff: int = 1
    name: str = ""
    requires_bartender: bool = False
    requires_solo: bool = False
    reserved_for: Optional[str] = None

    @property
    def duration(self) -> float:
        return duration_hours(self.start_time, self.end_time)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "day": self.day.value,
            "type": self.shift_type.value,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "requiredStaff": self.required_staff,
            "name": self.name,
            "requiresBartender": self.requires_bartender,
            "requiresSolo": self.requires_solo,
        }
