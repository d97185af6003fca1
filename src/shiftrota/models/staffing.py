"""Weekly staffing requirements: slot lists (canonical) or legacy counts."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .shift import DayOfWeek, normalize_day


@dataclass
class StaffingSlot:
    """One seat to fill: a label and a time window needing exactly one person."""
    id: str
    start_time: str
    end_time: str
    label: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "StaffingSlot":
        return cls(
            id=str(d["id"]),
            start_time=str(d["startTime"]),
            end_time=str(d["endTime"]),
            label=str(d.get("label", "") or ""),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "startTime": self.start_time, "endTime": self.end_time, "label": self.label}


@dataclass
class DayStaffing:
    """
    Staffing for a single day.

    ``slots`` is the modern form; the legacy ``morning``/``night`` headcounts
    are only consulted when ``slots`` is empty.
    """
    slots: List[StaffingSlot] = field(default_factory=list)
    notes: str = ""
    morning: Optional[int] = None
    night: Optional[int] = None
    morning_start: Optional[str] = None
    morning_end: Optional[str] = None
    night_start: Optional[str] = None
    night_end: Optional[str] = None

    @property
    def uses_legacy(self) -> bool:
        return not self.slots and (self.morning is not None or self.night is not None)

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "DayStaffing":
        d = d or {}

        def _opt_int(key):
            value = d.get(key)
            return None if value is None or value == "" else int(value)

        return cls(
            slots=[StaffingSlot.from_dict(s) for s in d.get("slots") or []],
            notes=str(d.get("notes", "") or ""),
            morning=_opt_int("morning"),
            night=_opt_int("night"),
            morning_start=d.get("morningStart") or None,
            morning_end=d.get("morningEnd") or None,
            night_start=d.get("nightStart") or None,
            night_end=d.get("nightEnd") or None,
        )

    def to_dict(self) -> dict:
        d = {"slots": [s.to_dict() for s in self.slots], "notes": self.notes}
        for key, value in (
            ("morning", self.morning), ("night", self.night),
            ("morningStart", self.morning_start), ("morningEnd", self.morning_end),
            ("nightStart", self.night_start), ("nightEnd", self.night_end),
        ):
            if value is not None:
                d[key] = value
        return d


@dataclass
class WeeklyStaffingNeeds:
    """Per-day staffing for one week. Days without an entry need no one."""
    days: Dict[DayOfWeek, DayStaffing] = field(default_factory=dict)

    def for_day(self, day: DayOfWeek) -> Optional[DayStaffing]:
        return self.days.get(day)

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "WeeklyStaffingNeeds":
        return cls(days={normalize_day(k): DayStaffing.from_dict(v) for k, v in (d or {}).items()})

    def to_dict(self) -> dict:
        return {day.value: ds.to_dict() for day, ds in self.days.items()}
