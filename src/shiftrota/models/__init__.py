# shiftrota/models - Data models for the shift allocation engine
from .employee import (
    AvailableShift,
    DayAvailability,
    Employee,
    Exclusion,
    Preferences,
    Restriction,
    RestrictionType,
    SetScheduleEntry,
)
from .options import SchedulerOptions
from .overrides import (
    Assign,
    BusinessClosed,
    CustomTime,
    EarlyClose,
    Exclude,
    Override,
    Prioritize,
    parse_override,
    parse_overrides,
)
from .schedule import (
    ConflictType,
    LockedShift,
    ScheduleAssignment,
    ScheduleConflict,
    ScheduleWarning,
    WarningType,
    WeeklySchedule,
)
from .shift import ALL_DAYS, DayOfWeek, Shift, ShiftType, normalize_day
from .staffing import DayStaffing, StaffingSlot, WeeklyStaffingNeeds

__all__ = [
    "Employee", "AvailableShift", "DayAvailability", "Exclusion", "Preferences",
    "Restriction", "RestrictionType", "SetScheduleEntry",
    "SchedulerOptions",
    "Override", "BusinessClosed", "EarlyClose", "Exclude", "Assign", "CustomTime",
    "Prioritize", "parse_override", "parse_overrides",
    "ConflictType", "WarningType", "LockedShift", "ScheduleAssignment",
    "ScheduleConflict", "ScheduleWarning", "WeeklySchedule",
    "ALL_DAYS", "DayOfWeek", "Shift", "ShiftType", "normalize_day",
    "DayStaffing", "StaffingSlot", "WeeklyStaffingNeeds",
]
