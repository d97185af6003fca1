# shiftrota/solver - Greedy weekly shift allocation engine
from .availability import RestrictionCheck, check_restrictions, has_min_rest, is_available
from .coverage import GapFillResult, fill_bartender_gaps, find_coverage_gaps
from .day_policy import DayPolicy, compute_day_policies
from .engine import WeekState, assign_shift, generate_schedule
from .ledger import AssignmentLedger
from .overrides import CustomTimePlan, DayOverrides, plan_custom_time, resolve_overrides
from .slots import build_day_shifts, build_week_shifts, infer_shift_type
from .staffing import StaffingIssue, StaffingIssueType, validate_staffing_needs
from .stats import EmployeeStats, calculate_employee_stats, stats_to_dataframe
from .validation import enforce_day_policies, find_double_bookings, verify_overrides

__all__ = [
    "generate_schedule",
    "assign_shift",
    "WeekState",
    "AssignmentLedger",
    "is_available",
    "check_restrictions",
    "has_min_rest",
    "RestrictionCheck",
    "DayPolicy",
    "compute_day_policies",
    "build_day_shifts",
    "build_week_shifts",
    "infer_shift_type",
    "DayOverrides",
    "resolve_overrides",
    "plan_custom_time",
    "CustomTimePlan",
    "fill_bartender_gaps",
    "find_coverage_gaps",
    "GapFillResult",
    "enforce_day_policies",
    "verify_overrides",
    "find_double_bookings",
    "validate_staffing_needs",
    "StaffingIssue",
    "StaffingIssueType",
    "EmployeeStats",
    "calculate_employee_stats",
    "stats_to_dataframe",
]
