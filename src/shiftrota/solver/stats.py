"""
Employee Statistics
===================
Per-employee hours and shift counts for a week. Used by the engine for the
under-hours/overtime warnings and by the exports.
"""
from dataclasses import dataclass
from typing import Dict, List, Sequence

import pandas as pd

from shiftrota.models.employee import Employee
from shiftrota.models.schedule import ScheduleAssignment
from shiftrota.utils.logging_setup import get_logger

from .ledger import assignment_hours

logger = get_logger("shiftrota.solver.stats")


@dataclass
class EmployeeStats:
    """Statistics for a single employee."""
    employee_id: str
    name: str
    shifts: int
    hours: float
    days: int
    min_shifts: int = 0

    @property
    def shift_deficit(self) -> int:
        return max(0, self.min_shifts - self.shifts)


def calculate_employee_stats(
    assignments: Sequence[ScheduleAssignment],
    employees: Sequence[Employee],
) -> List[EmployeeStats]:
    """
    Stats for every employee in roster order, including those with no shifts.

    Assignments for employees missing from ``employees`` are ignored.
    """
    stats = []
    for emp in employees:
        mine = [a for a in assignments if a.employee_id == emp.id]
        stats.append(EmployeeStats(
            employee_id=emp.id,
            name=emp.name,
            shifts=len(mine),
            hours=round(sum(assignment_hours(a) for a in mine), 2),
            days=len({a.date for a in mine}),
            min_shifts=emp.min_shifts_per_week,
        ))

    logger.debug(f"Calculated stats for {len(stats)} employees")
    return stats


def stats_to_dict_list(stats: List[EmployeeStats]) -> List[Dict]:
    """Convert stats to list of dicts for DataFrame or export."""
    return [
        {
            "Employee": s.employee_id,
            "Name": s.name,
            "Shifts": s.shifts,
            "Hours": s.hours,
            "Days": s.days,
            "Min shifts": s.min_shifts,
        }
        for s in stats
    ]


def stats_to_dataframe(stats: List[EmployeeStats]) -> pd.DataFrame:
    columns = ["Employee", "Name", "Shifts", "Hours", "Days", "Min shifts"]
    return pd.DataFrame(stats_to_dict_list(stats), columns=columns)
