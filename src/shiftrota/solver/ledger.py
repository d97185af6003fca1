"""
Assignment Ledger
=================
Running state of one generation run: the assignment list plus per-employee
hours and shift counts used for load balancing.
"""
from typing import Dict, Iterable, List, Optional, Set, Tuple

from shiftrota.models.schedule import ScheduleAssignment
from shiftrota.utils.logging_setup import get_logger

from .timeutils import duration_hours

logger = get_logger("shiftrota.solver.ledger")


class AssignmentLedger:
    """
    Insert-only store of assignments.

    Each ``(employee_id, date, shift_id)`` triple is recorded at most once;
    a repeated insert is refused and leaves the counters untouched.
    """

    def __init__(self, employee_ids: Iterable[str] = ()):
        self.assignments: List[ScheduleAssignment] = []
        self.hours: Dict[str, float] = {eid: 0.0 for eid in employee_ids}
        self.shift_counts: Dict[str, int] = {eid: 0 for eid in self.hours}
        self._keys: Set[Tuple[str, str, str]] = set()
        self._working: Set[Tuple[str, str]] = set()
        self._filled: Dict[Tuple[str, str], int] = {}

    def __len__(self) -> int:
        return len(self.assignments)

    def add(self, assignment: ScheduleAssignment, hours: Optional[float] = None) -> bool:
        """
        Record an assignment.

        Args:
            assignment: The assignment to insert
            hours: Hours to book; derived from the assignment's times when None

        Returns:
            False if the triple was already present
        """
        if assignment.key in self._keys:
            logger.debug(f"Duplicate assignment ignored: {assignment.key}")
            return False

        if hours is None:
            hours = assignment_hours(assignment)

        self._keys.add(assignment.key)
        self._working.add((assignment.employee_id, assignment.date))
        slot = (assignment.date, assignment.shift_id)
        self._filled[slot] = self._filled.get(slot, 0) + 1
        self.assignments.append(assignment)

        eid = assignment.employee_id
        self.hours[eid] = self.hours.get(eid, 0.0) + hours
        self.shift_counts[eid] = self.shift_counts.get(eid, 0) + 1
        assert self.hours[eid] >= 0 and self.shift_counts[eid] >= 0
        return True

    def is_assigned(self, employee_id: str, date: str) -> bool:
        return (employee_id, date) in self._working

    def filled(self, date: str, shift_id: str) -> int:
        """Seats already taken on a shift for a date."""
        return self._filled.get((date, shift_id), 0)

    def on_date(self, date: str) -> List[ScheduleAssignment]:
        return [a for a in self.assignments if a.date == date]

    def for_employee(self, employee_id: str) -> List[ScheduleAssignment]:
        return [a for a in self.assignments if a.employee_id == employee_id]


def assignment_hours(assignment: ScheduleAssignment) -> float:
    if assignment.start_time and assignment.end_time:
        return duration_hours(assignment.start_time, assignment.end_time)
    return 0.0
