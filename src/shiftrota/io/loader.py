"""JSON request loading."""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from shiftrota.models.employee import Employee
from shiftrota.models.options import SchedulerOptions
from shiftrota.models.overrides import Override, parse_override
from shiftrota.models.schedule import LockedShift, ScheduleAssignment, WeeklySchedule
from shiftrota.models.staffing import WeeklyStaffingNeeds
from shiftrota.models.validated import ValidatedSchedulerOptions
from shiftrota.solver.timeutils import to_date
from shiftrota.utils.logging_setup import get_logger

logger = get_logger("shiftrota.io.loader")


@dataclass
class ScheduleRequest:
    """Everything one generation run needs, parsed from the wire format."""
    week_start: str
    employees: List[Employee]
    overrides: List[Override] = field(default_factory=list)
    staffing_needs: Optional[WeeklyStaffingNeeds] = None
    locked_shifts: List[LockedShift] = field(default_factory=list)
    existing_assignments: List[ScheduleAssignment] = field(default_factory=list)
    options: SchedulerOptions = field(default_factory=SchedulerOptions)

    @property
    def names(self) -> Dict[str, str]:
        return {e.id: e.name for e in self.employees}

    def run(self) -> WeeklySchedule:
        from shiftrota.solver.engine import generate_schedule

        return generate_schedule(
            self.week_start,
            self.overrides,
            self.employees,
            self.staffing_needs,
            self.locked_shifts,
            self.existing_assignments,
            self.options,
        )


def _parse_list(raw: Dict[str, Any], key: str, parse) -> list:
    items = raw.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"'{key}' must be a list")
    parsed = []
    for i, item in enumerate(items):
        try:
            parsed.append(parse(item))
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"{key}[{i}]: missing or invalid field {e}") from e
    return parsed


def parse_request(raw: Dict[str, Any]) -> ScheduleRequest:
    """
    Build a ScheduleRequest from a decoded JSON object.

    Raises:
        ValueError: structurally invalid request (missing week or employees,
            unknown override type or day)
        pydantic.ValidationError: out-of-range options
    """
    if not isinstance(raw, dict):
        raise ValueError("Request must be a JSON object")

    week = raw.get("weekStart") or raw.get("week")
    if not week:
        raise ValueError("Request must have a 'weekStart' date")
    try:
        to_date(week)
    except ValueError as e:
        raise ValueError(f"Invalid weekStart {week!r}: expected YYYY-MM-DD") from e
    if not isinstance(raw.get("employees"), list):
        raise ValueError("Request must have an 'employees' list")

    employees = _parse_list(raw, "employees", Employee.from_dict)
    overrides = _parse_list(raw, "overrides", parse_override)
    options = ValidatedSchedulerOptions.model_validate(raw.get("options") or {}).to_dataclass()

    staffing_raw = raw.get("staffingNeeds")
    request = ScheduleRequest(
        week_start=str(week),
        employees=employees,
        overrides=overrides,
        staffing_needs=WeeklyStaffingNeeds.from_dict(staffing_raw) if staffing_raw else None,
        locked_shifts=_parse_list(raw, "lockedShifts", LockedShift.from_dict),
        existing_assignments=_parse_list(raw, "existingAssignments", ScheduleAssignment.from_dict),
        options=options,
    )
    logger.info(
        f"Loaded request for {request.week_start}: {len(employees)} employees, "
        f"{len(request.overrides)} overrides, {len(request.locked_shifts)} locks"
    )
    return request


def load_request(source: Union[str, Path, Dict[str, Any]]) -> ScheduleRequest:
    """
    Load a request from a JSON file path or an already-decoded dict.

    Args:
        source: Path to a JSON file, or the decoded object

    Returns:
        ScheduleRequest
    """
    if isinstance(source, dict):
        return parse_request(source)

    path = Path(source)
    with path.open(encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}: invalid JSON ({e})") from e
    return parse_request(raw)
