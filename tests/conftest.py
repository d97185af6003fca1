"""Pytest configuration and fixtures."""
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
import structlog

from shiftrota.models import (
    ALL_DAYS,
    DayAvailability,
    DayOfWeek,
    DayStaffing,
    Employee,
    StaffingSlot,
    WeeklyStaffingNeeds,
)

# A Monday; the week runs 2025-12-08 .. 2025-12-14
WEEK = "2025-12-08"


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Drop handlers/structlog config a test may have bound to captured streams."""
    yield
    logging.getLogger("shiftrota").handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def week():
    return WEEK


@pytest.fixture
def make_employee():
    """Factory: employee available for any shift on ``days`` (default: all week)."""
    def _make(emp_id, name=None, scale=3, days=None, **kwargs):
        availability = kwargs.pop("availability", None)
        if availability is None:
            availability = {day: DayAvailability() for day in (ALL_DAYS if days is None else days)}
        return Employee(
            id=emp_id,
            name=name or emp_id.capitalize(),
            bartending_scale=scale,
            availability=availability,
            **kwargs,
        )
    return _make


@pytest.fixture
def roster(make_employee):
    """Four employees available all week; Dana is below the bartending threshold."""
    return [
        make_employee("alex", "Alex", scale=4),
        make_employee("blair", "Blair", scale=3),
        make_employee("casey", "Casey", scale=5),
        make_employee("dana", "Dana", scale=1),
    ]


@pytest.fixture
def slot_needs():
    """Tuesday-Saturday: opener, mid and bar slot. Monday and Sunday need no one."""
    days = {}
    for day in ALL_DAYS[1:6]:
        days[day] = DayStaffing(slots=[
            StaffingSlot(f"{day.short}-open", "07:15", "12:00", "Opener"),
            StaffingSlot(f"{day.short}-mid", "11:00", "16:00", "Mid"),
            StaffingSlot(f"{day.short}-bar", "16:00", "21:00", "Bar"),
        ])
    return WeeklyStaffingNeeds(days=days)


@pytest.fixture
def single_slot():
    """Factory: staffing with one slot on one day."""
    def _make(day=DayOfWeek.TUESDAY, start="07:15", end="12:00", slot_id=None, label="Opener"):
        slot = StaffingSlot(slot_id or f"{day.short}-slot", start, end, label)
        return WeeklyStaffingNeeds(days={day: DayStaffing(slots=[slot])})
    return _make


@pytest.fixture
def request_dict():
    """Wire-format request as the CLI and loader receive it."""
    available = {"available": True, "shifts": [{"type": "any"}]}
    return {
        "weekStart": WEEK,
        "employees": [
            {"id": "e1", "name": "Kim", "bartendingScale": 4,
             "availability": {d.value: available for d in ALL_DAYS}, "minShiftsPerWeek": 2},
            {"id": "e2", "name": "Lee", "bartendingScale": 3,
             "availability": {d.value: available for d in ALL_DAYS}},
            {"id": "e3", "name": "Max", "bartendingScale": 1,
             "availability": {d.value: available for d in ALL_DAYS}},
        ],
        "overrides": [
            {"type": "exclude", "employeeId": "__ALL__", "day": "wednesday"},
            {"type": "custom_time", "employeeId": "__CLOSE_EARLY__", "day": "saturday", "customEndTime": "15:00"},
            {"type": "exclude", "employeeId": "e2", "day": "thursday", "shiftType": "morning"},
        ],
        "staffingNeeds": {
            d.value: {"slots": [
                {"id": f"{d.short}-open", "startTime": "07:15", "endTime": "12:00", "label": "opener"},
                {"id": f"{d.short}-bar", "startTime": "16:00", "endTime": "21:00", "label": "bar"},
            ]}
            for d in ALL_DAYS[1:]
        },
        "options": {"overtimeThresholdHours": 38, "bartendingThreshold": 3},
    }
