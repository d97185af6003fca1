"""Tests for data models."""
import ast
from pathlib import Path

import pytest
from pydantic import ValidationError

from shiftrota.models import (
    Assign,
    BusinessClosed,
    CustomTime,
    DayOfWeek,
    EarlyClose,
    Employee,
    Exclude,
    LockedShift,
    Prioritize,
    SchedulerOptions,
    ScheduleAssignment,
    ShiftType,
    WeeklyStaffingNeeds,
    normalize_day,
    parse_override,
    parse_overrides,
)
import shiftrota.models
from shiftrota.models.clock import duration_hours, format_time_label
from shiftrota.models.overrides import FORCED_RULES, VERIFIED_RULES, describe_overrides
from shiftrota.models.validated import ValidatedSchedulerOptions


class TestShiftType:
    """Tests for ShiftType enum."""

    def test_any_matches_everything(self):
        """ANY scoped rules apply to every bucket."""
        for t in (ShiftType.MORNING, ShiftType.MID, ShiftType.NIGHT):
            assert ShiftType.ANY.matches(t)

    def test_specific_matches_only_itself(self):
        """A morning rule does not apply to a night shift."""
        assert ShiftType.MORNING.matches(ShiftType.MORNING)
        assert not ShiftType.MORNING.matches(ShiftType.NIGHT)

    def test_from_string(self):
        """Loose parsing with aliases, defaulting to ANY."""
        assert ShiftType.from_string("night") is ShiftType.NIGHT
        assert ShiftType.from_string("AM") is ShiftType.MORNING
        assert ShiftType.from_string("lunch") is ShiftType.MID
        assert ShiftType.from_string(None) is ShiftType.ANY
        assert ShiftType.from_string("whenever") is ShiftType.ANY


class TestDayOfWeek:
    """Tests for day normalization."""

    def test_normalize_day(self):
        """Full names, short names and case variations."""
        assert normalize_day("Tuesday") is DayOfWeek.TUESDAY
        assert normalize_day("thu") is DayOfWeek.THURSDAY
        assert normalize_day(DayOfWeek.SUNDAY) is DayOfWeek.SUNDAY

    def test_normalize_day_rejects_unknown(self):
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown day"):
            normalize_day("funday")

    def test_properties(self):
        """Label, short code and offset."""
        assert DayOfWeek.WEDNESDAY.label == "Wednesday"
        assert DayOfWeek.WEDNESDAY.short == "wed"
        assert DayOfWeek.MONDAY.offset == 0
        assert DayOfWeek.SUNDAY.offset == 6
        assert DayOfWeek.SATURDAY.is_weekend


class TestEmployee:
    """Tests for Employee model."""

    def test_scales_are_clamped(self):
        """Skill scales stay within 0-5."""
        e = Employee(id="x", name="X", bartending_scale=9, alone_scale=-2)
        assert e.bartending_scale == 5
        assert e.alone_scale == 0

    def test_is_bartender_threshold(self):
        """Bartender-qualified means scale >= threshold."""
        assert Employee(id="a", name="A", bartending_scale=3).is_bartender()
        assert not Employee(id="b", name="B", bartending_scale=2).is_bartender()
        assert Employee(id="b", name="B", bartending_scale=2).is_bartender(threshold=2)

    def test_from_dict(self):
        """Wire format parsing."""
        e = Employee.from_dict({
            "id": "e1",
            "name": "Kim",
            "bartendingScale": 4,
            "availability": {
                "tuesday": {"available": True, "shifts": [{"type": "morning", "startTime": "09:00"}]},
                "wednesday": None,
            },
            "restrictions": [{"type": "no_before", "time": "10:00", "days": ["monday"], "reason": "school"}],
            "exclusions": [{"startDate": "2025-12-10", "endDate": "2025-12-12"}],
            "minShiftsPerWeek": 3,
            "setSchedule": [{"day": "friday", "shiftType": "night"}],
        })
        assert e.bartending_scale == 4
        assert e.availability[DayOfWeek.TUESDAY].shifts[0].type is ShiftType.MORNING
        assert e.availability[DayOfWeek.WEDNESDAY] is None
        assert e.restrictions[0].days == [DayOfWeek.MONDAY]
        assert e.exclusions[0].contains("2025-12-11")
        assert not e.exclusions[0].contains("2025-12-13")
        assert e.set_schedule[0].shift_type is ShiftType.NIGHT
        assert e.is_active

    def test_to_dict_roundtrip(self, make_employee):
        """to_dict output parses back to an equal employee."""
        e = make_employee("kim", "Kim", scale=4, min_shifts_per_week=2)
        assert Employee.from_dict(e.to_dict()) == e

    def test_inactive_flag(self):
        """isActive false marks the employee inactive."""
        e = Employee.from_dict({"id": "z", "name": "Zed", "isActive": False})
        assert not e.is_active


class TestOverrides:
    """Tests for override parsing and description."""

    def test_rule_groups(self):
        assert isinstance(Assign("e1", DayOfWeek.MONDAY), FORCED_RULES)
        assert isinstance(CustomTime("e1", DayOfWeek.MONDAY, end_time="11:00"), FORCED_RULES)
        assert isinstance(Exclude("e1", DayOfWeek.MONDAY), VERIFIED_RULES)
        assert not isinstance(Prioritize("e1", DayOfWeek.MONDAY), VERIFIED_RULES)
        assert not isinstance(BusinessClosed(DayOfWeek.MONDAY), VERIFIED_RULES)

    def test_all_exclude_is_business_closed(self):
        """__ALL__ + exclude becomes a closure regardless of shift type."""
        o = parse_override({"type": "exclude", "employeeId": "__ALL__", "day": "wednesday"})
        assert o == BusinessClosed(day=DayOfWeek.WEDNESDAY)

    def test_close_early_sentinel(self):
        """__CLOSE_EARLY__ becomes an EarlyClose carrying the end time."""
        o = parse_override({
            "type": "custom_time", "employeeId": "__CLOSE_EARLY__",
            "day": "friday", "customEndTime": "14:00",
        })
        assert isinstance(o, EarlyClose)
        assert o.close_time == "14:00"

    def test_close_early_without_time_raises(self):
        """An early close must say when."""
        with pytest.raises(ValueError, match="customEndTime"):
            parse_override({"type": "custom_time", "employeeId": "__CLOSE_EARLY__", "day": "friday"})

    def test_employee_variants(self):
        """Each employee-level type maps to its variant."""
        base = {"employeeId": "e1", "day": "tue", "shiftType": "night"}
        assert parse_override({**base, "type": "exclude"}) == Exclude("e1", DayOfWeek.TUESDAY, ShiftType.NIGHT)
        assert parse_override({**base, "type": "assign"}) == Assign("e1", DayOfWeek.TUESDAY, ShiftType.NIGHT)
        assert parse_override({**base, "type": "prioritize"}) == Prioritize("e1", DayOfWeek.TUESDAY, ShiftType.NIGHT)
        ct = parse_override({**base, "type": "custom_time", "customStartTime": "17:00"})
        assert ct == CustomTime("e1", DayOfWeek.TUESDAY, ShiftType.NIGHT, start_time="17:00")

    def test_unknown_type_raises(self):
        """Unknown override types are rejected."""
        with pytest.raises(ValueError, match="Unknown override type"):
            parse_override({"type": "swap", "employeeId": "e1", "day": "monday"})

    def test_parse_overrides_keeps_order_and_variants(self):
        """Dicts are parsed, variants pass through, order is preserved."""
        closed = BusinessClosed(DayOfWeek.MONDAY)
        result = parse_overrides([
            {"type": "assign", "employeeId": "e1", "day": "friday"},
            closed,
        ])
        assert isinstance(result[0], Assign)
        assert result[1] is closed

    def test_describe(self):
        """Human-readable descriptions."""
        names = {"e1": "Kim"}
        assert describe_overrides([
            BusinessClosed(DayOfWeek.WEDNESDAY),
            EarlyClose(DayOfWeek.FRIDAY, "14:00"),
            Exclude("e1", DayOfWeek.FRIDAY),
            Assign("e1", DayOfWeek.FRIDAY, ShiftType.NIGHT),
            CustomTime("e1", DayOfWeek.TUESDAY, start_time="10:00", end_time="13:00"),
            Prioritize("e1", DayOfWeek.FRIDAY),
        ], names) == [
            "Wednesday CLOSED",
            "Friday Close at 2p",
            "Kim OFF Friday",
            "Kim Friday night",
            "Kim Tuesday 10a-1p",
            "Prefer Kim for Friday",
        ]

    def test_to_dict_parses_back(self):
        """Variants serialize to records that parse to the same variant."""
        for o in (
            BusinessClosed(DayOfWeek.SUNDAY),
            EarlyClose(DayOfWeek.SATURDAY, "15:00"),
            CustomTime("e2", DayOfWeek.MONDAY, ShiftType.MORNING, end_time="11:00"),
        ):
            assert parse_override(o.to_dict()) == o


class TestScheduleRecords:
    """Tests for schedule-side records."""

    def test_assignment_key(self):
        """Uniqueness key is (employee, date, shift)."""
        a = ScheduleAssignment("tue-open", "e1", "2025-12-09", "07:15", "12:00")
        assert a.key == ("e1", "2025-12-09", "tue-open")

    def test_assignment_from_dict_optional_times(self):
        """Times are optional on the wire."""
        a = ScheduleAssignment.from_dict({"shiftId": "s", "employeeId": "e", "date": "2025-12-09"})
        assert a.start_time is None
        assert a.to_dict() == {"shiftId": "s", "employeeId": "e", "date": "2025-12-09"}

    def test_locked_shift_from_dict(self):
        """LockedShift defaults to morning."""
        lock = LockedShift.from_dict({"employeeId": "e1", "day": "friday"})
        assert lock.shift_type is ShiftType.MORNING


class TestStaffingNeeds:
    """Tests for staffing parsing."""

    def test_slot_form(self):
        """Slots parse per day; other days are absent."""
        needs = WeeklyStaffingNeeds.from_dict({
            "tuesday": {"slots": [{"id": "s1", "startTime": "07:15", "endTime": "12:00", "label": "Opener"}]},
        })
        tue = needs.for_day(DayOfWeek.TUESDAY)
        assert tue.slots[0].id == "s1"
        assert not tue.uses_legacy
        assert needs.for_day(DayOfWeek.MONDAY) is None

    def test_legacy_form(self):
        """Legacy counts are recognized when no slots are given."""
        needs = WeeklyStaffingNeeds.from_dict({"friday": {"morning": 2, "night": "1", "nightEnd": "22:00"}})
        fri = needs.for_day(DayOfWeek.FRIDAY)
        assert fri.uses_legacy
        assert fri.night == 1
        assert fri.night_end == "22:00"


class TestSchedulerOptions:
    """Tests for options and their validated form."""

    def test_defaults(self):
        """Defaults come from the central rules."""
        opts = SchedulerOptions()
        assert opts.overtime_threshold_hours == 38.0
        assert opts.bartending_threshold == 3
        assert opts.min_rest_between_shifts_hours == 0.0
        assert opts.alone_threshold == 0

    def test_from_dict_ignores_unknown(self):
        """Unknown keys are ignored and values cast."""
        opts = SchedulerOptions.from_dict({"bartendingThreshold": "4", "colour": "blue"})
        assert opts.bartending_threshold == 4

    def test_alone_threshold_wire_key(self):
        opts = SchedulerOptions.from_dict({"aloneThreshold": 3})
        assert opts.alone_threshold == 3
        assert opts.to_dict()["aloneThreshold"] == 3
        assert ValidatedSchedulerOptions.model_validate({"aloneThreshold": 3}).to_dataclass() == opts

    def test_validated_accepts_camel_case(self):
        """Wire keys populate the validated model."""
        v = ValidatedSchedulerOptions.model_validate({"overtimeThresholdHours": 40, "minRestBetweenShiftsHours": 10})
        opts = v.to_dataclass()
        assert opts.overtime_threshold_hours == 40
        assert opts.min_rest_between_shifts_hours == 10

    def test_validated_rejects_out_of_range(self):
        """Threshold outside 0-5 is rejected."""
        with pytest.raises(ValidationError):
            ValidatedSchedulerOptions.model_validate({"bartendingThreshold": 7})
        with pytest.raises(ValidationError):
            ValidatedSchedulerOptions.model_validate({"aloneThreshold": 6})

    def test_validated_rejects_fractional_overtime(self):
        """Overtime between 0 and 1 hour is rejected."""
        with pytest.raises(ValidationError):
            ValidatedSchedulerOptions(overtime_threshold_hours=0.5)

    def test_roundtrip_dataclass(self):
        """from_dataclass/to_dataclass preserve values."""
        opts = SchedulerOptions(
            overtime_threshold_hours=30, bartending_threshold=2, min_rest_between_shifts_hours=8, alone_threshold=3,
        )
        assert ValidatedSchedulerOptions.from_dataclass(opts).to_dataclass() == opts


class TestModelLayering:
    """The models package stands on its own."""

    def test_models_never_import_the_solver(self):
        package_dir = Path(shiftrota.models.__file__).parent
        offenders = []
        for path in sorted(package_dir.glob("*.py")):
            tree = ast.parse(path.read_text(encoding="utf-8"))
            for node in ast.walk(tree):
                if isinstance(node, ast.ImportFrom) and (node.module or "").startswith("shiftrota.solver"):
                    offenders.append(f"{path.name}:{node.lineno}")
                elif isinstance(node, ast.Import):
                    offenders += [f"{path.name}:{node.lineno}" for a in node.names if a.name.startswith("shiftrota.solver")]
        assert offenders == []

    def test_clock_helpers(self):
        assert duration_hours("22:00", "02:00") == 4.0
        assert format_time_label("07:15") == "7:15a"
