"""Tests for override resolution and custom-time planning."""
from shiftrota.models import Assign, BusinessClosed, CustomTime, DayOfWeek, Exclude, Prioritize, Shift, ShiftType
from shiftrota.solver.day_policy import DayPolicy
from shiftrota.solver.overrides import plan_custom_time, resolve_overrides

TUE = DayOfWeek.TUESDAY


def _shift(shift_id, start, end, shift_type=ShiftType.MORNING, bartender=False, **kwargs):
    return Shift(
        id=shift_id, day=TUE, shift_type=shift_type, start_time=start, end_time=end,
        required_staff=1, name=shift_id, requires_bartender=bartender, **kwargs,
    )


class TestResolveOverrides:
    """Tests for grouping overrides by day."""

    def test_grouping(self):
        overrides = [
            Exclude("a", TUE, ShiftType.MORNING),
            Assign("b", TUE),
            CustomTime("c", TUE, end_time="11:00"),
            Prioritize("d", DayOfWeek.FRIDAY),
            BusinessClosed(DayOfWeek.WEDNESDAY),
        ]
        resolved = resolve_overrides(overrides)
        assert list(resolved) == list(DayOfWeek)
        tue = resolved[TUE]
        assert [o.employee_id for o in tue.forced] == ["b", "c"]
        assert [o.employee_id for o in tue.custom_times] == ["c"]
        assert resolved[DayOfWeek.FRIDAY].prioritized_ids(ShiftType.NIGHT) == ["d"]
        assert resolved[DayOfWeek.WEDNESDAY].forced == []

    def test_exclude_scoped_by_type(self):
        tue = resolve_overrides([Exclude("a", TUE, ShiftType.MORNING)])[TUE]
        assert tue.is_excluded("a", ShiftType.MORNING)
        assert not tue.is_excluded("a", ShiftType.NIGHT)
        assert not tue.is_excluded("b", ShiftType.MORNING)

    def test_any_exclude_covers_all_types(self):
        tue = resolve_overrides([Exclude("a", TUE)])[TUE]
        assert tue.is_excluded("a", ShiftType.MID)

    def test_forced_for_skips_consumed(self):
        """Consumed overrides are matched by identity."""
        first = Assign("a", TUE, ShiftType.NIGHT)
        second = Assign("b", TUE)
        tue = resolve_overrides([first, second])[TUE]
        assert tue.forced_for(ShiftType.NIGHT) == [first, second]
        assert tue.forced_for(ShiftType.MORNING) == [second]
        assert tue.forced_for(ShiftType.NIGHT, consumed=[first]) == [second]


class TestPlanCustomTime:
    """Tests for custom-time splitting and standalone shifts."""

    def test_leaving_early_splits(self, make_employee):
        kim = make_employee("kim", "Kim")
        base = _shift("tue-open", "07:00", "15:00")
        plan = plan_custom_time(CustomTime("kim", TUE, end_time="11:00"), kim, [base])
        assert plan.is_split
        assert plan.shift is base
        assert plan.worked == ("07:00", "11:00")
        cover = plan.coverage
        assert cover.id == "tue-open-cover-kim"
        assert (cover.start_time, cover.end_time) == ("11:00", "15:00")
        assert cover.required_staff == 1
        assert cover.shift_type is ShiftType.MORNING
        assert cover.name == "Cover 11a-3p (Kim leaves early)"

    def test_arriving_late_splits(self, make_employee):
        kim = make_employee("kim", "Kim")
        base = _shift("tue-bar", "16:00", "22:00", ShiftType.NIGHT, bartender=True)
        plan = plan_custom_time(CustomTime("kim", TUE, ShiftType.NIGHT, start_time="18:00"), kim, [base])
        assert plan.worked == ("18:00", "22:00")
        cover = plan.coverage
        assert (cover.start_time, cover.end_time) == ("16:00", "18:00")
        assert cover.requires_bartender
        assert cover.name == "Cover 4p-6p (Kim arrives late)"

    def test_matching_start_still_leaves_early(self, make_employee):
        """Start equal to the shift start with an end inside is leaving early."""
        kim = make_employee("kim", "Kim")
        base = _shift("tue-open", "07:00", "15:00")
        plan = plan_custom_time(CustomTime("kim", TUE, start_time="07:00", end_time="12:00"), kim, [base])
        assert plan.worked == ("07:00", "12:00")
        assert plan.coverage.start_time == "12:00"

    def test_type_mismatch_is_not_adjacent(self, make_employee):
        """A night custom time ignores morning shifts."""
        kim = make_employee("kim", "Kim")
        base = _shift("tue-open", "07:00", "15:00")
        assert plan_custom_time(CustomTime("kim", TUE, ShiftType.NIGHT, end_time="11:00"), kim, [base]) is None

    def test_standalone_custom_shift(self, make_employee):
        kim = make_employee("kim", "Kim")
        plan = plan_custom_time(CustomTime("kim", TUE, start_time="10:00", end_time="13:00"), kim, [])
        assert not plan.is_split
        shift = plan.shift
        assert shift.id == "tue-custom-kim-morning"
        assert shift.reserved_for == "kim"
        assert shift.required_staff == 1
        assert not shift.requires_bartender
        assert plan.worked == ("10:00", "13:00")

    def test_standalone_infers_night(self, make_employee):
        """Afternoon-to-evening spans become night shifts requiring a bartender."""
        kim = make_employee("kim", "Kim")
        plan = plan_custom_time(CustomTime("kim", TUE, start_time="12:30", end_time="18:00"), kim, [])
        assert plan.shift.shift_type is ShiftType.NIGHT
        assert plan.shift.requires_bartender

    def test_standalone_keeps_explicit_type(self, make_employee):
        kim = make_employee("kim", "Kim")
        plan = plan_custom_time(CustomTime("kim", TUE, ShiftType.MID, start_time="17:00", end_time="20:00"), kim, [])
        assert plan.shift.id == "tue-custom-kim-mid"

    def test_standalone_clamped_by_early_close(self, make_employee):
        kim = make_employee("kim", "Kim")
        override = CustomTime("kim", TUE, start_time="10:00", end_time="16:00")
        plan = plan_custom_time(override, kim, [], DayPolicy(early_close="14:00"))
        assert plan.worked == ("10:00", "14:00")
        late = CustomTime("kim", TUE, start_time="15:00", end_time="18:00")
        assert plan_custom_time(late, kim, [], DayPolicy(early_close="14:00")) is None

    def test_only_one_time_without_shift(self, make_employee):
        """An end time with nothing to split falls back to a plain assign."""
        kim = make_employee("kim", "Kim")
        assert plan_custom_time(CustomTime("kim", TUE, end_time="11:00"), kim, []) is None

    def test_reserved_shifts_are_not_split(self, make_employee):
        kim = make_employee("kim", "Kim")
        reserved = _shift("tue-custom-lee-morning", "07:00", "15:00", reserved_for="lee")
        assert plan_custom_time(CustomTime("kim", TUE, end_time="11:00"), kim, [reserved]) is None
