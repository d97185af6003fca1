"""Tests for the assignment ledger and the bartender gap-fill pass."""
from datetime import date

import pytest

from shiftrota.models import ConflictType, DayOfWeek, Exclude, ScheduleAssignment
from shiftrota.solver.coverage import bartender_intervals, fill_bartender_gaps, find_coverage_gaps
from shiftrota.solver.day_policy import DayPolicy, compute_day_policies
from shiftrota.solver.ledger import AssignmentLedger
from shiftrota.solver.overrides import resolve_overrides

MONDAY = date(2025, 12, 8)
TUE = "2025-12-09"


class TestAssignmentLedger:
    """Tests for the running assignment store."""

    def test_add_tracks_hours_and_counts(self):
        ledger = AssignmentLedger(["a", "b"])
        assert ledger.add(ScheduleAssignment("s1", "a", TUE, "07:00", "12:00"))
        assert ledger.hours == {"a": 5.0, "b": 0.0}
        assert ledger.shift_counts == {"a": 1, "b": 0}
        assert ledger.is_assigned("a", TUE)
        assert not ledger.is_assigned("b", TUE)
        assert ledger.filled(TUE, "s1") == 1

    def test_duplicate_refused(self):
        """The same (employee, date, shift) is recorded once."""
        ledger = AssignmentLedger(["a"])
        a = ScheduleAssignment("s1", "a", TUE, "07:00", "12:00")
        assert ledger.add(a)
        assert not ledger.add(a)
        assert len(ledger) == 1
        assert ledger.hours["a"] == 5.0

    def test_explicit_hours(self):
        ledger = AssignmentLedger(["a"])
        ledger.add(ScheduleAssignment("s1", "a", TUE), hours=6.75)
        assert ledger.hours["a"] == 6.75

    def test_queries(self):
        ledger = AssignmentLedger()
        ledger.add(ScheduleAssignment("s1", "a", TUE, "07:00", "12:00"))
        ledger.add(ScheduleAssignment("s2", "b", "2025-12-10", "07:00", "12:00"))
        assert [a.shift_id for a in ledger.on_date(TUE)] == ["s1"]
        assert [a.shift_id for a in ledger.for_employee("b")] == ["s2"]


class TestCoverageGaps:
    """Interval arithmetic over one date's assignments."""

    def test_bartender_intervals_merge(self, roster):
        by_id = {e.id: e for e in roster}
        assignments = [
            ScheduleAssignment("x", "alex", TUE, "07:00", "11:00"),
            ScheduleAssignment("y", "blair", TUE, "10:00", "14:00"),
            ScheduleAssignment("z", "dana", TUE, "14:00", "18:00"),
        ]
        assert bartender_intervals(assignments, by_id, 3) == [(420, 840)]

    def test_partial_cover_leaves_gap(self, roster):
        by_id = {e.id: e for e in roster}
        low = ScheduleAssignment("open", "dana", TUE, "07:15", "12:00")
        assignments = [low, ScheduleAssignment("mid", "alex", TUE, "11:00", "16:00")]
        assert find_coverage_gaps(low, assignments, by_id, 3) == [(435, 660)]

    def test_threshold_changes_who_counts(self, roster):
        by_id = {e.id: e for e in roster}
        low = ScheduleAssignment("open", "dana", TUE, "07:15", "12:00")
        blair = ScheduleAssignment("x", "blair", TUE, "07:00", "13:00")
        assert find_coverage_gaps(low, [low, blair], by_id, 3) == []
        assert find_coverage_gaps(low, [low, blair], by_id, 4) == [(435, 720)]


class TestFillBartenderGaps:
    """Tests for the gap-fill pass."""

    def _run(self, ledger, roster, overrides=(), policies=None):
        return fill_bartender_gaps(
            ledger, roster, MONDAY,
            policies or compute_day_policies(overrides),
            resolve_overrides(overrides), threshold=3,
        )

    @pytest.fixture
    def ledger(self, roster):
        ledger = AssignmentLedger(e.id for e in roster)
        ledger.add(ScheduleAssignment("tue-open", "dana", TUE, "07:15", "12:00"))
        ledger.add(ScheduleAssignment("tue-mid", "alex", TUE, "11:00", "16:00"))
        return ledger

    def test_gap_filled_by_first_free_bartender(self, ledger, roster):
        result = self._run(ledger, roster)
        (added,) = result.added
        assert added == ScheduleAssignment("tue-bartender-gap-blair-0715", "blair", TUE, "07:15", "11:00")
        assert added in ledger.assignments
        assert result.conflicts == []
        assert result.warnings[0].message == "Auto-added Blair (7:15a-11a) to cover Dana on Tuesday"

    def test_excluded_bartender_skipped(self, ledger, roster):
        result = self._run(ledger, roster, [Exclude("blair", DayOfWeek.TUESDAY)])
        assert result.added[0].employee_id == "casey"

    def test_one_bartender_covers_later_gaps(self, make_employee, roster):
        eli = make_employee("eli", "Eli", scale=0)
        staff = roster + [eli]
        ledger = AssignmentLedger(e.id for e in staff)
        ledger.add(ScheduleAssignment("tue-open", "dana", TUE, "07:15", "12:00"))
        ledger.add(ScheduleAssignment("tue-mid", "eli", TUE, "08:00", "11:00"))
        result = self._run(ledger, staff)
        assert [a.employee_id for a in result.added] == ["alex"]
        assert len(ledger) == 3

    def test_no_bartender_conflict(self, make_employee):
        dana = make_employee("dana", "Dana", scale=1)
        ledger = AssignmentLedger(["dana"])
        ledger.add(ScheduleAssignment("tue-open", "dana", TUE, "07:15", "12:00"))
        result = self._run(ledger, [dana])
        assert result.added == []
        (conflict,) = result.conflicts
        assert conflict.type is ConflictType.NO_BARTENDER
        assert conflict.shift_id == "tue-open"
        assert conflict.employee_id == "dana"
        assert (conflict.start_time, conflict.end_time) == ("07:15", "12:00")

    def test_closed_days_skipped(self, ledger, roster):
        policies = compute_day_policies([])
        policies[DayOfWeek.TUESDAY] = DayPolicy(closed=True)
        result = self._run(ledger, roster, policies=policies)
        assert result.added == []
        assert result.conflicts == []
