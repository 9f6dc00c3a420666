#!/usr/bin/env python3
"""Tests for the interval rule engine."""

from datetime import date

import pytest

from fleetsched import (
    IntervalRules,
    MaintenanceKind,
    MaintenanceRecord,
    SchedulerConfig,
    TaskInterval,
    compute_base_interval,
    reference_date,
)
from fleetsched.intervals import most_recent

TODAY = date(2024, 1, 10)


def rec(record_id, kind=MaintenanceKind.PREVENTIVE, start=date(2023, 6, 1), end=None, tasks=None):
    return MaintenanceRecord(record_id, 1, kind, start, end_date=end, tasks=tasks)


def preventive_history(count):
    return [
        rec(i, start=date(2023, 1, 1 + i), end=date(2023, 1, 2 + i)) for i in range(count)
    ]


class TestVisitInterval:
    """Tests for the visit-count rule."""

    @pytest.mark.parametrize(
        "visits,days",
        [(0, 45), (1, 45), (2, 45), (3, 40), (4, 40), (5, 35), (12, 35)],
    )
    def test_default_thresholds(self, visits, days):
        assert IntervalRules().visit_interval(visits) == days

    def test_custom_thresholds_without_zero(self):
        """Counts below the lowest threshold get the longest interval."""
        rules = IntervalRules(SchedulerConfig(visit_intervals=[(2, 20), (4, 10)]))
        assert rules.visit_interval(0) == 20
        assert rules.visit_interval(4) == 10


class TestDecide:
    """Tests for IntervalRules.decide."""

    def test_no_history(self):
        decision = IntervalRules().decide([], today=TODAY)
        assert decision.days == 45
        assert decision.rule == "visits"
        assert decision.reference_date == TODAY
        assert decision.last_kind is None

    def test_medium_and_short_cadence(self):
        assert IntervalRules().decide(preventive_history(3), today=TODAY).days == 40
        assert IntervalRules().decide(preventive_history(5), today=TODAY).days == 35

    def test_corrective_caps_interval(self):
        history = [rec(1, MaintenanceKind.CORRECTIVE, date(2024, 1, 5), date(2024, 1, 10))]
        decision = IntervalRules().decide(history, today=TODAY)
        assert decision.days == 30
        assert decision.corrective_capped
        assert decision.reference_date == date(2024, 1, 10)

    def test_corrective_does_not_lengthen(self):
        """A task interval shorter than the cap stays as is."""
        config = SchedulerConfig(task_intervals=[TaskInterval("oil", 20, ("oil",))])
        history = [rec(1, MaintenanceKind.CORRECTIVE, date(2024, 1, 5), date(2024, 1, 10))]
        decision = IntervalRules(config).decide(history, ["oil change"], TODAY)
        assert decision.days == 20
        assert not decision.corrective_capped

    def test_latest_record_by_date_not_list_order(self):
        history = [
            rec(3, MaintenanceKind.PREVENTIVE, date(2023, 11, 1), date(2023, 12, 1)),
            rec(2, MaintenanceKind.CORRECTIVE, date(2024, 1, 5), date(2024, 1, 10)),
        ]
        decision = IntervalRules().decide(history, today=TODAY)
        assert decision.last_kind == MaintenanceKind.CORRECTIVE
        assert decision.days == 30

    def test_pending_booking_is_not_a_visit(self):
        """An open preventive starting after today neither counts nor sets the date."""
        history = [
            rec(5, MaintenanceKind.PREVENTIVE, date(2024, 2, 24)),
            rec(4, MaintenanceKind.CORRECTIVE, date(2024, 1, 5), date(2024, 1, 8)),
        ]
        decision = IntervalRules().decide(history, today=TODAY)
        assert decision.visit_count == 1
        assert decision.reference_date == date(2024, 1, 8)
        assert decision.last_kind == MaintenanceKind.CORRECTIVE
        assert decision.corrective_capped
        assert decision.days == 30

    def test_tasks_take_shortest_interval(self):
        decision = IntervalRules().decide([], ["Cambio de aceite", "Rotate tires"], TODAY)
        assert decision.days == 30
        assert decision.rule == "tasks"
        assert decision.matched_tasks == ["oil", "tires"]

    def test_tasks_override_visit_rule(self):
        assert IntervalRules().decide([], ["tires"], TODAY).days == 60

    def test_unknown_tasks_ignored(self):
        decision = IntervalRules().decide([], ["wash", ""], TODAY)
        assert decision.days == 45
        assert decision.rule == "visits"

    def test_tasks_default_to_last_closed_record(self):
        history = [rec(1, start=date(2024, 1, 8), end=date(2024, 1, 9), tasks=["brake pads"])]
        decision = IntervalRules().decide(history, today=TODAY)
        assert decision.days == 45
        assert decision.matched_tasks == ["brakes"]

    def test_explanation(self):
        history = [rec(1, MaintenanceKind.CORRECTIVE, date(2024, 1, 5), date(2024, 1, 10))]
        text = IntervalRules().decide(history, today=TODAY).explanation
        assert text.startswith("Base 30 days from 2024-01-10")
        assert "corrective cap" in text


class TestIntervalProperties:
    """Monotonicity and corrective tightening across visit counts."""

    def test_more_visits_never_longer(self):
        rules = IntervalRules()
        for many in range(5, 10):
            for few in range(0, 3):
                assert (
                    rules.decide(preventive_history(many), today=TODAY).days
                    <= rules.decide(preventive_history(few), today=TODAY).days
                )

    def test_corrective_always_within_cap(self):
        rules = IntervalRules()
        for count in range(0, 10):
            history = preventive_history(count) + [
                rec(99, MaintenanceKind.CORRECTIVE, date(2024, 1, 5), date(2024, 1, 10))
            ]
            assert rules.decide(history, today=TODAY).days <= 30


class TestHelpers:
    """Tests for module-level helpers."""

    def test_compute_base_interval(self):
        assert compute_base_interval(preventive_history(3)) == 40
        assert compute_base_interval([], ["oil"]) == 30

    def test_reference_date(self):
        assert reference_date([], TODAY) == TODAY
        assert reference_date([rec(1, start=date(2024, 1, 3))], TODAY) == date(2024, 1, 3)
        assert reference_date(
            [rec(1, start=date(2024, 1, 3), end=date(2024, 1, 6))], TODAY
        ) == date(2024, 1, 6)

    def test_most_recent_tie_broken_by_id(self):
        history = [rec(4, start=date(2024, 1, 3)), rec(9, start=date(2024, 1, 3))]
        assert most_recent(history).record_id == 9
        assert most_recent([]) is None

    def test_most_recent_skips_pending_with_today(self):
        history = [
            rec(1, start=date(2024, 1, 3), end=date(2024, 1, 4)),
            rec(2, start=date(2024, 3, 1)),
        ]
        assert most_recent(history).record_id == 2
        assert most_recent(history, TODAY).record_id == 1
        assert reference_date(history, TODAY) == date(2024, 1, 4)
