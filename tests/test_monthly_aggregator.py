"""
Unit tests for MonthlyAggregator and recap sorting.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.hr_settings import PayrollRules
from domain.entities import AttendanceAnalysis, AttendanceStatus, RecapEntry
from domain.monthly_aggregator import MonthlyAggregator
from domain.sorting import get_name_sort_key, sort_recap


def day(employee_id, date, status, lateness=0, name=None):
    return AttendanceAnalysis(
        employee_id=employee_id,
        name=name or f"Nom {employee_id}",
        date=date,
        status=status,
        lateness_minutes=lateness,
        is_late=lateness > 0,
    )


class TestMonthlyAggregator:
    """Tests for recap aggregation."""

    def test_counters(self):
        analyses = [
            day("E1", "2024-03-04", AttendanceStatus.PRESENT),
            day("E1", "2024-03-05", AttendanceStatus.MEETING_PRESENCE),
            day("E1", "2024-03-06", AttendanceStatus.ABSENT_AUTHORIZED),
            day("E1", "2024-03-07", AttendanceStatus.ABSENT_UNAUTHORIZED),
            day("E1", "2024-03-08", AttendanceStatus.INCOMPLETE),
        ]
        [entry] = MonthlyAggregator().aggregate(analyses)

        assert entry.worked == 2
        assert entry.meetings == 1
        assert entry.abs_authorized == 1
        assert entry.abs_unauthorized == 1
        assert entry.incomplete == 1
        assert entry.absence_penalty == 150 + 100
        assert entry.deduction == 250
        assert entry.is_compliant is False

    def test_unauthorized_absence_costs_150(self):
        [entry] = MonthlyAggregator().aggregate([day("E3", "2024-03-06", AttendanceStatus.ABSENT_UNAUTHORIZED)])
        assert entry.deduction == 150

    def test_lateness_within_franchise_is_free(self):
        analyses = [
            day("E1", "2024-03-04", AttendanceStatus.PRESENT, 70),
            day("E1", "2024-03-05", AttendanceStatus.PRESENT, 60),
        ]
        [entry] = MonthlyAggregator().aggregate(analyses)

        assert entry.late_cumul_minutes == 130
        assert entry.late_hours == 2.17
        assert entry.lateness_deduction == 0
        assert entry.deduction == 0
        assert entry.is_compliant is True
        assert entry.lateness_details == ["04/03 : +70 min", "05/03 : +60 min"]

    def test_lateness_above_franchise(self):
        analyses = [
            day("E1", "2024-03-04", AttendanceStatus.PRESENT, 100),
            day("E1", "2024-03-05", AttendanceStatus.PRESENT, 50),
        ]
        [entry] = MonthlyAggregator().aggregate(analyses)

        assert entry.late_cumul_minutes == 150
        assert entry.late_hours == 2.5
        assert entry.lateness_deduction == 75.0
        assert entry.deduction == 75.0
        assert entry.is_compliant is False

    def test_deduction_rounding(self):
        [entry] = MonthlyAggregator().aggregate([day("E1", "2024-03-04", AttendanceStatus.PRESENT, 137)])

        assert entry.late_hours == 2.28
        assert entry.lateness_deduction == 68.4

    def test_custom_rules(self):
        rules = PayrollRules(absence_penalty=200, lateness_franchise_minutes=0, lateness_hourly_rate=60)
        analyses = [
            day("E1", "2024-03-04", AttendanceStatus.ABSENT_UNAUTHORIZED),
            day("E1", "2024-03-05", AttendanceStatus.PRESENT, 30),
        ]
        [entry] = MonthlyAggregator(rules).aggregate(analyses)

        assert entry.deduction == 200 + 30.0

    def test_sorted_by_lateness_descending(self):
        analyses = [
            day("E1", "2024-03-04", AttendanceStatus.PRESENT, 5),
            day("E2", "2024-03-04", AttendanceStatus.PRESENT, 50),
            day("E3", "2024-03-04", AttendanceStatus.PRESENT, 0),
        ]
        recap = MonthlyAggregator().aggregate(analyses)

        assert [e.employee_id for e in recap] == ["E2", "E1", "E3"]

    def test_empty(self):
        assert MonthlyAggregator().aggregate([]) == []


class TestSortRecap:
    """Tests for recap sorting options."""

    RECAP = [
        RecapEntry("E1", "Émile", late_cumul_minutes=10, deduction=300),
        RecapEntry("E2", "adam", late_cumul_minutes=90, deduction=0),
        RecapEntry("E3", "Zoé", late_cumul_minutes=40, deduction=150),
    ]

    def test_by_name_ignores_accents_and_case(self):
        assert [e.employee_id for e in sort_recap(self.RECAP, "name")] == ["E2", "E1", "E3"]

    def test_by_deduction(self):
        assert [e.employee_id for e in sort_recap(self.RECAP, "deduction")] == ["E1", "E3", "E2"]

    def test_default_is_lateness(self):
        assert [e.employee_id for e in sort_recap(self.RECAP, "unknown")] == ["E2", "E3", "E1"]

    def test_sort_returns_new_list(self):
        original = list(self.RECAP)
        sort_recap(self.RECAP, "name")
        assert self.RECAP == original

    def test_name_sort_key(self):
        assert get_name_sort_key("Émile")[0] == "emile"
        assert get_name_sort_key("") == ("", "")
