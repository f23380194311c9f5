"""
Unit tests for analysis filtering, the employee list and dashboard figures.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.hr_settings import HRSettings
from domain.analysis_filter import (
    AnalysisFilter, DashboardStats, Employee, build_employee_list
)
from domain.entities import (
    AbsenceType, AttendanceAnalysis, AttendanceStatus, AuthorizedAbsence,
    Department, RawAttendanceRecord, RecapEntry
)


def day(employee_id, name, date, status=AttendanceStatus.PRESENT, lateness=0):
    return AttendanceAnalysis(
        employee_id=employee_id, name=name, date=date, status=status,
        lateness_minutes=lateness, is_late=lateness > 0,
    )


ANALYSES = [
    day("E1", "Alice Martin", "2024-03-05", lateness=15),
    day("E2", "Bob Durand", "2024-03-05", AttendanceStatus.ABSENT_UNAUTHORIZED),
    day("BO1", "Chloé Bernard", "2024-03-06", AttendanceStatus.INCOMPLETE),
    day("E1", "Alice Martin", "2024-04-02", AttendanceStatus.MEETING_PRESENCE),
    day("E2", "Bob Durand", "bad-date"),
]

SETTINGS = HRSettings(employee_departments={"BO1": "Back office"})


class TestAnalysisFilter:
    """Tests for the selection criteria."""

    def test_empty_filter_matches_all(self):
        assert AnalysisFilter().apply(ANALYSES, SETTINGS) == ANALYSES

    def test_search_by_name_is_case_insensitive(self):
        result = AnalysisFilter(search="alice").apply(ANALYSES, SETTINGS)
        assert {a.employee_id for a in result} == {"E1"}

    def test_search_by_id(self):
        result = AnalysisFilter(search="BO1").apply(ANALYSES, SETTINGS)
        assert [a.employee_id for a in result] == ["BO1"]

    def test_status(self):
        result = AnalysisFilter(status=AttendanceStatus.ABSENT_UNAUTHORIZED).apply(ANALYSES, SETTINGS)
        assert [a.employee_id for a in result] == ["E2"]

    def test_department_defaults_to_sales(self):
        back_office = AnalysisFilter(department=Department.BACK_OFFICE).apply(ANALYSES, SETTINGS)
        sales = AnalysisFilter(department=Department.SALES).apply(ANALYSES, SETTINGS)

        assert [a.employee_id for a in back_office] == ["BO1"]
        assert len(sales) == 4

    def test_month_keeps_undated_entries(self):
        result = AnalysisFilter(month="2024-03").apply(ANALYSES, SETTINGS)
        assert [a.date for a in result] == ["2024-03-05", "2024-03-05", "2024-03-06", "bad-date"]

    def test_date_interval_is_inclusive(self):
        criteria = AnalysisFilter(employee_id="E1", date_start="2024-03-05", date_end="2024-04-02")
        assert len(criteria.apply(ANALYSES, SETTINGS)) == 2

        criteria = AnalysisFilter(employee_id="E1", date_start="2024-03-06")
        assert [a.date for a in criteria.apply(ANALYSES, SETTINGS)] == ["2024-04-02"]


class TestEmployeeList:
    """Tests for the known employee list."""

    def test_latest_name_wins_and_absences_are_added(self):
        records = [
            RawAttendanceRecord("E1", "Alice M.", "2024-03-04 08:30:00"),
            RawAttendanceRecord("E1", "Alice Martin", "2024-03-05 08:30:00"),
            RawAttendanceRecord("E2", "Émile Durand", "2024-03-05 08:30:00"),
        ]
        absences = [AuthorizedAbsence("E9", "2024-03-05", AbsenceType.SICKNESS)]

        assert build_employee_list(records, absences) == [
            Employee("E1", "Alice Martin"),
            Employee("E9", "Collaborateur E9"),
            Employee("E2", "Émile Durand"),
        ]

    def test_empty(self):
        assert build_employee_list([], []) == []


class TestDashboardStats:
    """Tests for the dashboard figures."""

    def test_counts(self):
        selection = ANALYSES[:4]
        recap = [
            RecapEntry("E1", "Alice Martin", late_cumul_minutes=15, deduction=0, is_compliant=True),
            RecapEntry("E2", "Bob Durand", deduction=150, is_compliant=False),
            RecapEntry("BO1", "Chloé Bernard", deduction=100, is_compliant=False),
        ]
        stats = DashboardStats.compute(selection, recap)

        assert stats.total == 4
        assert stats.present == 2
        assert stats.late == 1
        assert stats.absent_unauthorized == 1
        assert stats.incomplete == 1
        assert stats.presence_rate == 50.0
        assert stats.global_late_minutes == 15
        assert stats.global_deductions == 250
        assert stats.disputes == 2

    def test_day_series_is_reversed(self):
        stats = DashboardStats.compute(ANALYSES[:4], [])

        assert [d.date for d in stats.by_day] == ["2024-04-02", "2024-03-06", "2024-03-05"]
        march_5 = stats.by_day[-1]
        assert (march_5.presents, march_5.late) == (1, 1)

    def test_day_series_is_limited(self):
        analyses = [day("E1", "Alice", f"2024-03-{d:02d}") for d in range(1, 16)]
        stats = DashboardStats.compute(analyses, [])

        assert len(stats.by_day) == 10
        assert stats.by_day[0].date == "2024-03-10"
        assert stats.by_day[-1].date == "2024-03-01"

    def test_empty_selection(self):
        stats = DashboardStats.compute([], [])
        assert stats.total == 0
        assert stats.presence_rate == 0.0
        assert stats.by_day == []
