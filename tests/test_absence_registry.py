"""
Unit tests for manual absence entry.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.absence_registry import AbsenceRegistry
from domain.entities import AbsenceType, AuthorizedAbsence, ValidationError


class TestAddRange:
    """Tests for expanding a date range."""

    def test_one_entry_per_day(self):
        entries = AbsenceRegistry.add_range(
            [], "E1", "2024-03-04", "2024-03-06", AbsenceType.PAID_LEAVE, "Vacances"
        )

        assert [e.date for e in entries] == ["2024-03-04", "2024-03-05", "2024-03-06"]
        assert all(e.is_full_day for e in entries)
        assert all(e.comment == "Vacances" for e in entries)

    def test_range_crosses_month_end(self):
        entries = AbsenceRegistry.add_range([], "E1", "2024-02-28", "2024-03-01", AbsenceType.SICKNESS)
        assert [e.date for e in entries] == ["2024-02-28", "2024-02-29", "2024-03-01"]

    def test_single_day(self):
        entries = AbsenceRegistry.add_range([], " E1 ", "2024-03-05", "2024-03-05", AbsenceType.MISSION)
        assert entries == [AuthorizedAbsence("E1", "2024-03-05", AbsenceType.MISSION)]

    def test_days_already_taken_are_skipped(self):
        existing = [AuthorizedAbsence("E1", "2024-03-05", AbsenceType.SICKNESS)]
        entries = AbsenceRegistry.add_range(
            existing, "E1", "2024-03-04", "2024-03-06", AbsenceType.PAID_LEAVE
        )

        assert [e.date for e in entries] == ["2024-03-04", "2024-03-06"]

    def test_other_employee_days_are_free(self):
        existing = [AuthorizedAbsence("E2", "2024-03-05", AbsenceType.SICKNESS)]
        entries = AbsenceRegistry.add_range(existing, "E1", "2024-03-05", "2024-03-05", AbsenceType.SICKNESS)
        assert len(entries) == 1

    def test_partial_window(self):
        [entry] = AbsenceRegistry.add_range(
            [], "E1", "2024-03-05", "2024-03-05", AbsenceType.AUTHORIZATION, "RDV", "08:30", "10:00"
        )
        assert entry.start_time == "08:30"
        assert entry.end_time == "10:00"
        assert not entry.is_full_day

    def test_end_before_start(self):
        with pytest.raises(ValidationError):
            AbsenceRegistry.add_range([], "E1", "2024-03-06", "2024-03-04", AbsenceType.SICKNESS)

    def test_missing_fields(self):
        with pytest.raises(ValidationError):
            AbsenceRegistry.add_range([], "", "2024-03-04", "2024-03-04", AbsenceType.SICKNESS)
        with pytest.raises(ValidationError):
            AbsenceRegistry.add_range([], "E1", "04/03/2024", "2024-03-04", AbsenceType.SICKNESS)

    def test_incomplete_partial_window(self):
        with pytest.raises(ValidationError):
            AbsenceRegistry.add_range(
                [], "E1", "2024-03-05", "2024-03-05", AbsenceType.AUTHORIZATION, "", "08:30", None
            )

    def test_inverted_partial_window(self):
        with pytest.raises(ValidationError):
            AbsenceRegistry.add_range(
                [], "E1", "2024-03-05", "2024-03-05", AbsenceType.AUTHORIZATION, "", "10:00", "08:30"
            )


class TestRemove:
    """Tests for removing an absence."""

    ABSENCES = [
        AuthorizedAbsence("E1", "2024-03-04", AbsenceType.SICKNESS),
        AuthorizedAbsence("E1", "2024-03-05", AbsenceType.SICKNESS),
    ]

    def test_remove_by_index(self):
        remaining = AbsenceRegistry.remove(self.ABSENCES, 0)
        assert [a.date for a in remaining] == ["2024-03-05"]
        assert len(self.ABSENCES) == 2

    def test_out_of_range(self):
        with pytest.raises(ValidationError):
            AbsenceRegistry.remove(self.ABSENCES, 2)
        with pytest.raises(ValidationError):
            AbsenceRegistry.remove(self.ABSENCES, -1)
