"""
Unit tests for RecordIngestor (punch and absence rows).
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import AbsenceType, AuthorizedAbsence, RawAttendanceRecord
from domain.record_ingestor import RecordIngestor, absence_key, split_row


PUNCH_ROWS = [
    "Alice Martin;E1;05/03/2024 08:45",
    "Alice Martin;E1;05/03/2024 17:20",
    "Bob Durand;E2;05/03/2024 9H10",
]


class TestSplitRow:
    """Tests for row splitting."""

    def test_semicolon_is_preferred(self):
        assert split_row('"Alice";E1;"05/03/2024 08:45"') == ["Alice", "E1", "05/03/2024 08:45"]

    def test_comma_fallback(self):
        assert split_row("Alice, E1 ,2024-03-05 08:45") == ["Alice", "E1", "2024-03-05 08:45"]

    def test_explicit_separator(self):
        assert split_row("a,b;c", ";") == ["a,b", "c"]

    def test_quoted_cell_keeps_separator(self):
        assert split_row('"Dupont, Jean",E1,05/03/2024 08:45', ",") == [
            "Dupont, Jean", "E1", "05/03/2024 08:45"
        ]


class TestIngestPunches:
    """Tests for punch ingestion."""

    def test_rows_are_parsed_and_normalized(self):
        result = RecordIngestor().ingest([], PUNCH_ROWS)

        assert result.rejected_count == 0
        assert result.duplicate_count == 0
        assert result.accepted == [
            RawAttendanceRecord("E1", "Alice Martin", "2024-03-05 08:45:00"),
            RawAttendanceRecord("E1", "Alice Martin", "2024-03-05 17:20:00"),
            RawAttendanceRecord("E2", "Bob Durand", "2024-03-05 09:10:00"),
        ]

    def test_rows_without_id_or_timestamp_are_rejected(self):
        rows = ["Alice;;05/03/2024 08:45", "Bob;E2;", "Bob;E2"]
        result = RecordIngestor().ingest([], rows)

        assert result.accepted == []
        assert result.rejected_count == 3

    def test_quoted_name_with_comma(self):
        result = RecordIngestor().ingest([], ['"Dupont, Jean",E1,05/03/2024 08:45'], ",")

        assert result.rejected_count == 0
        assert result.accepted == [RawAttendanceRecord("E1", "Dupont, Jean", "2024-03-05 08:45:00")]

    def test_unparseable_date_is_rejected(self):
        rows = ["Jean;Dupont;E1", "Alice;E1;99/99/2024 08:45"]
        result = RecordIngestor().ingest([], rows)

        assert result.accepted == []
        assert result.rejected_count == 2

    def test_blank_rows_are_ignored(self):
        result = RecordIngestor().ingest([], ["", "   "])
        assert result.accepted == []
        assert result.skipped_count == 0

    def test_duplicates_within_batch(self):
        rows = PUNCH_ROWS + ["Alice Martin;E1;2024-03-05 08:45:00"]
        result = RecordIngestor().ingest([], rows)

        assert len(result.accepted) == 3
        assert result.duplicate_count == 1

    def test_reimport_adds_nothing(self):
        """Importing the same file twice leaves the stored list unchanged."""
        ingestor = RecordIngestor()
        first = ingestor.ingest([], PUNCH_ROWS)
        stored = list(first.accepted)

        second = ingestor.ingest(stored, PUNCH_ROWS)

        assert second.accepted == []
        assert second.duplicate_count == len(PUNCH_ROWS)
        assert len({r.dedup_key for r in stored + second.accepted}) == len(stored)

    def test_existing_records_are_never_overwritten(self):
        existing = [RawAttendanceRecord("E1", "Ancien Nom", "2024-03-05 08:45:00")]
        result = RecordIngestor().ingest(existing, PUNCH_ROWS[:1])

        assert result.accepted == []
        assert existing[0].name == "Ancien Nom"


class TestIngestAbsences:
    """Tests for absence ingestion."""

    def test_full_day_and_partial_rows(self):
        rows = [
            "E1;07/03/2024;Maladie;Certificat",
            "E2;2024-03-08;Autorisation;RDV;08:30;10:00",
        ]
        result = RecordIngestor().ingest_absences([], rows)

        assert result.accepted == [
            AuthorizedAbsence("E1", "2024-03-07", AbsenceType.SICKNESS, "Certificat"),
            AuthorizedAbsence("E2", "2024-03-08", AbsenceType.AUTHORIZATION, "RDV", "08:30", "10:00"),
        ]

    def test_type_parsing_is_tolerant(self):
        rows = ["E1;2024-03-07;conge;", "E1;2024-03-08;FERIE;", "E1;2024-03-09;PAID_LEAVE;"]
        result = RecordIngestor().ingest_absences([], rows)

        assert [a.absence_type for a in result.accepted] == [
            AbsenceType.PAID_LEAVE, AbsenceType.HOLIDAY, AbsenceType.PAID_LEAVE
        ]

    def test_unknown_type_is_rejected(self):
        result = RecordIngestor().ingest_absences([], ["E1;2024-03-07;Vacances;"])
        assert result.accepted == []
        assert result.rejected_count == 1

    def test_malformed_partial_times_are_rejected(self):
        result = RecordIngestor().ingest_absences([], ["E1;2024-03-07;Autorisation;;8h;10:00"])
        assert result.rejected_count == 1

    def test_full_day_dedup_on_employee_and_date(self):
        existing = [AuthorizedAbsence("E1", "2024-03-07", AbsenceType.SICKNESS)]
        result = RecordIngestor().ingest_absences(existing, ["E1;2024-03-07;Congé;"])

        assert result.accepted == []
        assert result.duplicate_count == 1

    def test_partial_dedup_keeps_distinct_windows(self):
        rows = [
            "E1;2024-03-07;Autorisation;;08:30;10:00",
            "E1;2024-03-07;Autorisation;;16:00;17:30",
            "E1;2024-03-07;Autorisation;;08:30;10:00",
        ]
        result = RecordIngestor().ingest_absences([], rows)

        assert len(result.accepted) == 2
        assert result.duplicate_count == 1

    def test_absence_key(self):
        full = AuthorizedAbsence("E1", "2024-03-07", AbsenceType.SICKNESS)
        partial = AuthorizedAbsence("E1", "2024-03-07", AbsenceType.AUTHORIZATION, "", "08:30", "10:00")
        assert absence_key(full) == "E1_2024-03-07"
        assert absence_key(partial) == "E1_2024-03-07_08:30_10:00"
