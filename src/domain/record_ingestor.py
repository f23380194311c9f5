"""
Record Ingestor Module

Parses raw delimited rows into typed records and merges them with the records
already stored. Pure: the caller persists ``existing + accepted``.

Punch rows:   Name, EmployeeId, Timestamp
Absence rows: EmployeeId, Date, Type, Comment[, StartTime, EndTime]
"""

import csv
from dataclasses import dataclass, field
from typing import Generic, Iterable, List, Optional, Sequence, Set, TypeVar

from .entities import AbsenceType, AuthorizedAbsence, RawAttendanceRecord
from .timestamp_normalizer import normalize, parse_date, split_timestamp, to_minutes
from infrastructure.logger import get_logger

logger = get_logger("RecordIngestor")

T = TypeVar("T")


@dataclass
class IngestResult(Generic[T]):
    """
    Outcome of one ingestion batch.

    Attributes:
        accepted: Genuinely new records, in input order
        rejected_count: Rows dropped for missing id or unusable date
        duplicate_count: Rows already known (stored or earlier in the batch)
    """
    accepted: List[T] = field(default_factory=list)
    rejected_count: int = 0
    duplicate_count: int = 0

    @property
    def skipped_count(self) -> int:
        return self.rejected_count + self.duplicate_count


def detect_separator(line: str) -> str:
    """Return ';' when the line contains one, else ','."""
    return ";" if ";" in line else ","


def split_row(row: str, separator: Optional[str] = None) -> List[str]:
    """Split one delimited row into trimmed cells; quoted cells may contain the separator."""
    sep = separator or detect_separator(row)
    cells = next(csv.reader([row], delimiter=sep, skipinitialspace=True), [])
    return [cell.strip().strip('"').strip() for cell in cells]


def _cell(cells: Sequence[str], index: int) -> str:
    return cells[index] if index < len(cells) else ""


def absence_key(absence: AuthorizedAbsence) -> str:
    """
    Dedup key of an absence.

    Full-day entries are unique per (employee, date); partial entries per
    (employee, date, start, end).
    """
    base = f"{absence.employee_id.strip()}_{absence.date.strip()}"
    if absence.is_full_day:
        return base
    return f"{base}_{absence.start_time}_{absence.end_time}"


class RecordIngestor:
    """
    Turns raw CSV rows into deduplicated domain records.

    Merge semantics: only rows whose key is not already known are accepted,
    existing records are never overwritten.
    """

    def ingest(
        self,
        existing: Iterable[RawAttendanceRecord],
        rows: Iterable[str],
        separator: Optional[str] = None
    ) -> IngestResult[RawAttendanceRecord]:
        """
        Parse punch rows and keep only the new ones.

        Args:
            existing: Records already stored
            rows: Data rows (header excluded)
            separator: Column separator; detected per row when None

        Returns:
            IngestResult with the accepted records and skip counters
        """
        known: Set[str] = {record.dedup_key for record in existing}
        result: IngestResult[RawAttendanceRecord] = IngestResult()

        for row in rows:
            if not row.strip():
                continue
            cells = split_row(row, separator)
            record = RawAttendanceRecord(
                employee_id=_cell(cells, 1),
                name=_cell(cells, 0),
                timestamp=normalize(_cell(cells, 2)),
            )
            date_str, _ = split_timestamp(record.timestamp)
            if not record.employee_id or parse_date(date_str) is None:
                result.rejected_count += 1
                logger.debug(f"Ligne de pointage rejetée: {row!r}")
                continue
            if record.dedup_key in known:
                result.duplicate_count += 1
                continue
            known.add(record.dedup_key)
            result.accepted.append(record)

        logger.debug(
            f"Pointages: {len(result.accepted)} nouveaux, "
            f"{result.duplicate_count} doublons, {result.rejected_count} rejetés"
        )
        return result

    def ingest_absences(
        self,
        existing: Iterable[AuthorizedAbsence],
        rows: Iterable[str],
        separator: Optional[str] = None
    ) -> IngestResult[AuthorizedAbsence]:
        """
        Parse absence rows and keep only the new ones.

        Rows with an empty id, an unparseable date, an unknown type or malformed
        partial times are rejected.
        """
        known: Set[str] = {absence_key(absence) for absence in existing}
        result: IngestResult[AuthorizedAbsence] = IngestResult()

        for row in rows:
            if not row.strip():
                continue
            cells = split_row(row, separator)
            employee_id = _cell(cells, 0)
            date_str, _ = split_timestamp(normalize(_cell(cells, 1)))
            absence_type = AbsenceType.parse(_cell(cells, 2))
            start_time = _cell(cells, 4) or None
            end_time = _cell(cells, 5) or None

            if not employee_id or parse_date(date_str) is None or absence_type is None:
                result.rejected_count += 1
                logger.debug(f"Ligne d'absence rejetée: {row!r}")
                continue
            if (start_time or end_time) and (to_minutes(start_time) is None or to_minutes(end_time) is None):
                result.rejected_count += 1
                logger.debug(f"Horaires d'autorisation invalides: {row!r}")
                continue

            absence = AuthorizedAbsence(
                employee_id=employee_id,
                date=date_str,
                absence_type=absence_type,
                comment=_cell(cells, 3),
                start_time=start_time,
                end_time=end_time,
            )
            key = absence_key(absence)
            if key in known:
                result.duplicate_count += 1
                continue
            known.add(key)
            result.accepted.append(absence)

        logger.debug(
            f"Absences: {len(result.accepted)} nouvelles, "
            f"{result.duplicate_count} doublons, {result.rejected_count} rejetées"
        )
        return result
