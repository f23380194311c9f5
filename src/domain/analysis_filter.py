"""
Analysis Filter Module

Selection of published analyses (search, status, employee, department,
month, date interval) and the dashboard figures computed on the selection.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .daily_classifier import fallback_name
from .entities import (
    AttendanceAnalysis, AttendanceStatus, AuthorizedAbsence, Department,
    RawAttendanceRecord, RecapEntry
)
from .sorting import get_name_sort_key
from .timestamp_normalizer import parse_date
from config.hr_settings import HRSettings

# Dates shown in the per-day dashboard series
DAY_SERIES_LENGTH = 10

WORKED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.MEETING_PRESENCE)


@dataclass(frozen=True)
class Employee:
    """An employee known to the engine."""
    employee_id: str
    name: str


def build_employee_list(
    records: Sequence[RawAttendanceRecord],
    absences: Sequence[AuthorizedAbsence]
) -> List[Employee]:
    """
    Employees seen in the punches (latest name wins) plus absence-only ids.

    Returns:
        Employees sorted by display name
    """
    names: Dict[str, str] = {}
    for record in records:
        names[record.employee_id] = record.name
    for absence in absences:
        names.setdefault(absence.employee_id, fallback_name(absence.employee_id))

    employees = [Employee(emp_id, name) for emp_id, name in names.items()]
    return sorted(employees, key=lambda e: get_name_sort_key(e.name))


@dataclass
class AnalysisFilter:
    """
    Criteria applied to the published analyses.

    Empty criteria match everything.

    Attributes:
        search: Case-insensitive name substring, or employee id substring
        status: Exact AttendanceStatus
        employee_id: Exact employee id
        department: Department; employees without assignment count as Sales
        month: "YYYY-MM"
        date_start: Inclusive lower bound "YYYY-MM-DD"
        date_end: Inclusive upper bound "YYYY-MM-DD"
    """
    search: str = ""
    status: Optional[AttendanceStatus] = None
    employee_id: Optional[str] = None
    department: Optional[Department] = None
    month: Optional[str] = None
    date_start: Optional[str] = None
    date_end: Optional[str] = None

    def matches(self, analysis: AttendanceAnalysis, settings: HRSettings) -> bool:
        if self.search:
            term = self.search.lower()
            if term not in analysis.name.lower() and self.search not in analysis.employee_id:
                return False
        if self.status is not None and analysis.status != self.status:
            return False
        if self.employee_id and analysis.employee_id != self.employee_id:
            return False
        if self.department is not None and settings.department_of(analysis.employee_id) != self.department:
            return False

        # Date criteria only apply to parseable dates
        day = parse_date(analysis.date)
        if day is None:
            return True
        if self.month and day.strftime("%Y-%m") != self.month:
            return False
        start = parse_date(self.date_start) if self.date_start else None
        if start is not None and day < start:
            return False
        end = parse_date(self.date_end) if self.date_end else None
        if end is not None and day > end:
            return False
        return True

    def apply(
        self,
        analyses: Sequence[AttendanceAnalysis],
        settings: HRSettings
    ) -> List[AttendanceAnalysis]:
        """Analyses matching every criterion, original order kept."""
        return [a for a in analyses if self.matches(a, settings)]


@dataclass
class DaySummary:
    """Presence and lateness counts of one date."""
    date: str
    presents: int
    late: int


@dataclass
class DashboardStats:
    """
    Headline figures of a filtered selection.

    Attributes:
        total: Analysed employee-days
        present: Present or meeting presence days
        late: Days with lateness
        absent_unauthorized: Unauthorized absence days
        incomplete: Incomplete days
        presence_rate: present / total in percent
        global_late_minutes: Sum of cumulated lateness of the recap
        global_deductions: Sum of recap deductions
        disputes: Employees not compliant
        by_day: Presence/lateness series for the first dates of the selection, reversed
    """
    total: int = 0
    present: int = 0
    late: int = 0
    absent_unauthorized: int = 0
    incomplete: int = 0
    presence_rate: float = 0.0
    global_late_minutes: int = 0
    global_deductions: float = 0.0
    disputes: int = 0
    by_day: List[DaySummary] = field(default_factory=list)

    @classmethod
    def compute(
        cls,
        analyses: Sequence[AttendanceAnalysis],
        recap: Sequence[RecapEntry]
    ) -> "DashboardStats":
        """
        Compute the dashboard of a selection.

        Args:
            analyses: Filtered analyses
            recap: Recap aggregated from the same analyses
        """
        total = len(analyses)
        present = sum(1 for a in analyses if a.status in WORKED_STATUSES)

        dates: List[str] = []
        for analysis in analyses:
            if analysis.date not in dates:
                dates.append(analysis.date)
        by_day = [
            DaySummary(
                date=d,
                presents=sum(1 for a in analyses if a.date == d and a.status in WORKED_STATUSES),
                late=sum(1 for a in analyses if a.date == d and a.is_late),
            )
            for d in reversed(dates[:DAY_SERIES_LENGTH])
        ]

        return cls(
            total=total,
            present=present,
            late=sum(1 for a in analyses if a.is_late),
            absent_unauthorized=sum(
                1 for a in analyses if a.status == AttendanceStatus.ABSENT_UNAUTHORIZED
            ),
            incomplete=sum(1 for a in analyses if a.status == AttendanceStatus.INCOMPLETE),
            presence_rate=(present / total) * 100 if total > 0 else 0.0,
            global_late_minutes=sum(entry.late_cumul_minutes for entry in recap),
            global_deductions=sum(entry.deduction for entry in recap),
            disputes=sum(1 for entry in recap if not entry.is_compliant),
            by_day=by_day,
        )
