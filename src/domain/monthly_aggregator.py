"""
Monthly Aggregator Module

Folds daily attendance analyses into the payroll recap of each employee:
worked days, cumulated lateness, absences and the resulting deduction.
"""

from typing import Dict, Iterable, List, Optional

from .entities import AttendanceAnalysis, AttendanceStatus, RecapEntry
from .sorting import sort_recap
from .timestamp_normalizer import parse_date
from config.hr_settings import PayrollRules


class MonthlyAggregator:
    """
    Calculates payroll recaps from daily analyses.

    Provides:
    - Per-status day counters
    - Cumulated lateness with per-day detail
    - Deduction: absences, incomplete days and lateness above the franchise
    - Compliance flag
    """

    def __init__(self, rules: Optional[PayrollRules] = None):
        """
        Initialize aggregator.

        Args:
            rules: Deduction scale (defaults: 150 / 100 / 130 min / 30 per hour)
        """
        self.rules = rules or PayrollRules()

    def aggregate(self, analyses: Iterable[AttendanceAnalysis]) -> List[RecapEntry]:
        """
        Build one recap entry per employee present in the analyses.

        Args:
            analyses: Daily analyses of the period (already filtered)

        Returns:
            Recap entries, worst cumulated lateness first
        """
        entries: Dict[str, RecapEntry] = {}

        for analysis in analyses:
            entry = entries.get(analysis.employee_id)
            if entry is None:
                entry = RecapEntry(employee_id=analysis.employee_id, name=analysis.name)
                entries[analysis.employee_id] = entry
            self._accumulate(entry, analysis)

        recap = [self._finalize(entry) for entry in entries.values()]
        return sort_recap(recap, "lateness")

    def _accumulate(self, entry: RecapEntry, analysis: AttendanceAnalysis) -> None:
        """Add one day to an employee's counters."""
        status = analysis.status

        if status in (AttendanceStatus.PRESENT, AttendanceStatus.MEETING_PRESENCE):
            entry.worked += 1
        if status == AttendanceStatus.MEETING_PRESENCE:
            entry.meetings += 1

        if analysis.is_late:
            entry.late_cumul_minutes += analysis.lateness_minutes
            entry.lateness_details.append(
                f"{self._short_date(analysis.date)} : +{analysis.lateness_minutes} min"
            )

        if status == AttendanceStatus.ABSENT_UNAUTHORIZED:
            entry.abs_unauthorized += 1
            entry.absence_penalty += self.rules.absence_penalty
        elif status == AttendanceStatus.ABSENT_AUTHORIZED:
            entry.abs_authorized += 1
        elif status == AttendanceStatus.INCOMPLETE:
            entry.incomplete += 1
            entry.absence_penalty += self.rules.incomplete_penalty

    def _finalize(self, entry: RecapEntry) -> RecapEntry:
        """Compute the deduction and compliance flag of a completed entry."""
        within_franchise = entry.late_cumul_minutes <= self.rules.lateness_franchise_minutes
        entry.late_hours = round(entry.late_cumul_minutes / 60, 2)
        entry.lateness_deduction = (
            0.0 if within_franchise
            else round(entry.late_hours * self.rules.lateness_hourly_rate, 2)
        )
        entry.deduction = entry.lateness_deduction + entry.absence_penalty
        entry.is_compliant = (
            entry.abs_unauthorized == 0
            and entry.incomplete == 0
            and within_franchise
        )
        return entry

    @staticmethod
    def _short_date(date_str: str) -> str:
        """Format "YYYY-MM-DD" as "DD/MM" for the lateness detail."""
        day = parse_date(date_str)
        return day.strftime("%d/%m") if day else date_str
