"""
Exception Matcher Module

Finds the authorized absence covering an instant of an employee-day.

All comparisons use integer minutes since midnight. Absences whose times do
not parse are ignored. When several partial absences match, the first one in
input order wins.
"""

from typing import Optional, Sequence

from .entities import AuthorizedAbsence
from .timestamp_normalizer import to_minutes


class ExceptionMatcher:
    """Matches a day's authorized absences against the theoretical schedule."""

    @staticmethod
    def match_full_day(daily_absences: Sequence[AuthorizedAbsence]) -> Optional[AuthorizedAbsence]:
        """Get the absence covering the whole day (no start nor end time)."""
        for absence in daily_absences:
            if absence.is_full_day:
                return absence
        return None

    @staticmethod
    def match_morning(
        daily_absences: Sequence[AuthorizedAbsence],
        theoretical_entry_minutes: int
    ) -> Optional[AuthorizedAbsence]:
        """
        Get the partial absence straddling the theoretical entry.

        Matches when start <= entry < end; the absence end then becomes the
        effective entry time for lateness.
        """
        for absence in daily_absences:
            start = to_minutes(absence.start_time)
            end = to_minutes(absence.end_time)
            if start is None or end is None:
                continue
            if start <= theoretical_entry_minutes < end:
                return absence
        return None

    @staticmethod
    def match_evening(
        daily_absences: Sequence[AuthorizedAbsence],
        theoretical_exit_minutes: int
    ) -> Optional[AuthorizedAbsence]:
        """
        Get the partial absence running until (or past) the theoretical exit.

        The absence start then becomes the effective exit time for early leave.
        """
        for absence in daily_absences:
            start = to_minutes(absence.start_time)
            end = to_minutes(absence.end_time)
            if start is None or end is None:
                continue
            if end >= theoretical_exit_minutes:
                return absence
        return None
