"""
Daily Classifier Module

Core state machine of the engine: combines the punches, the theoretical
schedule and the authorized absences of one employee-day into one
AttendanceAnalysis.

Every (employee, date) pair formed from the union of all dates seen in the
punches or absences, crossed with every known employee, is evaluated.
Days whose status is still WEEKEND at the end are dropped from the output.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .entities import (
    AttendanceAnalysis, AttendanceStatus, AuthorizedAbsence, RawAttendanceRecord
)
from .exception_matcher import ExceptionMatcher
from .schedule_resolver import ScheduleKind, ScheduleResolver, with_marker_overrides
from .timestamp_normalizer import (
    day_of_week, parse_date, short_time, split_timestamp, to_minutes
)
from config.hr_settings import HRSettings
from infrastructure.logger import get_logger

logger = get_logger("DailyClassifier")

MEETING_COMMENT = "Réunion matinale validée"
NO_PUNCH_COMMENT = "Aucun pointage détecté"


def fallback_name(employee_id: str) -> str:
    """Display name of an employee only known through absences."""
    return f"Collaborateur {employee_id}"


@dataclass
class DailyInputs:
    """
    Everything the classifier needs, grouped by employee and date.

    Attributes:
        employee_ids: Employees in first-seen order (punches, then absences)
        dates: Dates in first-seen order (punches, then absences)
        names: employee_id -> display name
        logs: employee_id -> date -> punch times "HH:MM:SS"
        absences: (employee_id, date) -> absences of that day, input order
    """
    employee_ids: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    names: Dict[str, str] = field(default_factory=dict)
    logs: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    absences: Dict[Tuple[str, str], List[AuthorizedAbsence]] = field(default_factory=dict)

    @classmethod
    def group(
        cls,
        records: Sequence[RawAttendanceRecord],
        absences: Sequence[AuthorizedAbsence]
    ) -> "DailyInputs":
        """Group punches and absences per employee and date."""
        inputs = cls()
        seen_dates = set()
        seen_employees = set()

        def add_date(value: str) -> None:
            if value and value.strip() and value not in seen_dates:
                seen_dates.add(value)
                inputs.dates.append(value)

        def add_employee(employee_id: str) -> None:
            if employee_id not in seen_employees:
                seen_employees.add(employee_id)
                inputs.employee_ids.append(employee_id)

        for record in records:
            if not record.timestamp:
                continue
            date_str, time_str = split_timestamp(record.timestamp)
            if parse_date(date_str) is None:
                continue
            add_employee(record.employee_id)
            add_date(date_str)
            inputs.names.setdefault(record.employee_id, record.name)
            day_logs = inputs.logs.setdefault(record.employee_id, {}).setdefault(date_str, [])
            if time_str:
                day_logs.append(time_str)

        for absence in absences:
            if parse_date(absence.date) is None:
                continue
            add_employee(absence.employee_id)
            add_date(absence.date)
            inputs.absences.setdefault((absence.employee_id, absence.date), []).append(absence)

        for employee_id in inputs.employee_ids:
            if not inputs.names.get(employee_id):
                inputs.names[employee_id] = fallback_name(employee_id)

        return inputs


class DailyClassifier:
    """
    Classifies employee-days into attendance statuses.

    Evaluation order for one employee-day:
    1. Non working day -> WEEKEND, working day -> ABSENT_UNAUTHORIZED
    2. Punches -> PRESENT (>= 2), MEETING_PRESENCE or INCOMPLETE (1)
    3. Lateness (entry, plus early leave for fixed/back office schedules)
    4. Work duration
    5. Partial authorization with both punches forces PRESENT
    6. Full-day authorization overrides everything -> ABSENT_AUTHORIZED
    7. No punch on a working day -> ABSENT_UNAUTHORIZED with a note
    """

    def __init__(
        self,
        resolver: Optional[ScheduleResolver] = None,
        matcher: Optional[ExceptionMatcher] = None
    ):
        self.resolver = resolver or ScheduleResolver()
        self.matcher = matcher or ExceptionMatcher()

    def classify(
        self,
        records: Sequence[RawAttendanceRecord],
        absences: Sequence[AuthorizedAbsence],
        settings: HRSettings
    ) -> List[AttendanceAnalysis]:
        """
        Classify every employee-day of a batch.

        Args:
            records: Deduplicated punches
            absences: Authorized absences
            settings: HR settings

        Returns:
            One AttendanceAnalysis per non-weekend employee-day, deterministic order
        """
        inputs = DailyInputs.group(records, absences)
        settings = with_marker_overrides(
            settings, [(emp_id, inputs.names[emp_id]) for emp_id in inputs.employee_ids]
        )

        results: List[AttendanceAnalysis] = []
        skipped = 0
        for employee_id in inputs.employee_ids:
            employee_logs = inputs.logs.get(employee_id, {})
            for date_str in inputs.dates:
                try:
                    item = self.classify_day(
                        employee_id,
                        inputs.names[employee_id],
                        date_str,
                        employee_logs.get(date_str, []),
                        inputs.absences.get((employee_id, date_str), []),
                        settings
                    )
                except (ValueError, TypeError) as e:
                    skipped += 1
                    logger.warning(f"Journée {employee_id}/{date_str} ignorée: {e}")
                    continue
                if item is None:
                    continue
                results.append(item)

        if skipped:
            logger.info(f"{skipped} journée(s) ignorée(s) pendant l'analyse")
        logger.debug(
            f"Classification: {len(inputs.employee_ids)} collaborateurs x "
            f"{len(inputs.dates)} dates -> {len(results)} entrées"
        )
        return results

    def classify_day(
        self,
        employee_id: str,
        name: str,
        date_str: str,
        logs: Sequence[str],
        daily_absences: Sequence[AuthorizedAbsence],
        settings: HRSettings
    ) -> Optional[AttendanceAnalysis]:
        """
        Classify one employee-day.

        Args:
            employee_id: Employee identifier
            name: Display name
            date_str: "YYYY-MM-DD"
            logs: Punch times of the day "HH:MM[:SS]", any order
            daily_absences: Authorized absences of the day
            settings: HR settings (marker overrides already migrated)

        Returns:
            The analysis, or None when the day is dropped (weekend or malformed date)
        """
        day = parse_date(date_str)
        if day is None:
            logger.debug(f"Date invalide ignorée pour {employee_id}: {date_str!r}")
            return None

        is_work_day = day_of_week(day) in settings.work_days
        rule, kind = self.resolver.resolve_with_kind(employee_id, day, settings)
        fixed_or_back_office = kind in (ScheduleKind.FIXED, ScheduleKind.BACK_OFFICE)

        item = AttendanceAnalysis(
            employee_id=employee_id,
            name=name,
            date=date_str,
            status=AttendanceStatus.ABSENT_UNAUTHORIZED if is_work_day else AttendanceStatus.WEEKEND,
        )

        logs = sorted(logs)
        theo_entry = to_minutes(rule.theoretical_entry) or 0
        theo_exit = to_minutes(rule.theoretical_exit) or 0
        morning_auth = self.matcher.match_morning(daily_absences, theo_entry)
        evening_auth = self.matcher.match_evening(daily_absences, theo_exit)

        if logs:
            item.first_log = short_time(logs[0])
            item.last_log = short_time(logs[-1]) if len(logs) > 1 else None

            if len(logs) >= 2:
                item.status = AttendanceStatus.PRESENT
            elif settings.allow_single_pointage and not fixed_or_back_office:
                item.status = AttendanceStatus.MEETING_PRESENCE
                item.comments.append(MEETING_COMMENT)
            else:
                item.status = AttendanceStatus.INCOMPLETE

            entry_lateness = self._entry_lateness(item, theo_entry, morning_auth)
            exit_lateness = 0
            if fixed_or_back_office and item.last_log:
                exit_lateness = self._exit_lateness(item, theo_exit, evening_auth)

            total = entry_lateness + exit_lateness
            if total > 0:
                item.is_late = True
                item.lateness_minutes = total
                if total >= settings.penalty_threshold_minutes:
                    item.comments.append(self._penalty_note(entry_lateness, exit_lateness))

            if item.first_log and item.last_log:
                # Le temps passé avant l'heure théorique n'est pas du travail
                actual_in = to_minutes(item.first_log) or 0
                actual_out = to_minutes(item.last_log) or 0
                effective_in = max(actual_in, theo_entry)
                item.work_duration_minutes = max(0, actual_out - effective_in - rule.pause_minutes)

                if morning_auth is not None or evening_auth is not None:
                    item.status = AttendanceStatus.PRESENT

        full_day = self.matcher.match_full_day(daily_absences)
        if full_day is not None:
            item = AttendanceAnalysis(
                employee_id=employee_id,
                name=name,
                date=date_str,
                status=AttendanceStatus.ABSENT_AUTHORIZED,
                comments=[full_day.absence_type.value] + ([full_day.comment] if full_day.comment else []),
            )
        elif not logs and is_work_day:
            item.status = AttendanceStatus.ABSENT_UNAUTHORIZED
            item.comments.append(NO_PUNCH_COMMENT)

        if item.status == AttendanceStatus.WEEKEND:
            return None
        return item

    @staticmethod
    def _entry_lateness(
        item: AttendanceAnalysis,
        theo_entry: int,
        morning_auth: Optional[AuthorizedAbsence]
    ) -> int:
        """Minutes of late arrival, measured from the authorized end when covered."""
        actual_entry = to_minutes(item.first_log) or 0
        if morning_auth is not None:
            authorized_entry = to_minutes(morning_auth.end_time) or 0
            if actual_entry > theo_entry:
                item.comments.append(f"Retard autorisé jusqu'à {morning_auth.end_time}")
            return max(0, actual_entry - authorized_entry)
        return max(0, actual_entry - theo_entry)

    @staticmethod
    def _exit_lateness(
        item: AttendanceAnalysis,
        theo_exit: int,
        evening_auth: Optional[AuthorizedAbsence]
    ) -> int:
        """Minutes of early leave, measured from the authorized start when covered."""
        actual_exit = to_minutes(item.last_log) or 0
        if evening_auth is not None:
            authorized_exit = to_minutes(evening_auth.start_time) or 0
            if actual_exit < theo_exit:
                item.comments.append(f"Sortie autorisée à partir de {evening_auth.start_time}")
            return max(0, authorized_exit - actual_exit)
        return max(0, theo_exit - actual_exit)

    @staticmethod
    def _penalty_note(entry_lateness: int, exit_lateness: int) -> str:
        if entry_lateness > 0 and exit_lateness > 0:
            return f"Entrée tardive ({entry_lateness}m) + Sortie anticipée ({exit_lateness}m)"
        if exit_lateness > 0:
            return f"Sortie anticipée (-{exit_lateness}m)"
        return f"Retard cumulé (+{entry_lateness}m)"
