"""
Absence Registry Module

Manual entry of authorized absences: a date range typed by an HR operator is
expanded into one AuthorizedAbsence per calendar day.
"""

from datetime import timedelta
from typing import List, Optional, Sequence

from .entities import AbsenceType, AuthorizedAbsence, ValidationError
from .timestamp_normalizer import parse_date, to_minutes


class AbsenceRegistry:
    """Builds and removes authorized absence entries."""

    @staticmethod
    def add_range(
        existing: Sequence[AuthorizedAbsence],
        employee_id: str,
        date_start: str,
        date_end: str,
        absence_type: AbsenceType,
        comment: str = "",
        start_time: Optional[str] = None,
        end_time: Optional[str] = None
    ) -> List[AuthorizedAbsence]:
        """
        Expand a date range into new absence entries.

        Days already registered for the employee are skipped.

        Args:
            existing: Absences already stored
            employee_id: Employee identifier
            date_start: First day "YYYY-MM-DD" (inclusive)
            date_end: Last day "YYYY-MM-DD" (inclusive)
            absence_type: Type of absence
            comment: Free text
            start_time: "HH:MM" for a partial authorization
            end_time: "HH:MM" for a partial authorization

        Returns:
            The new entries only (possibly empty)

        Raises:
            ValidationError: Missing fields, unparseable dates, end before start
                or an incomplete partial window
        """
        employee_id = (employee_id or "").strip()
        if not employee_id:
            raise ValidationError("Veuillez remplir tous les champs obligatoires.")

        start = parse_date(date_start or "")
        end = parse_date(date_end or "")
        if start is None or end is None:
            raise ValidationError("Veuillez remplir tous les champs obligatoires.")
        if end < start:
            raise ValidationError("La date de fin ne peut pas être antérieure à la date de début.")

        if start_time or end_time:
            start_minutes = to_minutes(start_time)
            end_minutes = to_minutes(end_time)
            if start_minutes is None or end_minutes is None:
                raise ValidationError("Heures de début et de fin requises pour une autorisation partielle.")
            if end_minutes <= start_minutes:
                raise ValidationError("L'heure de fin doit être postérieure à l'heure de début.")

        taken = {(a.employee_id, a.date) for a in existing}
        new_entries: List[AuthorizedAbsence] = []

        day = start
        while day <= end:
            iso = day.isoformat()
            if (employee_id, iso) not in taken:
                new_entries.append(AuthorizedAbsence(
                    employee_id=employee_id,
                    date=iso,
                    absence_type=absence_type,
                    comment=comment or "",
                    start_time=start_time or None,
                    end_time=end_time or None,
                ))
            day += timedelta(days=1)

        return new_entries

    @staticmethod
    def remove(existing: Sequence[AuthorizedAbsence], index: int) -> List[AuthorizedAbsence]:
        """
        Return the absences without the entry at ``index``.

        Raises:
            ValidationError: If the index is out of range
        """
        if not 0 <= index < len(existing):
            raise ValidationError(f"Aucune absence à l'index {index}.")
        return [a for i, a in enumerate(existing) if i != index]
