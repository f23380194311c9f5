"""
Domain Entities Module

Core domain entities using dataclasses for the attendance reconciliation engine.
These entities represent the core business concepts independent of infrastructure.

Every entity converts to and from the camelCase JSON documents kept in the
key/value store via ``to_dict()`` / ``from_dict()``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class AttendanceError(Exception):
    """Base exception for attendance-related errors."""
    pass


class ValidationError(AttendanceError):
    """Raised when user supplied data violates a business rule."""
    pass


# ==============================================================================
# Enumerations
# ==============================================================================
class AttendanceStatus(Enum):
    """Status of attendance for a given employee-day."""
    PRESENT = "present"                        # >= 2 pointages
    MEETING_PRESENCE = "meeting_presence"      # 1 pointage toléré (réunion)
    INCOMPLETE = "incomplete"                  # 1 pointage non toléré
    ABSENT_AUTHORIZED = "absent_authorized"    # absence journée autorisée
    ABSENT_UNAUTHORIZED = "absent_unauthorized"
    WEEKEND = "weekend"                        # jamais persisté


class AbsenceType(Enum):
    """Type of an authorized absence (stored values are the French labels)."""
    AUTHORIZATION = "Autorisation"
    PAID_LEAVE = "Congé"
    SICKNESS = "Maladie"
    MISSION = "Mission"
    HOLIDAY = "Férié"
    EXCEPTIONAL = "Exceptionnel"

    @classmethod
    def parse(cls, value: str) -> Optional["AbsenceType"]:
        """
        Parse a stored or imported label into an AbsenceType.

        Accepts the French labels (with or without accents, any case) and the
        English member names. Returns None for unknown labels.
        """
        if not value:
            return None
        wanted = _fold(value)
        for member in cls:
            if wanted in (_fold(member.value), _fold(member.name)):
                return member
        return _ABSENCE_ALIASES.get(wanted)


class Department(Enum):
    """Department an employee is assigned to."""
    SALES = "Sales"
    BACK_OFFICE = "Back office"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Department":
        """Parse a department label; unknown or missing labels default to Sales."""
        if value:
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted or member.name.lower() == wanted:
                    return member
        return cls.SALES


def _fold(value: str) -> str:
    """Lower-case and strip French accents for tolerant label matching."""
    table = str.maketrans("éèêëàâäîïôöûüç", "eeeeaaaiioouuc")
    return value.strip().lower().translate(table).replace(" ", "_")


_ABSENCE_ALIASES: Dict[str, AbsenceType] = {
    "conge_paye": AbsenceType.PAID_LEAVE,
    "paidleave": AbsenceType.PAID_LEAVE,
}


# ==============================================================================
# Entities
# ==============================================================================
@dataclass(frozen=True)
class RawAttendanceRecord:
    """
    A single punch imported from the time clock.

    Attributes:
        employee_id: Employee identifier (matricule)
        name: Display name as exported by the time clock
        timestamp: Normalized "YYYY-MM-DD HH:MM:SS"
    """
    employee_id: str
    name: str
    timestamp: str

    @property
    def dedup_key(self) -> str:
        return f"{self.employee_id.strip()}_{self.timestamp.strip()}"

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RawAttendanceRecord":
        return cls(
            employee_id=str(data.get("employeeId", "")),
            name=str(data.get("name", "")),
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass(frozen=True)
class AuthorizedAbsence:
    """
    A pre-approved absence for one employee on one calendar day.

    Attributes:
        employee_id: Employee identifier
        date: "YYYY-MM-DD"
        absence_type: Closed AbsenceType
        comment: Free text
        start_time: "HH:MM" start of a partial authorization (None = full day)
        end_time: "HH:MM" end of a partial authorization (None = full day)
    """
    employee_id: str
    date: str
    absence_type: AbsenceType
    comment: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def is_full_day(self) -> bool:
        return not self.start_time and not self.end_time

    def to_dict(self) -> dict:
        data = {
            "employeeId": self.employee_id,
            "date": self.date,
            "type": self.absence_type.value,
            "comment": self.comment,
        }
        if not self.is_full_day:
            data["startTime"] = self.start_time
            data["endTime"] = self.end_time
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AuthorizedAbsence":
        """
        Build an absence from a stored document.

        Raises:
            ValidationError: If the stored type is not a known AbsenceType
        """
        absence_type = AbsenceType.parse(str(data.get("type", "")))
        if absence_type is None:
            raise ValidationError(f"Type d'absence inconnu: {data.get('type')!r}")
        return cls(
            employee_id=str(data.get("employeeId", "")),
            date=str(data.get("date", "")),
            absence_type=absence_type,
            comment=str(data.get("comment") or ""),
            start_time=data.get("startTime") or None,
            end_time=data.get("endTime") or None,
        )


@dataclass(frozen=True)
class ScheduleRule:
    """Theoretical working hours for one employee-day."""
    theoretical_entry: str
    theoretical_exit: str
    pause_minutes: int = 0

    def to_dict(self) -> dict:
        return {
            "theoreticalEntry": self.theoretical_entry,
            "theoreticalExit": self.theoretical_exit,
            "pauseMinutes": self.pause_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleRule":
        return cls(
            theoretical_entry=str(data.get("theoreticalEntry", "08:00")),
            theoretical_exit=str(data.get("theoreticalExit", "15:00")),
            pause_minutes=int(data.get("pauseMinutes", 0)),
        )


@dataclass
class AttendanceAnalysis:
    """
    Classification of one employee on one calendar day.

    Attributes:
        employee_id: Employee identifier
        name: Display name
        date: "YYYY-MM-DD"
        status: Classified AttendanceStatus
        first_log: Earliest punch "HH:MM" (None without punches)
        last_log: Latest punch (None with fewer than two punches)
        lateness_minutes: Entry lateness + early-leave minutes
        is_late: True iff lateness_minutes > 0
        work_duration_minutes: Worked minutes, pause excluded
        comments: Human-readable notes (French)
    """
    employee_id: str
    name: str
    date: str
    status: AttendanceStatus
    first_log: Optional[str] = None
    last_log: Optional[str] = None
    lateness_minutes: int = 0
    is_late: bool = False
    work_duration_minutes: int = 0
    comments: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "date": self.date,
            "status": self.status.value,
            "firstLog": self.first_log,
            "lastLog": self.last_log,
            "latenessMinutes": self.lateness_minutes,
            "isLate": self.is_late,
            "workDurationMinutes": self.work_duration_minutes,
            "comments": list(self.comments),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceAnalysis":
        return cls(
            employee_id=str(data.get("employeeId", "")),
            name=str(data.get("name", "")),
            date=str(data.get("date", "")),
            status=AttendanceStatus(data.get("status", AttendanceStatus.ABSENT_UNAUTHORIZED.value)),
            first_log=data.get("firstLog"),
            last_log=data.get("lastLog"),
            lateness_minutes=int(data.get("latenessMinutes", 0)),
            is_late=bool(data.get("isLate", False)),
            work_duration_minutes=int(data.get("workDurationMinutes", 0)),
            comments=list(data.get("comments") or []),
        )


@dataclass
class RecapEntry:
    """
    Payroll recap of one employee over a filtered period.

    Attributes:
        employee_id: Employee identifier
        name: Display name
        worked: Days present or in meeting presence
        late_cumul_minutes: Sum of daily lateness
        abs_unauthorized: Unauthorized absence days
        abs_authorized: Authorized absence days
        incomplete: Days with a single non-tolerated punch
        meetings: Meeting presence days
        absence_penalty: Deduction from absences and incomplete days
        late_hours: late_cumul_minutes / 60 rounded to 2 decimals
        lateness_deduction: Deduction from lateness above the franchise
        deduction: Total deduction
        is_compliant: No unauthorized absence, no incomplete day, lateness within franchise
        lateness_details: Per-day "DD/MM : +N min" strings
    """
    employee_id: str
    name: str
    worked: int = 0
    late_cumul_minutes: int = 0
    abs_unauthorized: int = 0
    abs_authorized: int = 0
    incomplete: int = 0
    meetings: int = 0
    absence_penalty: float = 0
    late_hours: float = 0.0
    lateness_deduction: float = 0.0
    deduction: float = 0.0
    is_compliant: bool = True
    lateness_details: List[str] = field(default_factory=list)
