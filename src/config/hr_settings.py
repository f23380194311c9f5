"""
HR Settings Module

Immutable rule set (schedules, thresholds, department map, payroll scale)
stored in the key/value store under ``hr_settings``.

The settings value is passed explicitly to every resolver and classifier call;
there is no process-wide mutable settings object.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from domain.entities import Department, ScheduleRule

SETTINGS_KEY = "hr_settings"


@dataclass(frozen=True)
class PayrollRules:
    """Deduction scale applied by the monthly recap (amounts in DH)."""
    absence_penalty: float = 150
    incomplete_penalty: float = 100
    lateness_franchise_minutes: int = 130
    lateness_hourly_rate: float = 30


def _value(data: dict, key: str, default):
    """Stored value of a key, the default when missing or null."""
    value = data.get(key)
    return default if value is None else value


@dataclass(frozen=True)
class HRSettings:
    """
    Global attendance rules.

    Attributes:
        entry_time: Default theoretical entry "HH:MM"
        exit_time: Default theoretical exit "HH:MM"
        tolerance_minutes: Stored for compatibility, not applied by the classifier
        penalty_threshold_minutes: Daily lateness from which a penalty note is attached
        work_days: Working days, 0 = Sunday ... 6 = Saturday
        allow_single_pointage: Accept a single punch as a meeting presence
        employee_departments: employee_id -> department label
        schedule_overrides: employee_id -> fixed ScheduleRule
        fixed_schedule_marker: Legacy display-name marker migrated into schedule_overrides
        fixed_schedule_rule: Rule given to employees matched by the marker
        payroll: Deduction scale
    """
    entry_time: str = "08:30"
    exit_time: str = "17:30"
    tolerance_minutes: int = 0
    penalty_threshold_minutes: int = 30
    work_days: Tuple[int, ...] = (1, 2, 3, 4, 5, 6)
    allow_single_pointage: bool = True
    employee_departments: Dict[str, str] = field(default_factory=dict)
    schedule_overrides: Dict[str, ScheduleRule] = field(default_factory=dict)
    fixed_schedule_marker: str = ""
    fixed_schedule_rule: ScheduleRule = field(
        default_factory=lambda: ScheduleRule("08:00", "15:00", 30)
    )
    payroll: PayrollRules = field(default_factory=PayrollRules)

    def department_of(self, employee_id: str) -> Department:
        """Department of an employee; unknown employees default to Sales."""
        return Department.parse(self.employee_departments.get(employee_id))

    def with_department(self, employee_id: str, department: Department) -> "HRSettings":
        """Return new settings with one department assignment changed."""
        departments = dict(self.employee_departments)
        departments[employee_id] = department.value
        return replace(self, employee_departments=departments)

    def with_schedule_override(self, employee_id: str, rule: ScheduleRule) -> "HRSettings":
        """Return new settings with a fixed schedule for one employee."""
        overrides = dict(self.schedule_overrides)
        overrides[employee_id] = rule
        return replace(self, schedule_overrides=overrides)

    # ------------------------------------------------------------------
    # Document mapping
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        """Convert to the stored camelCase document."""
        return {
            "entryTime": self.entry_time,
            "exitTime": self.exit_time,
            "toleranceMinutes": self.tolerance_minutes,
            "penaltyThresholdMinutes": self.penalty_threshold_minutes,
            "workDays": list(self.work_days),
            "allowSinglePointage": self.allow_single_pointage,
            "employeeDepartments": dict(self.employee_departments),
            "scheduleOverrides": {
                emp_id: rule.to_dict() for emp_id, rule in self.schedule_overrides.items()
            },
            "fixedScheduleMarker": self.fixed_schedule_marker,
            "fixedScheduleRule": self.fixed_schedule_rule.to_dict(),
            "payroll": {
                "absencePenalty": self.payroll.absence_penalty,
                "incompletePenalty": self.payroll.incomplete_penalty,
                "latenessFranchiseMinutes": self.payroll.lateness_franchise_minutes,
                "latenessHourlyRate": self.payroll.lateness_hourly_rate,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HRSettings":
        """Build settings from a stored document; missing or null keys use defaults."""
        data = data or {}
        defaults = cls()
        payroll_data = data.get("payroll") or {}
        overrides_data = data.get("scheduleOverrides") or {}
        fixed_rule_data = data.get("fixedScheduleRule")

        payroll = PayrollRules(
            absence_penalty=_value(payroll_data, "absencePenalty", defaults.payroll.absence_penalty),
            incomplete_penalty=_value(payroll_data, "incompletePenalty", defaults.payroll.incomplete_penalty),
            lateness_franchise_minutes=_value(
                payroll_data, "latenessFranchiseMinutes", defaults.payroll.lateness_franchise_minutes
            ),
            lateness_hourly_rate=_value(payroll_data, "latenessHourlyRate", defaults.payroll.lateness_hourly_rate),
        )

        return cls(
            entry_time=data.get("entryTime") or defaults.entry_time,
            exit_time=data.get("exitTime") or defaults.exit_time,
            tolerance_minutes=int(_value(data, "toleranceMinutes", defaults.tolerance_minutes)),
            penalty_threshold_minutes=int(
                _value(data, "penaltyThresholdMinutes", defaults.penalty_threshold_minutes)
            ),
            work_days=tuple(int(d) for d in _value(data, "workDays", defaults.work_days)),
            allow_single_pointage=bool(_value(data, "allowSinglePointage", defaults.allow_single_pointage)),
            employee_departments={
                str(k): str(v) for k, v in (data.get("employeeDepartments") or {}).items()
            },
            schedule_overrides={
                str(emp_id): ScheduleRule.from_dict(rule) for emp_id, rule in overrides_data.items()
            },
            fixed_schedule_marker=str(data.get("fixedScheduleMarker") or ""),
            fixed_schedule_rule=(
                ScheduleRule.from_dict(fixed_rule_data) if fixed_rule_data else defaults.fixed_schedule_rule
            ),
            payroll=payroll,
        )
