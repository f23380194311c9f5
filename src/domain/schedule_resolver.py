"""
Schedule Resolver Module

Implements Strategy pattern for determining the theoretical working hours of
an employee on a given date.

Priority:
1. Per-employee override table (fixed schedules)
2. Department strategy (Back office / Sales)
"""

from abc import ABC, abstractmethod
from datetime import date
from enum import Enum, auto
from typing import Dict, Iterable, Tuple

from .entities import Department, ScheduleRule
from .timestamp_normalizer import day_of_week
from config.hr_settings import HRSettings

SATURDAY = 6


class ScheduleKind(Enum):
    """Which rule set produced a schedule."""
    FIXED = auto()        # horaire fixe (table d'exceptions)
    BACK_OFFICE = auto()
    SALES = auto()


class ScheduleStrategy(ABC):
    """Abstract base class for department schedule strategies."""

    kind: ScheduleKind

    @abstractmethod
    def rule_for(self, day: date, settings: HRSettings) -> ScheduleRule:
        """
        Get the schedule applying on a date.

        Args:
            day: The calendar date
            settings: Global HR settings

        Returns:
            The theoretical entry/exit and paid pause
        """
        pass


class SalesScheduleStrategy(ScheduleStrategy):
    """
    Schedule for sales staff (default department).

    Rules:
    - Entry/exit from the global settings, no pause deducted
    """

    kind = ScheduleKind.SALES

    def rule_for(self, day: date, settings: HRSettings) -> ScheduleRule:
        return ScheduleRule(settings.entry_time, settings.exit_time, 0)


class BackOfficeScheduleStrategy(ScheduleStrategy):
    """
    Schedule for back office staff.

    Rules:
    - Saturday: 09:00 - 13:00, 10 minutes pause
    - Other days: global entry time - 18:00, 80 minutes lunch pause
    """

    SATURDAY_RULE = ScheduleRule("09:00", "13:00", 10)
    WEEKDAY_EXIT = "18:00"
    WEEKDAY_PAUSE = 80

    kind = ScheduleKind.BACK_OFFICE

    def rule_for(self, day: date, settings: HRSettings) -> ScheduleRule:
        if day_of_week(day) == SATURDAY:
            return self.SATURDAY_RULE
        return ScheduleRule(settings.entry_time, self.WEEKDAY_EXIT, self.WEEKDAY_PAUSE)


class ScheduleStrategyFactory:
    """Factory for creating appropriate schedule strategy."""

    _strategies: Dict[Department, ScheduleStrategy] = {
        Department.SALES: SalesScheduleStrategy(),
        Department.BACK_OFFICE: BackOfficeScheduleStrategy(),
    }

    @classmethod
    def get_strategy(cls, department: Department) -> ScheduleStrategy:
        """Get the appropriate strategy for a department."""
        return cls._strategies.get(department, SalesScheduleStrategy())


class ScheduleResolver:
    """
    Resolves the ScheduleRule of an employee-day.

    Pure: the result depends only on the arguments.
    """

    def resolve(self, employee_id: str, day: date, settings: HRSettings) -> ScheduleRule:
        """Get the theoretical entry/exit and pause for an employee on a date."""
        return self.resolve_with_kind(employee_id, day, settings)[0]

    def resolve_with_kind(
        self,
        employee_id: str,
        day: date,
        settings: HRSettings
    ) -> Tuple[ScheduleRule, ScheduleKind]:
        """Resolve the schedule and report which rule set applied."""
        override = settings.schedule_overrides.get(employee_id)
        if override is not None:
            return override, ScheduleKind.FIXED
        strategy = ScheduleStrategyFactory.get_strategy(settings.department_of(employee_id))
        return strategy.rule_for(day, settings), strategy.kind

    def schedule_kind(self, employee_id: str, settings: HRSettings) -> ScheduleKind:
        """Rule set applying to an employee, independent of the date."""
        if employee_id in settings.schedule_overrides:
            return ScheduleKind.FIXED
        return ScheduleStrategyFactory.get_strategy(settings.department_of(employee_id)).kind


def with_marker_overrides(
    settings: HRSettings,
    employees: Iterable[Tuple[str, str]]
) -> HRSettings:
    """
    Migrate the legacy display-name marker into the override table.

    Every employee whose display name contains ``fixed_schedule_marker``
    (case-insensitive) and has no explicit override gets ``fixed_schedule_rule``.

    Args:
        settings: Current settings
        employees: (employee_id, display_name) pairs

    Returns:
        Settings with the migrated overrides (unchanged when no marker is set)
    """
    marker = settings.fixed_schedule_marker.strip().upper()
    if not marker:
        return settings
    migrated = settings
    for employee_id, name in employees:
        if marker in (name or "").upper() and employee_id not in migrated.schedule_overrides:
            migrated = migrated.with_schedule_override(employee_id, settings.fixed_schedule_rule)
    return migrated
