"""
Unit tests for ExceptionMatcher.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import AbsenceType, AuthorizedAbsence
from domain.exception_matcher import ExceptionMatcher

ENTRY = 8 * 60 + 30   # 08:30
EXIT = 17 * 60 + 30   # 17:30


def partial(start, end, comment=""):
    return AuthorizedAbsence("E1", "2024-03-05", AbsenceType.AUTHORIZATION, comment, start, end)


class TestMatchFullDay:
    """Tests for full-day matching."""

    def test_returns_first_full_day(self):
        sick = AuthorizedAbsence("E1", "2024-03-05", AbsenceType.SICKNESS)
        leave = AuthorizedAbsence("E1", "2024-03-05", AbsenceType.PAID_LEAVE)
        assert ExceptionMatcher.match_full_day([partial("08:00", "10:00"), sick, leave]) is sick

    def test_no_full_day(self):
        assert ExceptionMatcher.match_full_day([partial("08:00", "10:00")]) is None
        assert ExceptionMatcher.match_full_day([]) is None


class TestMatchMorning:
    """Tests for the window straddling the theoretical entry."""

    def test_window_covering_entry(self):
        window = partial("08:00", "10:00")
        assert ExceptionMatcher.match_morning([window], ENTRY) is window

    def test_window_starting_at_entry(self):
        window = partial("08:30", "09:30")
        assert ExceptionMatcher.match_morning([window], ENTRY) is window

    def test_window_ending_at_entry_does_not_match(self):
        assert ExceptionMatcher.match_morning([partial("07:30", "08:30")], ENTRY) is None

    def test_minutes_are_compared(self):
        """A window ending at 08:45 covers an 08:30 entry; one starting at 08:31 does not."""
        assert ExceptionMatcher.match_morning([partial("08:15", "08:45")], ENTRY) is not None
        assert ExceptionMatcher.match_morning([partial("08:31", "10:00")], ENTRY) is None

    def test_first_match_wins(self):
        first = partial("08:00", "09:00", "premier")
        second = partial("08:00", "11:00", "second")
        assert ExceptionMatcher.match_morning([first, second], ENTRY) is first

    def test_unparseable_times_are_ignored(self):
        broken = partial("8h", "10:00")
        valid = partial("08:00", "10:00")
        assert ExceptionMatcher.match_morning([broken, valid], ENTRY) is valid


class TestMatchEvening:
    """Tests for the window running until the theoretical exit."""

    def test_window_reaching_exit(self):
        window = partial("16:00", "17:30")
        assert ExceptionMatcher.match_evening([window], EXIT) is window

    def test_window_ending_before_exit(self):
        assert ExceptionMatcher.match_evening([partial("14:00", "17:00")], EXIT) is None

    def test_full_day_entries_are_not_partial_matches(self):
        sick = AuthorizedAbsence("E1", "2024-03-05", AbsenceType.SICKNESS)
        assert ExceptionMatcher.match_evening([sick], EXIT) is None
        assert ExceptionMatcher.match_morning([sick], ENTRY) is None
