"""
Unit tests for timestamp normalization and date helpers.
"""

import pytest
from datetime import date
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.timestamp_normalizer import (
    normalize, normalize_date, normalize_time, split_timestamp,
    to_minutes, parse_date, day_of_week, month_key, short_time
)


class TestNormalizeDate:
    """Tests for date token normalization."""

    def test_slash_date_is_day_first(self):
        assert normalize_date("05/03/2024") == "2024-03-05"

    def test_two_digit_year_is_expanded(self):
        assert normalize_date("5/3/24") == "2024-03-05"

    def test_iso_date_is_kept(self):
        assert normalize_date("2024-03-05") == "2024-03-05"

    def test_dash_date_with_day_first(self):
        assert normalize_date("05-03-2024") == "2024-03-05"

    def test_unknown_format_passes_through(self):
        assert normalize_date("20240305") == "20240305"


class TestNormalizeTime:
    """Tests for time token normalization."""

    def test_h_separator(self):
        assert normalize_time("8H50") == "08:50:00"
        assert normalize_time("8h5") == "08:05:00"

    def test_seconds_default_and_truncation(self):
        assert normalize_time("08:50") == "08:50:00"
        assert normalize_time("08:50:123") == "08:50:12"

    def test_single_component_defaults_to_midnight(self):
        assert normalize_time("8") == "00:00:00"


class TestNormalize:
    """Tests for full timestamp normalization."""

    def test_quoted_french_timestamp(self):
        assert normalize('"05/03/2024 8H50"') == "2024-03-05 08:50:00"

    def test_zero_width_and_bom_are_removed(self):
        raw = "\ufeff05/03/2024\u200b 08:50"
        assert normalize(raw) == "2024-03-05 08:50:00"

    def test_missing_time_defaults_to_midnight(self):
        assert normalize("2024-03-05") == "2024-03-05 00:00:00"

    def test_iso_t_separator(self):
        assert normalize("2024-03-05T08:50:30") == "2024-03-05 08:50:30"

    def test_empty_input(self):
        assert normalize("") == ""
        assert normalize("   ") == ""
        assert normalize('""') == ""

    @pytest.mark.parametrize("raw", [
        "05/03/2024 8H50",
        "2024-03-05 08:50:00",
        "5/3/24 17h5",
        "05-03-2024 08:50",
        "2024-03-05T08:50:00",
        "garbage",
    ])
    def test_idempotence(self, raw):
        """Normalizing twice gives the same result as normalizing once."""
        once = normalize(raw)
        assert normalize(once) == once


class TestHelpers:
    """Tests for the small date/time helpers."""

    def test_split_timestamp(self):
        assert split_timestamp("2024-03-05 08:50:00") == ("2024-03-05", "08:50:00")
        assert split_timestamp("2024-03-05") == ("2024-03-05", "")

    def test_to_minutes(self):
        assert to_minutes("08:30") == 510
        assert to_minutes("17:20:59") == 1040
        assert to_minutes("") is None
        assert to_minutes(None) is None
        assert to_minutes("8h") is None
        assert to_minutes("aa:bb") is None

    def test_short_time(self):
        assert short_time("08:45:00") == "08:45"

    def test_parse_date(self):
        assert parse_date("2024-03-05") == date(2024, 3, 5)
        assert parse_date("2024-02-30") is None
        assert parse_date("05/03/2024") is None

    def test_day_of_week_starts_on_sunday(self):
        assert day_of_week(date(2024, 3, 10)) == 0   # dimanche
        assert day_of_week(date(2024, 3, 11)) == 1   # lundi
        assert day_of_week(date(2024, 3, 9)) == 6    # samedi

    def test_month_key(self):
        assert month_key("2024-03-05") == "2024-03"
        assert month_key("") == ""
