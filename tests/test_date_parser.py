"""Tests for date parsing utilities."""

import pytest
from datetime import date, timedelta

from feerecon.utils.date_parser import normalize_date, parse_date


class TestNormalizeDate:
    """Statement dates are read ISO first, then day-first."""

    def test_iso(self):
        assert normalize_date("2024-01-15") == date(2024, 1, 15)

    def test_iso_with_time(self):
        assert normalize_date("2024-01-15T10:30:00") == date(2024, 1, 15)

    def test_slash_is_day_first(self):
        assert normalize_date("03/04/2024") == date(2024, 4, 3)

    def test_dash_is_day_first(self):
        assert normalize_date("15-01-2024") == date(2024, 1, 15)

    def test_textual_month(self):
        assert normalize_date("15 Jan 2025") == date(2025, 1, 15)

    def test_impossible_day_first_date(self):
        assert normalize_date("31/02/2024") is None

    def test_blank_and_garbage(self):
        assert normalize_date(None) is None
        assert normalize_date("   ") is None
        assert normalize_date("not a date") is None


class TestParseDate:
    """Tests for parse_date."""

    def test_relative_words(self):
        today = date.today()
        assert parse_date("today") == today
        assert parse_date("Yesterday") == today - timedelta(days=1)
        assert parse_date("this month") == today.replace(day=1)

    def test_absolute(self):
        assert parse_date("2024-02-01") == date(2024, 2, 1)

    def test_invalid_raises(self):
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_date("someday")
