"""Tests for app.core.timeutils."""

from datetime import date, datetime, timezone, timedelta

import pytest

from app.core.timeutils import as_utc, combine_utc, parse_clock, parse_date


class TestParseDate:
    def test_valid(self):
        assert parse_date("2025-09-05") == date(2025, 9, 5)

    @pytest.mark.parametrize("value", ["2025-9-5", "2025-02-30", "20250905", "", None])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_date(value)


class TestParseClock:
    @pytest.mark.parametrize("value", ["00:00", "09:05", "23:59"])
    def test_valid(self, value):
        assert parse_clock(value).strftime("%H:%M") == value

    @pytest.mark.parametrize("value", ["24:00", "7:30", "12:60", "12:30:00", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_clock(value)


class TestCombine:
    def test_is_utc_not_local(self):
        assert combine_utc(date(2025, 9, 5), "23:30") == datetime(2025, 9, 5, 23, 30, tzinfo=timezone.utc)

    def test_as_utc_naive_and_aware(self):
        naive = datetime(2025, 1, 1, 12, 0)
        assert as_utc(naive).tzinfo is timezone.utc
        plus_two = datetime(2025, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert as_utc(plus_two) == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert as_utc(None) is None
