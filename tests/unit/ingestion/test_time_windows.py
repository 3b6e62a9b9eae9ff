"""Unit tests for search time windows."""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.ingestion.time_windows import DateRange, date_window

CENTRAL = timezone(timedelta(hours=-5))
NOW = datetime(2024, 6, 15, 19, 42, 10, tzinfo=CENTRAL)


class TestDateWindow:
    def test_tonight_runs_until_three_am(self):
        start, end = date_window(DateRange.TONIGHT, now=NOW)

        assert start == NOW
        assert end == datetime(2024, 6, 16, 3, 0, tzinfo=CENTRAL)

    def test_week_spans_today_plus_seven_days(self):
        start, end = date_window("week", now=NOW)

        assert start == datetime(2024, 6, 15, 0, 0, tzinfo=CENTRAL)
        assert end == datetime(2024, 6, 22, 23, 59, 59, 999999, tzinfo=CENTRAL)

    def test_single_date(self):
        start, end = date_window(DateRange.DATE, day=date(2024, 7, 4), now=NOW)

        assert start == datetime(2024, 7, 4, 0, 0, tzinfo=CENTRAL)
        assert end == datetime(2024, 7, 4, 23, 59, 59, 999999, tzinfo=CENTRAL)

    def test_day_ignored_for_tonight(self):
        assert date_window("tonight", day=date(2030, 1, 1), now=NOW)[0] == NOW

    def test_date_requires_day(self):
        with pytest.raises(ValueError, match="day is required"):
            date_window(DateRange.DATE, now=NOW)

    def test_unknown_range(self):
        with pytest.raises(ValueError):
            date_window("fortnight", now=NOW)

    def test_default_now_is_aware(self):
        start, end = date_window(DateRange.TONIGHT)
        assert start.tzinfo is not None
        assert end > start
