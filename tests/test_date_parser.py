"""Tests for date parser with relative dates."""

import pytest
from datetime import date, datetime, timedelta

from pocketledger.utils.date_parser import get_date_range, parse_date, parse_datetime

FRIDAY = date(2024, 3, 15)
NEW_YEAR = date(2024, 1, 1)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("today", FRIDAY),
        ("Yesterday", date(2024, 3, 14)),
        ("tomorrow", date(2024, 3, 16)),
        ("last week", date(2024, 3, 4)),
        ("this week", date(2024, 3, 11)),
        ("next week", date(2024, 3, 18)),
        ("last month", date(2024, 2, 1)),
        ("this month", date(2024, 3, 1)),
        ("next month", date(2024, 4, 1)),
        ("last year", date(2023, 1, 1)),
        ("this year", date(2024, 1, 1)),
        ("next year", date(2025, 1, 1)),
        ("last monday", date(2024, 3, 11)),
        # Same weekday means a full week back
        ("last friday", date(2024, 3, 8)),
    ],
)
def test_relative_dates(text, expected):
    assert parse_date(text, FRIDAY) == expected


def test_relative_dates_across_year_boundary():
    assert parse_date("last month", NEW_YEAR) == date(2023, 12, 1)
    assert parse_date("yesterday", NEW_YEAR) == date(2023, 12, 31)


def test_defaults_to_today():
    assert parse_date("today") == date.today()
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


@pytest.mark.parametrize(
    "text",
    ["2024-01-15", "January 15, 2024", "15/01/2024", "  2024-01-15  "],
)
def test_absolute_dates(text):
    assert parse_date(text, FRIDAY) == date(2024, 1, 15)


@pytest.mark.parametrize("text", ["last invalid", "whenever"])
def test_invalid_dates(text):
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date(text, FRIDAY)


class TestParseDatetime:
    """Tests for parse_datetime."""

    NOW = datetime(2024, 3, 15, 14, 45)

    def test_now(self):
        assert parse_datetime("now", self.NOW) == self.NOW

    def test_relative_words_keep_time_of_day(self):
        assert parse_datetime("yesterday", self.NOW) == datetime(2024, 3, 14, 14, 45)

    def test_absolute_date_is_midnight(self):
        assert parse_datetime("2024-01-15", self.NOW) == datetime(2024, 1, 15)

    def test_date_and_time(self):
        assert parse_datetime("2024-01-15 09:30", self.NOW) == datetime(2024, 1, 15, 9, 30)

    def test_result_is_naive(self):
        assert parse_datetime("2024-01-15T09:30:00+00:00", self.NOW).tzinfo is None

    def test_invalid(self):
        with pytest.raises(ValueError, match="Could not parse date"):
            parse_datetime("whenever", self.NOW)


@pytest.mark.parametrize(
    "period, today, expected",
    [
        ("this-month", FRIDAY, (date(2024, 3, 1), FRIDAY)),
        ("this-year", FRIDAY, (date(2024, 1, 1), FRIDAY)),
        ("this-week", FRIDAY, (date(2024, 3, 11), FRIDAY)),
        ("last-month", FRIDAY, (date(2024, 2, 1), date(2024, 2, 29))),
        ("last-year", FRIDAY, (date(2023, 1, 1), date(2023, 12, 31))),
        ("last-week", FRIDAY, (date(2024, 3, 4), date(2024, 3, 10))),
        ("last-month", NEW_YEAR, (date(2023, 12, 1), date(2023, 12, 31))),
        ("this-month", NEW_YEAR, (NEW_YEAR, NEW_YEAR)),
        ("This-Week ", FRIDAY, (date(2024, 3, 11), FRIDAY)),
    ],
)
def test_get_date_range(period, today, expected):
    assert get_date_range(period, today) == expected


def test_get_date_range_defaults_to_today():
    start, end = get_date_range("this-week")
    assert end == date.today()
    assert start.weekday() == 0


def test_get_date_range_invalid_period():
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("invalid-period")
