from __future__ import annotations

from datetime import date, datetime

import pytest

from leadtracker.utils.dates import end_of_week, format_day_first, is_day_first_format, parse_lead_date, to_iso_date


def test_day_first_and_iso_parse_to_same_date():
    assert parse_lead_date("05-03-2025") == date(2025, 3, 5)
    assert parse_lead_date("2025-03-05") == date(2025, 3, 5)


def test_iso_datetime_strings_parse_to_their_date():
    assert parse_lead_date("2025-03-05T18:45:00.000Z") == date(2025, 3, 5)
    assert parse_lead_date("2025-03-05 00:00:00") == date(2025, 3, 5)


@pytest.mark.parametrize("value", ["", "   ", None, "31-02-2025", "2025/03/05", "tomorrow", "5-3", 20250305])
def test_unparseable_values_return_none(value):
    assert parse_lead_date(value) is None


def test_date_objects_pass_through():
    assert parse_lead_date(date(2025, 3, 5)) == date(2025, 3, 5)
    assert parse_lead_date(datetime(2025, 3, 5, 9, 0)) == date(2025, 3, 5)


def test_formatting_helpers():
    assert format_day_first(date(2025, 3, 5)) == "05-03-2025"
    assert to_iso_date("05-03-2025") == "2025-03-05"
    assert to_iso_date("junk") is None
    assert is_day_first_format("05-03-2025") is True
    assert is_day_first_format("5-3-2025") is False


@pytest.mark.parametrize(
    ("reference", "expected"),
    [
        (date(2025, 3, 5), date(2025, 3, 9)),  # Wednesday
        (date(2025, 3, 8), date(2025, 3, 9)),  # Saturday
        (date(2025, 3, 9), date(2025, 3, 16)),  # Sunday
    ],
)
def test_end_of_week(reference, expected):
    assert end_of_week(reference) == expected
