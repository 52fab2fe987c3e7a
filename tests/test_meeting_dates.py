from datetime import date

import pytest

from utils.exceptions import InvalidMeetingDate
from utils.meeting_dates import (
    MIDWEEK,
    WEEKEND,
    days_until,
    format_meeting_date,
    format_underscore_date,
    get_month_and_year_from_date,
    meeting_info,
    meeting_type_for,
    month_number,
    next_meeting,
    normalize_date_key,
    parse_meeting_date,
)

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2026, 10, 19), (MIDWEEK, date(2026, 10, 21))),  # Monday
        (date(2026, 10, 20), (MIDWEEK, date(2026, 10, 21))),  # Tuesday
        (date(2026, 10, 21), (MIDWEEK, date(2026, 10, 21))),  # Wednesday is itself a meeting day
        (date(2026, 10, 22), (WEEKEND, date(2026, 10, 25))),  # Thursday
        (date(2026, 10, 23), (WEEKEND, date(2026, 10, 25))),  # Friday
        (date(2026, 10, 24), (WEEKEND, date(2026, 10, 25))),  # Saturday
        (date(2026, 10, 25), (WEEKEND, date(2026, 10, 25))),  # Sunday is itself a meeting day
    ],
)
def test_next_meeting_for_each_weekday(today, expected):
    assert next_meeting(today) == expected


def test_next_meeting_crosses_month_and_year():
    assert next_meeting(date(2026, 12, 31)) == (WEEKEND, date(2027, 1, 3))


def test_days_until_is_never_zero():
    assert days_until(2, 2) == 7
    assert days_until(6, 0) == 6
    assert days_until(2, 0) == 2


def test_meeting_type_for_stored_dates():
    assert meeting_type_for(date(2026, 10, 21)) == MIDWEEK
    assert meeting_type_for(date(2026, 10, 25)) == WEEKEND
    assert meeting_type_for(date(2026, 10, 24)) == WEEKEND


def test_date_formats():
    assert format_meeting_date(date(2024, 11, 3)) == "November 03, 2024"
    assert format_underscore_date(date(2024, 11, 3)) == "11_03_2024"
    assert meeting_info(MIDWEEK, date(2026, 10, 21)) == "Midweek Meeting – October 21, 2026"


@pytest.mark.parametrize(
    "text",
    ["October 21, 2026", "October 21 2026", "Oct 21, 2026", "10_21_2026", "2026-10-21", "  October  21,  2026 "],
)
def test_parse_accepts_every_key_form(text):
    assert parse_meeting_date(text) == date(2026, 10, 21)


@pytest.mark.parametrize("text", [None, "", "not a date", "13_40_2026"])
def test_parse_rejects_malformed_keys(text):
    with pytest.raises(InvalidMeetingDate):
        parse_meeting_date(text)


def test_normalize_date_key_uses_written_form():
    assert normalize_date_key("10_21_2026") == "October 21, 2026"


def test_month_and_year_labels():
    assert get_month_and_year_from_date("10_21_2026") == "October 2026"
    assert get_month_and_year_from_date("October 21, 2026") == "October 2026"
    assert get_month_and_year_from_date("13_01_2026") == "Unknown Month 2026"
    assert get_month_and_year_from_date("garbage") == "Unknown Date"
    assert get_month_and_year_from_date(None) == "Unknown Date"


def test_month_number():
    assert month_number("march") == 3
    with pytest.raises(InvalidMeetingDate):
        month_number("Smarch")
