"""
utils/meeting_dates.py

Calendar helpers for the two weekly meetings.

- Midweek meetings are anchored on Wednesday, weekend meetings on Sunday.
- Date keys come in two forms: written ("October 21, 2026") and
  underscore ("10_21_2026"). Storage always uses the written form.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from utils.exceptions import InvalidMeetingDate

logger = logging.getLogger(__name__)

MIDWEEK = "Midweek"
WEEKEND = "Weekend"
MEETING_TYPES = (MIDWEEK, WEEKEND)

# date.weekday(): Monday == 0 ... Sunday == 6
WEDNESDAY = 2
SUNDAY = 6

UNKNOWN_DATE = "Unknown Date"
UNKNOWN_MONTH = "Unknown Month"

MONTH_TO_NUMBER = {
    "January": "01",
    "February": "02",
    "March": "03",
    "April": "04",
    "May": "05",
    "June": "06",
    "July": "07",
    "August": "08",
    "September": "09",
    "October": "10",
    "November": "11",
    "December": "12",
}
NUMBER_TO_MONTH = {number: name for name, number in MONTH_TO_NUMBER.items()}

# accepted input formats, written form first
_DATE_FORMATS = (
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%m_%d_%Y",
    "%Y-%m-%d",
)


def days_until(target_weekday: int, current_weekday: int) -> int:
    """Days to the next target weekday, 1..7 (never 0)."""
    return (target_weekday + 7 - current_weekday) % 7 or 7


def next_meeting(today: Optional[date] = None) -> Tuple[str, date]:
    """
    Return (meeting_type, meeting_date) of the upcoming meeting.

    Wednesday and Sunday are meeting days themselves; Monday/Tuesday look ahead
    to Wednesday and Thursday..Saturday look ahead to Sunday.
    """
    today = today or date.today()
    current = today.weekday()

    if current == WEDNESDAY:
        return MIDWEEK, today
    if current == SUNDAY:
        return WEEKEND, today
    if current < WEDNESDAY:
        return MIDWEEK, today + timedelta(days=days_until(WEDNESDAY, current))
    return WEEKEND, today + timedelta(days=days_until(SUNDAY, current))


def meeting_type_for(value: date) -> str:
    """Meeting type a stored date belongs to (Mon-Wed midweek, Thu-Sun weekend)."""
    return MIDWEEK if value.weekday() <= WEDNESDAY else WEEKEND


def format_meeting_date(value: date) -> str:
    return f"{value.strftime('%B')} {value.day:02d}, {value.year}"


def format_underscore_date(value: date) -> str:
    return value.strftime("%m_%d_%Y")


def parse_meeting_date(text: Optional[str]) -> date:
    """Parse a date key in any accepted form, raising InvalidMeetingDate."""
    if not text or not text.strip():
        raise InvalidMeetingDate("Meeting date is required")

    cleaned = " ".join(text.strip().split())
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise InvalidMeetingDate(f"Unrecognized meeting date: {text!r}")


def normalize_date_key(text: Optional[str]) -> str:
    """Any accepted form -> written storage key."""
    return format_meeting_date(parse_meeting_date(text))


def meeting_info(meeting_type: str, meeting_date: date) -> str:
    return f"{meeting_type} Meeting – {format_meeting_date(meeting_date)}"


def get_month_and_year_from_date(key: Optional[str]) -> str:
    """
    "10_21_2026" or "October 21, 2026" -> "October 2026".

    Missing or malformed keys give "Unknown Date"; an out-of-range month in the
    underscore form gives "Unknown Month <year>".
    """
    if not key:
        logger.warning("Invalid date input: %r", key)
        return UNKNOWN_DATE

    parts = key.split("_")
    if len(parts) == 3:
        month, _, year = parts
        month_name = NUMBER_TO_MONTH.get(month)
        if month_name is None:
            logger.warning("Unexpected month value: %r", month)
            month_name = UNKNOWN_MONTH
        return f"{month_name} {year}"

    try:
        parsed = parse_meeting_date(key)
    except InvalidMeetingDate:
        logger.warning("Date format mismatch: %r", key)
        return UNKNOWN_DATE
    return f"{parsed.strftime('%B')} {parsed.year}"


def month_number(month_name: str) -> int:
    """"October" -> 10, raising InvalidMeetingDate for unknown names."""
    number = MONTH_TO_NUMBER.get((month_name or "").strip().capitalize())
    if number is None:
        raise InvalidMeetingDate(f"Unknown month: {month_name!r}")
    return int(number)
