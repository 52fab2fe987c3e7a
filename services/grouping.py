from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from schemas.attendance import (
    Attendance as AttendanceSchema,
    MonthlyAttendance,
    MonthlyDeafTotals,
    MonthlyTotals,
    Periods,
)
from utils.exceptions import InvalidMeetingDate
from utils.meeting_dates import (
    MIDWEEK,
    NUMBER_TO_MONTH,
    UNKNOWN_DATE,
    get_month_and_year_from_date,
    parse_meeting_date,
)


def _as_schema(records: Iterable) -> List[AttendanceSchema]:
    return [
        r if isinstance(r, AttendanceSchema) else AttendanceSchema.model_validate(r)
        for r in records
    ]


def _month_year(record: AttendanceSchema) -> Optional[Tuple[str, int]]:
    # grouped rows need a real date (weeks, ranges), so unparseable keys are left out
    try:
        parse_meeting_date(record.date_mm_dd_yyyy)
    except InvalidMeetingDate:
        return None
    month, year = get_month_and_year_from_date(record.date_mm_dd_yyyy).rsplit(" ", 1)
    return month, int(year)


def _normalize_month(month: Optional[str]) -> Optional[str]:
    if not month:
        return None
    month = month.strip()
    if month.isdigit():
        return NUMBER_TO_MONTH.get(month.zfill(2), month)
    return month.capitalize()


def filter_attendance(records: Iterable, month: Optional[str] = None, year: Optional[str] = None) -> List[AttendanceSchema]:
    """Keep records of the selected month name ("October" or "10") and/or year."""
    wanted_month = _normalize_month(month)
    wanted_year = str(year).strip() if year else None

    selected = []
    for record in _as_schema(records):
        key = _month_year(record)
        if key is None:
            continue
        record_month, record_year = key
        if wanted_month and wanted_month != record_month:
            continue
        if wanted_year and wanted_year != str(record_year):
            continue
        selected.append(record)
    return selected


def sorting_monthly_attendance_data(records: Iterable) -> List[MonthlyAttendance]:
    """
    Bucket records into one MonthlyAttendance per (month, year), in the order
    the months first appear. Anything that is not Midweek counts as weekend.
    """
    buckets: Dict[str, MonthlyAttendance] = {}
    for record in _as_schema(records):
        key = _month_year(record)
        if key is None:
            continue
        month, year = key
        label = f"{month} {year}"
        if label not in buckets:
            buckets[label] = MonthlyAttendance(month=month, year=year)

        if record.meeting_type == MIDWEEK:
            buckets[label].midWeek.append(record)
        else:
            buckets[label].weekend.append(record)
    return list(buckets.values())


def group_attendance_by_month(records: Iterable) -> Dict[str, MonthlyAttendance]:
    return {monthly.label: monthly for monthly in sorting_monthly_attendance_data(records)}


def calculate_overall_totals(records: Iterable) -> Dict[str, MonthlyTotals]:
    totals: Dict[str, MonthlyTotals] = {}
    for label, monthly in group_attendance_by_month(records).items():
        totals[label] = MonthlyTotals(
            midWeekTotal=sum(r.total for r in monthly.midWeek),
            weekendTotal=sum(r.total for r in monthly.weekend),
        )
    return totals


def calculate_deaf_totals(records: Iterable) -> Dict[str, MonthlyDeafTotals]:
    totals: Dict[str, MonthlyDeafTotals] = {}
    for label, monthly in group_attendance_by_month(records).items():
        totals[label] = MonthlyDeafTotals(
            midWeekDeafTotal=sum(r.deaf for r in monthly.midWeek),
            weekendDeafTotal=sum(r.deaf for r in monthly.weekend),
        )
    return totals


def available_months_and_years(records: Iterable) -> Periods:
    """Unique month names and years, in first-seen order ("Unknown Date" keys skipped)."""
    months: Dict[str, None] = {}
    years: Dict[str, None] = {}
    for record in _as_schema(records):
        label = get_month_and_year_from_date(record.date_mm_dd_yyyy)
        if label == UNKNOWN_DATE:
            continue
        month, year = label.rsplit(" ", 1)
        months.setdefault(month, None)
        years.setdefault(year, None)
    return Periods(months=list(months), years=list(years))


def group_by_year(monthly: Iterable[MonthlyAttendance]) -> Dict[int, List[MonthlyAttendance]]:
    grouped: Dict[int, List[MonthlyAttendance]] = {}
    for month in monthly:
        grouped.setdefault(month.year, []).append(month)
    return grouped
