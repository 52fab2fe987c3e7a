"""
services/report_service.py

Monthly aggregates (meeting count, overall total/average, deaf total/average)
split by Midweek/Weekend, and their denormalized copy in the `report` table.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Literal, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.reports import MonthlyReport as MonthlyReportModel
from schemas.attendance import MonthlyAttendance
from schemas.reports import AttendanceMonthlyReport, MeetingTypeReport, ReportRun
from services.grouping import sorting_monthly_attendance_data

logger = logging.getLogger(__name__)

MSG_NO_DATA = "No attendance data available."

# report table column prefix per MeetingTypeReport
_PREFIXES = {"midWeek": "midweek", "weekend": "weekend"}
_FIELDS = {
    "count": "count",
    "total": "total",
    "average": "average",
    "deafTotal": "deaf_total",
    "deafAverage": "deaf_average",
}


def calculate_average(count: int, total: int) -> float:
    return round(total / count, 1) if count else 0


def calculate_deaf_average(count: int, deaf_total: int) -> float:
    return calculate_average(count, deaf_total)


def _type_report(records) -> MeetingTypeReport:
    count = len(records)
    total = sum(r.total for r in records)
    deaf_total = sum(r.deaf for r in records)
    return MeetingTypeReport(
        count=count,
        total=total,
        average=calculate_average(count, total),
        deafTotal=deaf_total,
        deafAverage=calculate_deaf_average(count, deaf_total),
    )


def build_monthly_reports(monthly: Iterable[MonthlyAttendance]) -> List[AttendanceMonthlyReport]:
    return [
        AttendanceMonthlyReport(
            month=m.label,
            midWeek=_type_report(m.midWeek),
            weekend=_type_report(m.weekend),
        )
        for m in monthly
    ]


def calculate_average_attendance_each_month(
    monthly: List[MonthlyAttendance],
    meeting_type: Literal["midWeek", "weekend"],
) -> float:
    """Mean of the per-month average totals; a month without meetings counts as 0."""
    if not monthly:
        return 0
    month_averages = [
        sum(r.total for r in getattr(m, meeting_type)) / (len(getattr(m, meeting_type)) or 1)
        for m in monthly
    ]
    return sum(month_averages) / len(monthly)


# ==========================================================
# [report table]
# ==========================================================
def _row_values(report: AttendanceMonthlyReport) -> Dict[str, float]:
    values: Dict[str, float] = {}
    for attr, prefix in _PREFIXES.items():
        part = getattr(report, attr)
        for field, column in _FIELDS.items():
            values[f"{prefix}_{column}"] = getattr(part, field)
    return values


def fetch_reports(db: Session) -> List[MonthlyReportModel]:
    try:
        return db.query(MonthlyReportModel).order_by(MonthlyReportModel.id.asc()).all()
    except SQLAlchemyError as e:
        logger.error("Error fetching reports: %s", e)
        return []


def insert_report(db: Session, report: AttendanceMonthlyReport) -> Optional[MonthlyReportModel]:
    row = MonthlyReportModel(month_year=report.month, **_row_values(report))
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Insert Report Error: %s", e)
        return None
    return row


def update_report(db: Session, row: MonthlyReportModel, report: AttendanceMonthlyReport) -> Optional[MonthlyReportModel]:
    try:
        for column, value in _row_values(report).items():
            setattr(row, column, value)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Update Report Error: %s", e)
        return None
    return row


def report_has_changes(row: MonthlyReportModel, report: AttendanceMonthlyReport) -> bool:
    return any(getattr(row, column) != value for column, value in _row_values(report).items())


def process_reports(db: Session, records: Iterable) -> ReportRun:
    """
    Recompute monthly reports from attendance rows and upsert them.

    Returns the reports and one log line per month describing what happened.
    """
    monthly = sorting_monthly_attendance_data(records)
    if not monthly:
        logger.warning("No attendance data available to process.")
        return ReportRun(reports=[], logs=[MSG_NO_DATA])

    reports = build_monthly_reports(monthly)
    existing = {row.month_year: row for row in fetch_reports(db)}
    logs: List[str] = []

    for report in reports:
        row = existing.get(report.month)
        if row is None:
            message = f"Inserting report for {report.month}"
            insert_report(db, report)
        elif report_has_changes(row, report):
            message = f"Updating report for {report.month}"
            update_report(db, row, report)
        else:
            message = f"Nothing change report for {report.month}"
        logger.info(message)
        logs.append(message)

    return ReportRun(reports=reports, logs=logs)
