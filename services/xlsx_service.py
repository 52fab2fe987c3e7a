import calendar
import io
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

import xlsxwriter

from schemas.attendance import Attendance as AttendanceSchema, MonthlyAttendance
from schemas.reports import AttendanceMonthlyReport
from services.grouping import group_by_year, sorting_monthly_attendance_data
from services.report_service import (
    build_monthly_reports,
    calculate_average_attendance_each_month,
)
from utils.exceptions import ExportSelectionError, NoExportData
from utils.meeting_dates import MIDWEEK, WEEKEND, month_number, parse_meeting_date

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

REPORT_HEADERS = [
    "Month",
    "Meeting Type",
    "Meeting count",
    "Overall",
    "Overall average",
    "Deaf Total",
    "Deaf Average",
]
RECORD_HEADERS = ["date_mm_dd_yyyy", "meeting_type", "deaf", "hearing", "total"]
RANGE_HEADERS = ["Week", "Meeting Type", "Date", "Hearing", "Deaf", "Total"]


class XLSXService:
    """Builds attendance workbooks in memory and returns their bytes."""

    def __init__(self, organization: Optional[str] = None):
        self.organization = organization

    # ==========================================================
    # workbook plumbing
    # ==========================================================
    def _new_workbook(self) -> Tuple[io.BytesIO, "xlsxwriter.Workbook", Dict[str, object]]:
        output = io.BytesIO()
        workbook = xlsxwriter.Workbook(output, {"in_memory": True})
        workbook.set_properties({"title": "Meeting Attendance", "company": self.organization or ""})
        formats = {
            "bold": workbook.add_format({"bold": True}),
            "title": workbook.add_format({"bold": True, "align": "center", "valign": "vcenter", "border": 1}),
            "week": workbook.add_format({"align": "center", "valign": "vcenter", "border": 1}),
        }
        return output, workbook, formats

    @staticmethod
    def _close(output: io.BytesIO, workbook) -> bytes:
        workbook.close()
        output.seek(0)
        return output.getvalue()

    @staticmethod
    def _write_row(worksheet, row: int, values: Iterable, cell_format=None) -> None:
        for col, value in enumerate(values):
            worksheet.write(row, col, value, cell_format)

    # ==========================================================
    # sheets
    # ==========================================================
    def _write_reports_sheet(
        self,
        workbook,
        formats,
        reports: List[AttendanceMonthlyReport],
        name: str,
        monthly: Optional[List[MonthlyAttendance]] = None,
    ) -> None:
        worksheet = workbook.add_worksheet(name)
        self._write_row(worksheet, 0, REPORT_HEADERS, formats["bold"])

        row = 1
        for report in reports:
            for label, part in ((MIDWEEK, report.midWeek), (WEEKEND, report.weekend)):
                self._write_row(
                    worksheet,
                    row,
                    [report.month, label, part.count, part.total, part.average, part.deafTotal, part.deafAverage],
                )
                row += 1

        # average of the monthly averages over the exported months
        if monthly:
            row += 1
            worksheet.write(row, 0, "Average of monthly averages", formats["bold"])
            row += 1
            for label, attr in ((MIDWEEK, "midWeek"), (WEEKEND, "weekend")):
                average = round(calculate_average_attendance_each_month(monthly, attr), 1)
                self._write_row(worksheet, row, ["", label, "", "", average])
                row += 1
        worksheet.set_column(0, len(REPORT_HEADERS) - 1, 16)

    def _write_records_sheet(self, workbook, formats, records: List[AttendanceSchema], name: str) -> None:
        worksheet = workbook.add_worksheet(name)
        self._write_row(worksheet, 0, RECORD_HEADERS, formats["bold"])
        for row, record in enumerate(records, start=1):
            self._write_row(worksheet, row, [getattr(record, key) for key in RECORD_HEADERS])
        worksheet.set_column(0, 0, 20)

    def _write_range_sheet(self, workbook, formats, monthly: List[MonthlyAttendance], name: str) -> None:
        worksheet = workbook.add_worksheet(name)
        last_col = len(RANGE_HEADERS) - 1
        row = 0

        for month in monthly:
            worksheet.merge_range(row, 0, row, last_col, f"Month: {month.label}", formats["title"])
            row += 1
            self._write_row(worksheet, row, RANGE_HEADERS, formats["bold"])
            row += 1

            for week_no, week in enumerate(weeks_of(month), start=1):
                first = row
                for record in week:
                    self._write_row(
                        worksheet,
                        row,
                        ["", record.meeting_type, record.date_mm_dd_yyyy, record.hearing, record.deaf, record.total],
                    )
                    row += 1
                label = f"Week {week_no}"
                if row - first > 1:
                    worksheet.merge_range(first, 0, row - 1, 0, label, formats["week"])
                else:
                    worksheet.write(first, 0, label, formats["week"])

            row += 1  # blank row between months
        worksheet.set_column(0, 0, 10)
        worksheet.set_column(1, 2, 20)

    # ==========================================================
    # public builders
    # ==========================================================
    def reports_workbook(self, reports: List[AttendanceMonthlyReport]) -> bytes:
        output, workbook, formats = self._new_workbook()
        self._write_reports_sheet(workbook, formats, reports, "Attendance Reports")
        return self._close(output, workbook)

    def year_workbook(self, year: int, monthly: List[MonthlyAttendance]) -> bytes:
        output, workbook, formats = self._new_workbook()
        records = [r for m in monthly for r in (*m.midWeek, *m.weekend)]
        self._write_records_sheet(workbook, formats, records, f"Year {year}")
        self._write_reports_sheet(workbook, formats, build_monthly_reports(monthly), "Reports", monthly)
        return self._close(output, workbook)

    def range_workbook(self, monthly: List[MonthlyAttendance]) -> bytes:
        output, workbook, formats = self._new_workbook()
        for year, months in group_by_year(monthly).items():
            self._write_range_sheet(workbook, formats, months, f"Year {year}")
        self._write_reports_sheet(workbook, formats, build_monthly_reports(monthly), "Reports", monthly)
        return self._close(output, workbook)

    # ==========================================================
    # selection + export
    # ==========================================================
    def export_year(self, records: Iterable, year) -> Tuple[str, bytes]:
        if not year:
            raise ExportSelectionError("Please select a year")

        year = int(year)
        monthly = [m for m in sorting_monthly_attendance_data(records) if m.year == year]
        if not any(m.midWeek or m.weekend for m in monthly):
            raise NoExportData("No data available for the selected year")

        logger.info("Exporting attendance for %s (%d months)", year, len(monthly))
        return f"attendance_report_{year}.xlsx", self.year_workbook(year, monthly)

    def export_range(
        self,
        records: Iterable,
        start_month: Optional[str],
        start_year,
        end_month: Optional[str],
        end_year,
    ) -> Tuple[str, bytes]:
        if not (start_month and start_year and end_month and end_year):
            raise ExportSelectionError("Please select start and end month/year")

        start, end = month_range(start_month, start_year, end_month, end_year)
        if start > end:
            raise ExportSelectionError("Start date must be before end date")

        monthly = [
            m for m in sorting_monthly_attendance_data(records)
            if start <= date(m.year, month_number(m.month), 1) <= end
        ]
        if not monthly:
            raise NoExportData("No data available for the selected range")

        filename = f"attendance_report_{start_month}_{start_year}_to_{end_month}_{end_year}.xlsx"
        logger.info("Exporting attendance range %s", filename)
        return filename, self.range_workbook(monthly)

    def export_reports(self, reports: List[AttendanceMonthlyReport]) -> Tuple[str, bytes]:
        return "AttendanceReports.xlsx", self.reports_workbook(reports)


def month_range(start_month: str, start_year, end_month: str, end_year) -> Tuple[date, date]:
    """First day of the start month .. last day of the end month."""
    start = date(int(start_year), month_number(start_month), 1)
    end_y, end_m = int(end_year), month_number(end_month)
    end = date(end_y, end_m, calendar.monthrange(end_y, end_m)[1])
    return start, end


def weeks_of(month: MonthlyAttendance) -> List[List[AttendanceSchema]]:
    """Records of one month in date order, split into Monday..Sunday weeks."""
    dated = sorted(
        ((parse_meeting_date(r.date_mm_dd_yyyy), r) for r in (*month.midWeek, *month.weekend)),
        key=lambda pair: pair[0],
    )
    weeks: Dict[Tuple[int, int], List[AttendanceSchema]] = {}
    for meeting_date, record in dated:
        iso = meeting_date.isocalendar()
        weeks.setdefault((iso[0], iso[1]), []).append(record)
    return list(weeks.values())
