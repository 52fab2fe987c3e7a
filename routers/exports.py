from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from services import attendance_service
from services.grouping import filter_attendance, sorting_monthly_attendance_data
from services.report_service import build_monthly_reports
from services.xlsx_service import XLSX_MEDIA_TYPE, XLSXService

router = APIRouter(prefix="/exports", tags=["exports"])

xlsx_service = XLSXService(organization=settings.ORGANIZATION_NAME)


def _download(filename: str, content: bytes) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ✅ [XLSX] monthly reports
@router.get("/reports.xlsx")
def export_reports(
    month: Optional[str] = None,
    year: Optional[str] = None,
    db: Session = Depends(get_db),
):
    records = attendance_service.fetch_latest_attendance(db)
    if month or year:
        records = filter_attendance(records, month, year)
    reports = build_monthly_reports(sorting_monthly_attendance_data(records))
    return _download(*xlsx_service.export_reports(reports))


# ✅ [XLSX] one year: raw rows + reports
@router.get("/year/{year}.xlsx")
def export_year(year: int, db: Session = Depends(get_db)):
    records = attendance_service.fetch_latest_attendance(db)
    return _download(*xlsx_service.export_year(records, year))


# ✅ [XLSX] month range: per-year sheets grouped by month/week + reports
@router.get("/range.xlsx")
def export_range(
    start_month: Optional[str] = Query(None, description="e.g. January"),
    start_year: Optional[int] = Query(None, description="e.g. 2026"),
    end_month: Optional[str] = Query(None, description="e.g. March"),
    end_year: Optional[int] = Query(None, description="e.g. 2026"),
    db: Session = Depends(get_db),
):
    records = attendance_service.fetch_latest_attendance(db)
    filename, content = xlsx_service.export_range(records, start_month, start_year, end_month, end_year)
    return _download(filename, content)
