from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.reports import MonthlyReport as MonthlyReportSchema
from services import attendance_service, report_service
from services.grouping import filter_attendance

router = APIRouter(prefix="/reports", tags=["reports"])


# ==========================================================
# [1] monthly reports
# ==========================================================

# ✅ [COMPUTE] recompute monthly reports and upsert them into `report`
@router.get("/monthly")
def compute_monthly_reports(
    month: Optional[str] = None,
    year: Optional[str] = None,
    db: Session = Depends(get_db),
):
    records = attendance_service.fetch_latest_attendance(db)
    if month or year:
        records = filter_attendance(records, month, year)

    run = report_service.process_reports(db, records)
    return {
        "success": True,
        "data": [r.model_dump() for r in run.reports],
        "logs": run.logs,
        "message": run.logs[-1] if run.logs else "",
    }


# ✅ [READ] stored report rows
@router.get("/")
def read_reports(db: Session = Depends(get_db)):
    rows = report_service.fetch_reports(db)
    return {
        "success": True,
        "data": [MonthlyReportSchema.model_validate(r).model_dump() for r in rows],
    }
