import asyncio
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database.db import SessionLocal, get_db
from schemas.attendance import (
    Attendance as AttendanceSchema,
    AttendanceCreate,
    AttendanceUpdate,
    CurrentAttendanceSave,
    CurrentMeeting,
)
from services import attendance_service
from services.grouping import (
    available_months_and_years,
    calculate_deaf_totals,
    calculate_overall_totals,
    filter_attendance,
    group_attendance_by_month,
)
from utils.exceptions import DuplicateAttendance
from utils.meeting_dates import (
    format_meeting_date,
    meeting_info,
    next_meeting,
    normalize_date_key,
    parse_meeting_date,
)
from utils.validators import compute_total

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _record(r) -> dict:
    return AttendanceSchema.model_validate(r).model_dump()


def _not_found(date_key: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": {"code": 404, "message": f"Attendance record not found for {date_key}"}},
    )


def _resolve_meeting(today: Optional[date], input_date: Optional[str]):
    # a typed date replaces "today" for the lookup
    if input_date:
        today = parse_meeting_date(input_date)
    return next_meeting(today)


# ==========================================================
# [1] list / create
# ==========================================================

# ✅ [READ] all attendance rows, optionally for one month/year
@router.get("/")
def read_attendance_list(
    month: Optional[str] = Query(None, description="month name or number (e.g. October, 10)"),
    year: Optional[str] = Query(None, description="e.g. 2026"),
    db: Session = Depends(get_db),
):
    records = attendance_service.fetch_latest_attendance(db)
    if month or year:
        data = [r.model_dump() for r in filter_attendance(records, month, year)]
    else:
        data = [_record(r) for r in records]
    return {"success": True, "data": data}


# ✅ [CREATE] add a row for a date
@router.post("/", status_code=201)
def create_attendance(payload: AttendanceCreate, db: Session = Depends(get_db)):
    date_key = normalize_date_key(payload.date_mm_dd_yyyy)
    if attendance_service.get_attendance(db, date_key) is not None:
        raise DuplicateAttendance(f"Attendance already recorded for {date_key}")

    record = attendance_service.insert_attendance(
        db, date_key, payload.hearing or 0, payload.deaf or 0, payload.meeting_type
    )
    if record is None:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": {"code": 500, "message": attendance_service.MSG_SAVE_FAILED}},
        )
    return {"success": True, "data": _record(record), "message": attendance_service.MSG_INSERTED}


# ==========================================================
# [2] current meeting form
# ==========================================================

# ✅ [CURRENT] next meeting and its stored counts
@router.get("/current")
def read_current_meeting(
    today: Optional[date] = Query(None, description="override today's date (YYYY-MM-DD)"),
    input_date: Optional[str] = Query(None, description='typed date, e.g. "November 2, 2024"'),
    db: Session = Depends(get_db),
):
    meeting_type, meeting_date = _resolve_meeting(today, input_date)
    date_key = format_meeting_date(meeting_date)
    record = attendance_service.get_attendance(db, date_key)

    current = CurrentMeeting(
        meeting_type=meeting_type,
        date_mm_dd_yyyy=date_key,
        meeting_info=meeting_info(meeting_type, meeting_date),
        deaf=record.deaf if record else None,
        hearing=record.hearing if record else None,
        total=compute_total(record.deaf, record.hearing) if record else 0,
        exists=record is not None,
    )
    return {"success": True, "data": current.model_dump()}


# ✅ [SAVE] save the form for the next meeting
@router.put("/current")
def save_current_meeting(payload: CurrentAttendanceSave, db: Session = Depends(get_db)):
    meeting_type, meeting_date = _resolve_meeting(payload.today, payload.input_date)
    date_key = format_meeting_date(meeting_date)

    result = attendance_service.save_current_attendance(
        db, date_key, payload.deaf, payload.hearing, meeting_type
    )
    if result.action == "error":
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": {"code": 500, "message": result.message}},
        )
    return {
        "success": True,
        "data": {
            "action": result.action,
            "record": _record(result.record) if result.record is not None else None,
        },
        "message": result.message,
    }


# ==========================================================
# [3] grouped views
# ==========================================================

# ✅ [GROUPED] months -> midweek/weekend rows with totals
@router.get("/grouped")
def read_grouped_attendance(
    month: Optional[str] = None,
    year: Optional[str] = None,
    db: Session = Depends(get_db),
):
    records = filter_attendance(attendance_service.fetch_latest_attendance(db), month, year)
    grouped = group_attendance_by_month(records)
    totals = calculate_overall_totals(records)
    deaf_totals = calculate_deaf_totals(records)

    return {
        "success": True,
        "data": [
            {
                **monthly.model_dump(),
                "label": label,
                **totals[label].model_dump(),
                **deaf_totals[label].model_dump(),
            }
            for label, monthly in grouped.items()
        ],
    }


# ✅ [PERIODS] months/years that have data
@router.get("/periods")
def read_periods(db: Session = Depends(get_db)):
    periods = available_months_and_years(attendance_service.fetch_latest_attendance(db))
    return {"success": True, "data": periods.model_dump()}


# ==========================================================
# [4] live updates
# ==========================================================

# ✅ [WS] full row set on connect and after every change
@router.websocket("/ws")
async def attendance_updates(websocket: WebSocket):
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(rows):
        payload = jsonable_encoder({"event": "attendance", "data": rows})
        loop.call_soon_threadsafe(queue.put_nowait, payload)

    unsubscribe = attendance_service.broker.subscribe(on_change)
    try:
        db = SessionLocal()
        try:
            snapshot = [_record(r) for r in attendance_service.fetch_latest_attendance(db)]
        finally:
            db.close()
        await websocket.send_json({"event": "snapshot", "data": snapshot})

        async def forward():
            while True:
                await websocket.send_json(await queue.get())

        sender = asyncio.create_task(forward())
        try:
            # incoming frames are ignored; receive raises once the client leaves
            while True:
                await websocket.receive_text()
        finally:
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Failed to push attendance update")
    except WebSocketDisconnect:
        logger.info("Attendance subscriber disconnected")
    finally:
        unsubscribe()


# ==========================================================
# [5] single row (dynamic path, keep last)
# ==========================================================

# ✅ [READ] one row by date key
@router.get("/{date_key}")
def read_attendance(date_key: str, db: Session = Depends(get_db)):
    date_key = normalize_date_key(date_key)
    record = attendance_service.get_attendance(db, date_key)
    if record is None:
        return _not_found(date_key)
    return {"success": True, "data": _record(record)}


# ✅ [UPDATE] inline edit, total recomputed
@router.put("/{date_key}")
def update_attendance(date_key: str, payload: AttendanceUpdate, db: Session = Depends(get_db)):
    date_key = normalize_date_key(date_key)
    if attendance_service.get_attendance(db, date_key) is None:
        return _not_found(date_key)

    result = attendance_service.update_row(
        db, date_key, payload.deaf, payload.hearing, payload.meeting_type
    )
    if result.action == "error":
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": {"code": 500, "message": result.message}},
        )
    return {"success": True, "data": _record(result.record), "message": result.message}


# ✅ [DELETE] remove a row
@router.delete("/{date_key}")
def delete_attendance(date_key: str, db: Session = Depends(get_db)):
    date_key = normalize_date_key(date_key)
    if attendance_service.get_attendance(db, date_key) is None:
        return _not_found(date_key)

    if not attendance_service.delete_attendance(db, date_key):
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": {"code": 500, "message": attendance_service.MSG_DELETE_FAILED}},
        )
    return {
        "success": True,
        "data": {"date_mm_dd_yyyy": date_key},
        "message": attendance_service.MSG_DELETED,
    }
