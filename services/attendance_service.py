"""
services/attendance_service.py

Data access for the `attendance` table.

Every call catches backend errors, logs them and returns a sentinel
(empty list / None / False) instead of raising, so a router can turn the
result into a short log message for the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.attendance import Attendance as AttendanceModel
from services.realtime import AttendanceBroker, ChangeEvent
from utils.exceptions import DuplicateAttendance
from utils.meeting_dates import (
    format_meeting_date,
    meeting_type_for,
    parse_meeting_date,
)
from utils.validators import compute_total, has_changes

logger = logging.getLogger(__name__)

MSG_NO_CHANGES = "No changes detected. Submission aborted."
MSG_CHECK_FAILED = "Error checking for existing attendance."
MSG_UPDATED = "Attendance updated successfully."
MSG_INSERTED = "New attendance record inserted successfully."
MSG_SAVE_FAILED = "Error during attendance submission."
MSG_DELETED = "Attendance record deleted successfully."
MSG_DELETE_FAILED = "Failed to delete attendance record."


@dataclass
class SaveResult:
    action: str                          # inserted | updated | unchanged | error
    message: str
    record: Optional[AttendanceModel] = None

    @property
    def saved(self) -> bool:
        return self.action in ("inserted", "updated")


# ==========================================================
# [read]
# ==========================================================
def fetch_latest_attendance(db: Session) -> List[AttendanceModel]:
    try:
        return (
            db.query(AttendanceModel)
            .order_by(AttendanceModel.meeting_date.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("Error fetching latest attendance: %s", e)
        return []


def check_existing_attendance(db: Session, date_key: str) -> Optional[List[AttendanceModel]]:
    """Rows stored under the date key, or None when the lookup itself failed."""
    try:
        return (
            db.query(AttendanceModel)
            .filter(AttendanceModel.date_mm_dd_yyyy == date_key)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("Check Existing Error: %s", e)
        return None


def get_attendance(db: Session, date_key: str) -> Optional[AttendanceModel]:
    rows = check_existing_attendance(db, date_key)
    return rows[0] if rows else None


# ✅ change notifications go out after each committed write
broker = AttendanceBroker(fetch_latest_attendance, channel="custom-attendance-channel")


# ==========================================================
# [write]
# ==========================================================
def insert_attendance(
    db: Session,
    date_key: str,
    hearing: int,
    deaf: int,
    meeting_type: Optional[str] = None,
) -> Optional[AttendanceModel]:
    meeting_date = parse_meeting_date(date_key)
    record = AttendanceModel(
        date_mm_dd_yyyy=format_meeting_date(meeting_date),
        meeting_date=meeting_date,
        meeting_type=meeting_type or meeting_type_for(meeting_date),
        hearing=hearing or 0,
        deaf=deaf or 0,
        total=compute_total(deaf, hearing),
    )
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
    except IntegrityError as e:
        db.rollback()
        logger.warning("Insert Conflict: %s", e)
        raise DuplicateAttendance(f"Attendance already recorded for {format_meeting_date(meeting_date)}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Insert Error: %s", e)
        return None

    broker.publish(db, ChangeEvent("INSERT", date_key=record.date_mm_dd_yyyy))
    return record


def update_attendance(
    db: Session,
    date_key: str,
    hearing: int,
    deaf: int,
    meeting_type: Optional[str] = None,
) -> Optional[AttendanceModel]:
    try:
        record = get_attendance(db, date_key)
        if record is None:
            logger.error("Update Error: no attendance stored for %s", date_key)
            return None

        record.hearing = hearing or 0
        record.deaf = deaf or 0
        record.total = compute_total(deaf, hearing)
        if meeting_type:
            record.meeting_type = meeting_type
        db.commit()
        db.refresh(record)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Update Error: %s", e)
        return None

    broker.publish(db, ChangeEvent("UPDATE", date_key=date_key))
    return record


def delete_attendance(db: Session, date_key: str) -> bool:
    try:
        deleted = (
            db.query(AttendanceModel)
            .filter(AttendanceModel.date_mm_dd_yyyy == date_key)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Delete Error: %s", e)
        return False

    if not deleted:
        return False
    broker.publish(db, ChangeEvent("DELETE", date_key=date_key))
    return True


# ==========================================================
# [form / table flows]
# ==========================================================
def save_current_attendance(
    db: Session,
    date_key: str,
    deaf: Optional[int],
    hearing: Optional[int],
    meeting_type: str,
) -> SaveResult:
    """
    Save the form for one meeting date.

    Aborts when the counts equal what is stored; otherwise updates the stored
    row or inserts a new one. Empty counts are saved as 0.
    """
    existing = check_existing_attendance(db, date_key)
    if existing is None:
        logger.error(MSG_CHECK_FAILED)
        return SaveResult("error", MSG_CHECK_FAILED)

    current = existing[0] if existing else None
    original_deaf = current.deaf if current else None
    original_hearing = current.hearing if current else None

    if not has_changes(deaf, hearing, original_deaf, original_hearing):
        logger.info(MSG_NO_CHANGES)
        return SaveResult("unchanged", MSG_NO_CHANGES, current)

    if current is not None:
        record = update_attendance(db, date_key, hearing or 0, deaf or 0, meeting_type)
        action, message = "updated", MSG_UPDATED
    else:
        try:
            record = insert_attendance(db, date_key, hearing or 0, deaf or 0, meeting_type)
        except DuplicateAttendance as e:
            # another save for the same date landed first
            logger.error("%s: %s", MSG_SAVE_FAILED, e)
            return SaveResult("error", MSG_SAVE_FAILED)
        action, message = "inserted", MSG_INSERTED

    if record is None:
        return SaveResult("error", MSG_SAVE_FAILED)
    logger.info(message)
    return SaveResult(action, message, record)


def update_row(
    db: Session,
    date_key: str,
    deaf: Optional[int],
    hearing: Optional[int],
    meeting_type: Optional[str] = None,
) -> SaveResult:
    """Inline table edit: keep missing counts as stored, recompute total."""
    current = get_attendance(db, date_key)
    if current is None:
        return SaveResult("error", f"Attendance record not found for {date_key}")

    deaf = current.deaf if deaf is None else deaf
    hearing = current.hearing if hearing is None else hearing
    record = update_attendance(db, date_key, hearing, deaf, meeting_type)
    if record is None:
        return SaveResult("error", MSG_SAVE_FAILED)
    return SaveResult("updated", MSG_UPDATED, record)

