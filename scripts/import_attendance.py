import argparse
import csv
import logging

from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from models.attendance import Attendance as AttendanceModel  # ✅ model import
from utils.exceptions import InvalidMeetingDate
from utils.meeting_dates import format_meeting_date, meeting_type_for, parse_meeting_date
from utils.validators import compute_total, sanitize_count

logger = logging.getLogger(__name__)

CSV_PATH = "data/attendance.csv"  # ✅ default file path


def migrate_attendance(csv_path: str = CSV_PATH) -> int:
    """
    CSV (date_mm_dd_yyyy, meeting_type, deaf, hearing[, total]) -> attendance table.

    Keys are normalized to the written form, totals are recomputed and dates
    already stored are skipped. Returns the number of inserted rows.
    """
    init_db()
    db: Session = SessionLocal()
    inserted = 0

    try:
        seen = {key for (key,) in db.query(AttendanceModel.date_mm_dd_yyyy).all()}
        with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
            reader = csv.DictReader(csvfile)
            for line_no, row in enumerate(reader, start=2):
                try:
                    meeting_date = parse_meeting_date(row.get("date_mm_dd_yyyy"))
                except InvalidMeetingDate as e:
                    logger.warning("line %d skipped: %s", line_no, e)
                    continue

                key = format_meeting_date(meeting_date)
                if key in seen:
                    logger.info("line %d skipped: %s already stored", line_no, key)
                    continue

                deaf = sanitize_count(row.get("deaf")) or 0
                hearing = sanitize_count(row.get("hearing")) or 0
                db.add(
                    AttendanceModel(
                        date_mm_dd_yyyy=key,                                           # written date key
                        meeting_date=meeting_date,                                     # parsed date
                        meeting_type=row.get("meeting_type") or meeting_type_for(meeting_date),
                        deaf=deaf,                                                     # deaf attendees
                        hearing=hearing,                                               # hearing attendees
                        total=compute_total(deaf, hearing),                            # recomputed, CSV total ignored
                    )
                )
                seen.add(key)
                inserted += 1

        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    print(f"✅ attendance CSV -> DB import done ({inserted} rows)")
    return inserted


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import attendance rows from a CSV file")
    parser.add_argument("csv_path", nargs="?", default=CSV_PATH)
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    migrate_attendance(args.csv_path)
