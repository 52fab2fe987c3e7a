from __future__ import annotations

import os

# in-memory SQLite for every test; must be set before the app modules load
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date

import pytest
from fastapi.testclient import TestClient

from database.db import Base, SessionLocal, engine, init_db
from models.attendance import Attendance as AttendanceModel
from utils.meeting_dates import format_meeting_date, meeting_type_for


@pytest.fixture(autouse=True)
def _fresh_tables():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from main import app

    return TestClient(app)


@pytest.fixture
def add_row(db):
    """Insert a row directly, bypassing the service layer."""

    def _add(day: date, deaf: int, hearing: int, meeting_type: str | None = None):
        row = AttendanceModel(
            date_mm_dd_yyyy=format_meeting_date(day),
            meeting_date=day,
            meeting_type=meeting_type or meeting_type_for(day),
            deaf=deaf,
            hearing=hearing,
            total=deaf + hearing,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _add
