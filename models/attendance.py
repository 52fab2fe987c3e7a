from sqlalchemy import Column, Integer, String, Date
from database.db import Base


class Attendance(Base):
    __tablename__ = "attendance"  # one row per meeting date

    id = Column(Integer, primary_key=True, index=True)                     # surrogate key
    date_mm_dd_yyyy = Column(String(40), nullable=False, unique=True, index=True)  # written date key (e.g. "October 21, 2026")
    meeting_date = Column(Date, nullable=False, index=True)                # parsed key, used for ordering
    meeting_type = Column(String(20), nullable=False)                      # Midweek | Weekend
    deaf = Column(Integer, nullable=False, default=0)                      # deaf attendees
    hearing = Column(Integer, nullable=False, default=0)                   # hearing attendees
    total = Column(Integer, nullable=False, default=0)                     # deaf + hearing
