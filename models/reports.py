from sqlalchemy import Column, Integer, String, Float
from database.db import Base


class MonthlyReport(Base):
    __tablename__ = "report"  # denormalized per-month aggregates

    id = Column(Integer, primary_key=True, index=True)
    month_year = Column(String(30), nullable=False, unique=True, index=True)  # e.g. "October 2026"

    # ✅ Midweek aggregates
    midweek_count = Column(Integer, nullable=False, default=0)
    midweek_total = Column(Integer, nullable=False, default=0)
    midweek_average = Column(Float(precision=53), nullable=False, default=0)
    midweek_deaf_total = Column(Integer, nullable=False, default=0)
    midweek_deaf_average = Column(Float(precision=53), nullable=False, default=0)

    # ✅ Weekend aggregates
    weekend_count = Column(Integer, nullable=False, default=0)
    weekend_total = Column(Integer, nullable=False, default=0)
    weekend_average = Column(Float(precision=53), nullable=False, default=0)
    weekend_deaf_total = Column(Integer, nullable=False, default=0)
    weekend_deaf_average = Column(Float(precision=53), nullable=False, default=0)
