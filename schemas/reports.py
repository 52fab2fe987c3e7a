from pydantic import BaseModel, ConfigDict
from typing import List


# ==========================================================
# [computed report schemas]
# ==========================================================
class MeetingTypeReport(BaseModel):
    count: int = 0              # number of meetings
    total: int = 0              # overall attendance
    average: float = 0          # overall attendance per meeting
    deafTotal: int = 0
    deafAverage: float = 0


class AttendanceMonthlyReport(BaseModel):
    month: str                  # "October 2026"
    midWeek: MeetingTypeReport
    weekend: MeetingTypeReport


class ReportRun(BaseModel):
    reports: List[AttendanceMonthlyReport]
    logs: List[str]


# ==========================================================
# [stored report row]
# ==========================================================
class MonthlyReport(BaseModel):
    month_year: str
    midweek_count: int
    midweek_total: int
    midweek_average: float
    midweek_deaf_total: int
    midweek_deaf_average: float
    weekend_count: int
    weekend_total: int
    weekend_average: float
    weekend_deaf_total: int
    weekend_deaf_average: float

    model_config = ConfigDict(from_attributes=True)
