from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional
from datetime import date

from utils.validators import sanitize_count

MeetingType = Literal["Midweek", "Weekend"]


# ==========================================================
# [input schemas]
# ==========================================================
class AttendanceCounts(BaseModel):
    deaf: Optional[int] = Field(default=None, description="deaf attendees (negative input is clamped to 0)")
    hearing: Optional[int] = Field(default=None, description="hearing attendees (negative input is clamped to 0)")

    @field_validator("deaf", "hearing", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_count(v)


class AttendanceCreate(AttendanceCounts):
    date_mm_dd_yyyy: str                        # "October 21, 2026" or "10_21_2026"
    meeting_type: Optional[MeetingType] = None  # derived from the date when omitted


class AttendanceUpdate(AttendanceCounts):
    meeting_type: Optional[MeetingType] = None


class CurrentAttendanceSave(AttendanceCounts):
    today: Optional[date] = None                # override "today" for the next meeting lookup
    input_date: Optional[str] = None            # free-text date typed into the form


# ==========================================================
# [output schemas]
# ==========================================================
class Attendance(BaseModel):
    date_mm_dd_yyyy: str
    meeting_type: str
    deaf: int
    hearing: int
    total: int

    model_config = ConfigDict(from_attributes=True)


class CurrentMeeting(BaseModel):
    meeting_type: MeetingType
    date_mm_dd_yyyy: str
    meeting_info: str
    deaf: Optional[int] = None
    hearing: Optional[int] = None
    total: int = 0
    exists: bool = False


class MonthlyAttendance(BaseModel):
    month: str                                  # month name, e.g. "October"
    year: int
    midWeek: List[Attendance] = Field(default_factory=list)
    weekend: List[Attendance] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.month} {self.year}"


class MonthlyTotals(BaseModel):
    midWeekTotal: int = 0
    weekendTotal: int = 0


class MonthlyDeafTotals(BaseModel):
    midWeekDeafTotal: int = 0
    weekendDeafTotal: int = 0


class Periods(BaseModel):
    months: List[str]
    years: List[str]
