class AttendanceError(Exception):
    """Base exception for attendance rule violations."""


class InvalidMeetingDate(AttendanceError, ValueError):
    """Raised when a meeting date key cannot be parsed."""


class ExportSelectionError(AttendanceError):
    """Raised when an export selection is incomplete or inconsistent."""


class NoExportData(AttendanceError):
    """Raised when an export selection matches no attendance records."""


class DuplicateAttendance(AttendanceError):
    """Raised when a row already exists for the meeting date."""
