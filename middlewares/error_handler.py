import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from schemas.common import ErrorDetail, ErrorResponse
from utils.exceptions import DuplicateAttendance, ExportSelectionError, InvalidMeetingDate, NoExportData

logger = logging.getLogger(__name__)


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def add_error_handlers(app: FastAPI):
    @app.exception_handler(InvalidMeetingDate)
    async def invalid_date_handler(request: Request, exc: InvalidMeetingDate):
        return _error(422, "INVALID_DATE", str(exc))

    @app.exception_handler(DuplicateAttendance)
    async def duplicate_attendance_handler(request: Request, exc: DuplicateAttendance):
        return _error(409, "DUPLICATE", str(exc))

    @app.exception_handler(ExportSelectionError)
    async def export_selection_handler(request: Request, exc: ExportSelectionError):
        return _error(400, "INVALID_SELECTION", str(exc))

    @app.exception_handler(NoExportData)
    async def no_export_data_handler(request: Request, exc: NoExportData):
        return _error(404, "NO_DATA", str(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "INTERNAL_ERROR", str(exc))
