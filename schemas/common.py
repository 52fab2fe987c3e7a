"""
schemas/common.py

- Shared schemas for the whole project
- Pydantic v2
- Contents:
  1) Standard error response: ErrorDetail, ErrorResponse
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


# =========================================================
# 1) Standard error response
# =========================================================

class ErrorDetail(BaseModel):
    """Smallest unit carrying an error code and message"""
    code: str = Field(..., description="error code (e.g. INTERNAL_ERROR, INVALID_DATE)")
    message: str = Field(..., description="human readable message")

class ErrorResponse(BaseModel):
    """
    Standard error body returned by the global error handlers
    - middlewares/error_handler.py returns this shape so Swagger documents it too
    """
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="response time (UTC)"
    )
    latency_ms: Optional[int] = Field(
        default=None, ge=0, description="processing time (ms), filled by the timing middleware when available"
    )

    model_config = ConfigDict(extra="ignore")
