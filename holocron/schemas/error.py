"""Error response schemas for consistent error handling."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Types of errors that can occur."""

    VALIDATION_ERROR = "validation_error"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    NETWORK_ERROR = "network_error"
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When error occurred"
    )
    request_id: str | None = Field(None, description="Unique request identifier for tracking")
    path: str | None = Field(None, description="Request path that caused the error")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "network_error",
                "message": "Remote catalog unavailable",
                "detail": "page:1 could not be fetched",
                "status_code": 502,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "req_abc123xyz",
                "path": "/people/",
            }
        }
    )


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Any = Field(None, description="Value that failed validation")


class ValidationErrorResponse(ErrorResponse):
    """Extended error response for validation errors."""

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(
        default_factory=list, description="List of validation errors"
    )
