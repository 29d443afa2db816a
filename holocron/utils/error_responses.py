"""Builders for the JSON error payloads returned by the exception handlers.

Every payload carries the active request id and a UTC timestamp so clients
see one shape whether a request failed validation, was rejected by a service,
or could not reach the remote catalog.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from holocron.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from holocron.utils.request_context import get_request_id

__all__ = [
    "build_error_response",
    "build_validation_error_response",
]


def _current_timestamp() -> datetime:
    """Return the payload timestamp; tests monkeypatch this for fixed values."""

    return datetime.now(UTC)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    return ValidationErrorResponse(
        error_type=ErrorType.VALIDATION_ERROR,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id() or None,
        path=path,
        errors=list(errors),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ErrorResponse:
    """Construct an :class:`ErrorResponse` stamped with request metadata."""

    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id() or None,
        path=path,
    )
