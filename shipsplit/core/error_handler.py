"""
Error handling and sanitization

- ShipSplitError subclasses map to HTTP statuses by kind
- Gateway messages are sanitized before reaching the client
- Stack traces are logged only, never returned
"""
import logging
import traceback
from typing import Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shipsplit.core.config import settings
from shipsplit.core.exceptions import (
    AllocationError,
    DraftLockedError,
    DraftNotFoundError,
    GatewayError,
    IssuanceError,
    LastDraftRemovalError,
    PackageNotFoundError,
    ShipmentValidationError,
    ShipSplitError,
    SubmissionInProgressError,
    UnknownOrderItemError,
)

logger = logging.getLogger(__name__)

# Patterns that indicate internal/sensitive error information
SENSITIVE_PATTERNS = [
    "api-key",
    "api_key",
    "secret",
    "token",
    "credential",
    "traceback",
    "file \"",
    "/shipsplit/",
]

# Most specific first
STATUS_BY_ERROR = [
    (ShipmentValidationError, 422),
    (UnknownOrderItemError, 404),
    (DraftNotFoundError, 404),
    (PackageNotFoundError, 404),
    (DraftLockedError, 409),
    (LastDraftRemovalError, 409),
    (SubmissionInProgressError, 409),
    (AllocationError, 400),
    (GatewayError, 502),
    (IssuanceError, 502),
]


def is_sensitive_error(message: str) -> bool:
    """Check if error message contains sensitive information."""
    message_lower = message.lower()
    return any(pattern in message_lower for pattern in SENSITIVE_PATTERNS)


def sanitize_error_message(error: Union[str, Exception]) -> str:
    """
    Sanitize an error message for safe client exposure.

    Full messages are returned in debug mode.
    """
    message = error if isinstance(error, str) else str(error)

    if settings.DEBUG:
        return message

    if is_sensitive_error(message):
        return "An internal error occurred. Please try again later."

    if len(message) > 200:
        return message[:200] + "..."

    return message


def status_for(error: ShipSplitError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return 500


async def shipsplit_error_handler(request: Request, exc: ShipSplitError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")

    content = {
        "error": exc.code,
        "message": sanitize_error_message(exc.message),
    }
    if isinstance(exc, ShipmentValidationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=status_code, content=content)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = f"{request.client.host if request.client else 'unknown'}-{id(exc)}"
    logger.error(
        f"Unhandled exception [{error_id}]: {type(exc).__name__}: {str(exc)}\n"
        f"Path: {request.url.path}\n"
        f"Method: {request.method}\n"
        f"Traceback:\n{traceback.format_exc()}"
    )

    message = str(exc) if settings.DEBUG else "An unexpected error occurred. Please try again later."
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": message, "error_id": error_id},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShipSplitError, shipsplit_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
