"""
RestGate — Error Normalization & Terminal Responder
=====================================================

What:  Turns any failure into one APIError and serializes it as the JSON
       error response.
How:   normalize_error() classifies the failure into a FailureKind and
       builds the uniform error; render_error() writes status, message and
       (in development) the stack trace.
Who:   Called by the FastAPI exception handlers registered in main.py and by
       ErrorNormalizationMiddleware. Nothing else builds error responses.

Wire format:
    {
        "message": "<error.message if public, else the status reason phrase>",
        "stack":   "<traceback in development, else {}>"
    }
"""

import logging
import traceback
from http import HTTPStatus
from typing import Optional

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from restgate.config import Settings
from restgate.exceptions import (
    APIError,
    FailureKind,
    ValidationFailure,
    resolve_status,
    status_phrase,
)
from restgate.schemas.responses import ErrorResponse

logger = logging.getLogger("restgate.errors")


def format_stack(exc: BaseException) -> Optional[str]:
    """Formatted traceback of `exc`, or None if it was never raised."""
    if exc.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def classify(exc: BaseException) -> FailureKind:
    """Assign the FailureKind of a failure value."""
    if isinstance(exc, (ValidationFailure, RequestValidationError)):
        return FailureKind.VALIDATION
    if isinstance(exc, (APIError, StarletteHTTPException)):
        return FailureKind.APPLICATION
    return FailureKind.UNHANDLED


def normalize_error(exc: BaseException) -> APIError:
    """
    Convert any failure into the uniform APIError.

    - ValidationFailure / RequestValidationError: field messages flattened
      into one public message, status of the failure (400 by default).
    - APIError: returned unchanged.
    - HTTPException: detail and status kept; public for 4xx unless the
      exception says otherwise.
    - Anything else: message, status (default 500) and is_public (default
      False) taken from the exception's attributes.
    """
    kind = classify(exc)

    if kind is FailureKind.VALIDATION:
        if isinstance(exc, RequestValidationError):
            failure = ValidationFailure.from_pydantic_errors(list(exc.errors()))
        else:
            failure = exc
        return APIError(
            message=failure.unified_message(),
            status=failure.status,
            is_public=True,
            stack=format_stack(exc),
            kind=FailureKind.VALIDATION,
        )

    if kind is FailureKind.APPLICATION:
        if isinstance(exc, APIError):
            return exc
        status = resolve_status(exc.status_code)
        return APIError(
            message=str(exc.detail),
            status=status,
            is_public=getattr(exc, "is_public", status < 500),
            stack=format_stack(exc),
            headers=exc.headers,
            kind=FailureKind.APPLICATION,
        )

    status = getattr(exc, "status", None)
    if status is None:
        status = getattr(exc, "status_code", None)
    return APIError(
        message=str(exc),
        status=status,
        is_public=getattr(exc, "is_public", False),
        stack=format_stack(exc),
        kind=FailureKind.UNHANDLED,
    )


def render_error(request: Request, error: APIError, settings: Settings) -> JSONResponse:
    """
    Serialize `error` as the final JSON response. Terminal: never forwards.

    In development the error and its stack are written to the
    restgate.errors logger; in other modes only 5xx errors are logged, and
    the response never carries internal details.
    """
    stack = error.stack or format_stack(error)
    body = ErrorResponse(
        message=error.message if error.is_public else status_phrase(error.status),
        stack=stack if settings.is_development and stack else {},
    )

    if settings.is_development or error.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(
            "%s %s failed with %d (%s): %s\n%s",
            request.method,
            request.url.path,
            error.status,
            error.kind.value,
            error.message,
            stack or "",
        )

    return JSONResponse(
        status_code=error.status,
        content=body.model_dump(),
        headers=error.headers or None,
    )


def handle_error(request: Request, exc: BaseException, settings: Settings) -> JSONResponse:
    """Normalize `exc` and render it."""
    return render_error(request, normalize_error(exc), settings)
