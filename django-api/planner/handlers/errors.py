"""DRF exception handler mapping domain errors to HTTP responses.

- NotFoundError → 404
- PreconditionFailedError, InvalidInputError → 400
- ConflictError → 409
- serializer ValidationError → 400 with field details
- anything else → 500 without internal details
"""

import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from planner.domain.errors import (
    ConflictError,
    DomainError,
    InvalidInputError,
    NotFoundError,
    PreconditionFailedError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_CATEGORY = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PreconditionFailedError, status.HTTP_400_BAD_REQUEST),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
)


def status_for(error: DomainError) -> int:
    for category, code in _STATUS_BY_CATEGORY:
        if isinstance(error, category):
            return code
    return status.HTTP_400_BAD_REQUEST


def _error_body(code: str, message: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}


def domain_exception_handler(exc, context):
    """Entry point configured as REST_FRAMEWORK["EXCEPTION_HANDLER"]."""
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else "unknown"

    if isinstance(exc, DomainError):
        logger.info("%s rejected by %s", exc.code.value, view_name)
        return Response(_error_body(exc.code.value, exc.message), status=status_for(exc))

    response = exception_handler(exc, context)
    if response is None:
        logger.error("Unhandled exception in %s", view_name, exc_info=exc)
        return Response(
            _error_body("INTERNAL_ERROR", "An unexpected error occurred"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = _error_body(
            "VALIDATION_ERROR", "Invalid request data", details=response.data
        )
    else:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        code = getattr(detail, "code", None) or "http_error"
        response.data = _error_body(str(code).upper(), str(detail or ""))
    return response
