"""
Application error taxonomy and its single HTTP mapping.

Overview
--------
- `AppError` and its subclasses are raised by domain services. Each carries a
  stable machine `code` and a default HTTP status.
- `status_for_exception()` is the one pure function deciding which status/code
  pair an exception becomes. Both the DRF handler and tests use it, so route
  handlers never hand-pick status codes.
- `api_exception_handler()` is wired as DRF's `EXCEPTION_HANDLER`.

Enumeration prevention
----------------------
A `ForbiddenError` raised while checking the list `admin` action maps to 404,
not 403: a caller without admin rights must not learn that a list exists (or
who manages it) by probing co-manager endpoints.

Response body
-------------
    {"detail": "...", "code": "NOT_FOUND"}

NOT_FOUND, FORBIDDEN, UNAUTHORIZED, RATE_LIMIT_EXCEEDED and INTERNAL_ERROR
always carry a fixed friendly message so internal denial reasons never reach
the client. VALIDATION_ERROR and CONFLICT carry the error's own message (plus
DRF field errors under `errors`).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import set_rollback

logger = logging.getLogger(__name__)


FRIENDLY_ERROR_MESSAGES = {
    "NOT_FOUND": "We couldn't find what you're looking for",
    "FORBIDDEN": "You don't have permission to do that",
    "UNAUTHORIZED": "Please sign in to continue",
    "RATE_LIMIT_EXCEEDED": "Too many requests. Please wait a moment and try again",
    "INTERNAL_ERROR": "Something went wrong. Please try again",
    "VALIDATION_ERROR": "Please check your information and try again",
    "CONFLICT": "This already exists. Please try something different",
}

# Codes whose message is replaced by the friendly one above.
_CONCEALED_CODES = frozenset(
    {"NOT_FOUND", "FORBIDDEN", "UNAUTHORIZED", "RATE_LIMIT_EXCEEDED", "INTERNAL_ERROR"}
)


class AppError(Exception):
    """Base class for errors raised deliberately by application code."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "", *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"
    status_code = 401


class ConflictError(AppError):
    code = "CONFLICT"
    status_code = 409


class ForbiddenError(AppError):
    """
    Denial from the permission core.

    `action` and `resource_type` record which check failed; the HTTP mapping
    uses them to conceal list administration denials as 404.
    """

    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, reason: str, *, action: Any = None, resource_type: Any = None):
        super().__init__(reason)
        self.reason = reason
        self.action = action
        self.resource_type = resource_type

    @property
    def conceals_resource(self) -> bool:
        # str-valued enums compare equal to their values
        return self.resource_type == "list" and self.action == "admin"


def status_for_exception(exc: BaseException) -> tuple[int, str]:
    """Return the `(http_status, error_code)` pair for any exception."""
    if isinstance(exc, ForbiddenError) and exc.conceals_resource:
        return 404, "NOT_FOUND"
    if isinstance(exc, AppError):
        return exc.status_code, exc.code

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        return 401, "UNAUTHORIZED"
    if isinstance(exc, drf_exceptions.Throttled):
        return 429, "RATE_LIMIT_EXCEEDED"
    if isinstance(exc, (drf_exceptions.ValidationError, drf_exceptions.ParseError, DjangoValidationError)):
        return 400, "VALIDATION_ERROR"
    if isinstance(exc, (drf_exceptions.NotFound, Http404)):
        return 404, "NOT_FOUND"
    if isinstance(exc, (drf_exceptions.PermissionDenied, DjangoPermissionDenied)):
        return 403, "FORBIDDEN"
    if isinstance(exc, drf_exceptions.APIException):
        # Protocol-level errors (405, 406, 415) keep their own status.
        return exc.status_code, str(exc.default_code).upper()

    return 500, "INTERNAL_ERROR"


def _message_for(exc: BaseException, code: str) -> str:
    if code in _CONCEALED_CODES:
        return FRIENDLY_ERROR_MESSAGES[code]
    if isinstance(exc, AppError) and exc.message:
        return exc.message
    if isinstance(exc, drf_exceptions.APIException) and isinstance(exc.detail, str):
        return str(exc.detail)
    if isinstance(exc, drf_exceptions.ValidationError) and isinstance(exc.detail, list) and exc.detail:
        return str(exc.detail[0])
    return FRIENDLY_ERROR_MESSAGES.get(code, FRIENDLY_ERROR_MESSAGES["INTERNAL_ERROR"])


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """
    DRF exception handler.

    - Maps through `status_for_exception()`; no view decides status codes itself.
    - Unexpected errors are logged with traceback and surface as INTERNAL_ERROR.
    - Marks the current atomic block for rollback, like DRF's default handler.
    """
    status, code = status_for_exception(exc)

    if status >= 500:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            view.__class__.__name__ if view is not None else "view",
            exc_info=exc,
        )
    elif isinstance(exc, ForbiddenError):
        # Denial reasons are for operators only; clients get the friendly text.
        logger.info("Permission denied (%s): %s", code, exc.reason)

    body: dict[str, Any] = {"detail": _message_for(exc, code), "code": code}
    headers: dict[str, str] = {}

    if isinstance(exc, drf_exceptions.ValidationError) and isinstance(exc.detail, dict):
        body["errors"] = exc.detail
    elif isinstance(exc, ValidationError) and exc.field:
        body["errors"] = {exc.field: [exc.message]}

    if isinstance(exc, drf_exceptions.Throttled) and exc.wait is not None:
        body["retry_after"] = int(exc.wait)
        headers["Retry-After"] = str(int(exc.wait))

    set_rollback()
    return Response(body, status=status, headers=headers or None)
