"""
Classified API errors and the project-wide DRF exception handler.

Each error carries a stable ``code`` that the frontend depends on
verbatim. The handler turns any exception raised by a view into the
body ``{"code": ..., "message": ..., "details": ...}``; unexpected
exceptions are logged with their traceback and reported to the client
as a generic ``INTERNAL_ERROR``.
"""
from __future__ import annotations

from typing import Any

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response

from core.logging import get_logger

logger = get_logger(__name__)


class ApiError(exceptions.APIException):
    """Base class for errors with a contract code."""

    code = "API_ERROR"

    def __init__(self, detail: Any = None, details: Any = None):
        super().__init__(detail)
        self.details = details


# -- authentication -----------------------------------------------------------
class AuthenticationRequired(exceptions.NotAuthenticated, ApiError):
    code = "AUTH_001"
    default_detail = "Access token required"


class InvalidCredentials(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTH_001"
    default_detail = "Invalid username or password"


class InvalidToken(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "AUTH_002"
    default_detail = "Invalid or expired token"


# -- authorization ------------------------------------------------------------
class InsufficientPermissions(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "AUTH_003"
    default_detail = "Insufficient permissions"


# -- validation ---------------------------------------------------------------
class InvalidRut(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VAL_001"
    default_detail = "Invalid RUT format or check digit"


class DuplicateRut(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "VAL_002"
    default_detail = "A patient with this RUT already exists"


class MissingFields(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VAL_003"
    default_detail = "Missing required fields"


class InvalidOphthalmicValues(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VAL_004"
    default_detail = "Invalid ophthalmic values"


# -- persistence --------------------------------------------------------------
class RecordNotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "DB_003"
    default_detail = "Record not found"


# DRF's own exceptions, for errors raised outside our services
_DRF_CODES = (
    (exceptions.ValidationError, "VAL_003"),
    (exceptions.ParseError, "VAL_003"),
    (exceptions.NotAuthenticated, "AUTH_001"),
    (exceptions.AuthenticationFailed, "AUTH_002"),
    (exceptions.PermissionDenied, "AUTH_003"),
    (exceptions.NotFound, "DB_003"),
)


def _code_for(exc: exceptions.APIException) -> str:
    if isinstance(exc, ApiError):
        return exc.code
    for klass, code in _DRF_CODES:
        if isinstance(exc, klass):
            return code
    return "API_ERROR"


def api_exception_handler(exc, context):
    # rest_framework.views loads the authentication classes, which import this module
    from rest_framework.views import exception_handler as drf_exception_handler

    if isinstance(exc, Http404):
        exc = RecordNotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = InsufficientPermissions()

    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get("view")
        logger.exception("unhandled_api_error", view=view.__class__.__name__ if view else None)
        return Response(
            {"code": "INTERNAL_ERROR", "message": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = _code_for(exc)
    body: dict[str, Any] = {"code": code}
    if isinstance(exc, exceptions.ValidationError):
        body["message"] = "Invalid request data"
        body["details"] = resp.data
    else:
        body["message"] = str(exc.detail)
        details = getattr(exc, "details", None)
        if details is not None:
            body["details"] = details
    logger.info("api_error", code=code, status=resp.status_code)
    resp.data = body
    return resp
