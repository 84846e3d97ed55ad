"""Application error base class and the DRF exception handler.

Every domain exception derives from ``ApplicationError`` and declares the
HTTP status it maps to.  ``api_exception_handler`` is wired in via
``REST_FRAMEWORK["EXCEPTION_HANDLER"]`` and renders domain errors, DRF
errors and Pydantic validation errors into the standard envelope.
Anything else is returned as ``None`` so Django's 500 handling applies.
"""

from __future__ import annotations

from typing import Any, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException, ParseError, ValidationError
from rest_framework.response import Response

from modules.core.responses import ApiResponse, FieldError

logger = structlog.get_logger(__name__)

VALIDATION_FAILED_MESSAGE = "Validation failed for one or more fields"


class ApplicationError(Exception):
    """Base class for errors raised by the service layer.

    ``public_message`` is what the client sees; ``None`` means
    ``str(exc)`` is safe to expose.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    public_message: Optional[str] = None

    @property
    def message(self) -> str:
        return self.public_message or str(self)


# ---------------------------------------------------------------------------
# Field error extraction
# ---------------------------------------------------------------------------


def _drf_field_errors(detail: Any, data: Any, prefix: str = "") -> List[FieldError]:
    """Flatten DRF's nested ``ValidationError.detail`` into FieldErrors."""
    errors: List[FieldError] = []
    if isinstance(detail, dict):
        for field, value in detail.items():
            name = f"{prefix}.{field}" if prefix else str(field)
            rejected = data.get(field) if isinstance(data, dict) else None
            errors.extend(_drf_field_errors(value, rejected, name))
    elif isinstance(detail, list):
        for item in detail:
            if isinstance(item, (dict, list)):
                errors.extend(_drf_field_errors(item, data, prefix))
            else:
                errors.append(
                    FieldError(
                        field=prefix or "non_field_errors",
                        message=str(item),
                        rejected_value=data if prefix else None,
                    )
                )
    else:
        errors.append(
            FieldError(
                field=prefix or "non_field_errors",
                message=str(detail),
                rejected_value=data if prefix else None,
            )
        )
    return errors


def _pydantic_field_errors(exc: PydanticValidationError) -> List[FieldError]:
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "non_field_errors"
        errors.append(
            FieldError(
                field=field,
                message=error.get("msg", "Invalid value"),
                rejected_value=error.get("input"),
            )
        )
    return errors


def _request_data(context: dict) -> Any:
    request = context.get("request")
    if request is None:
        return None
    try:
        return request.data
    except ParseError:
        return None


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


def api_exception_handler(exc: Exception, context: dict) -> Optional[Response]:
    """Translate exceptions raised inside DRF views into the envelope."""
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    if isinstance(exc, ApplicationError):
        if exc.status_code >= 500:
            logger.error(
                "api.application_error",
                error_type=type(exc).__name__,
                error=str(exc),
                status_code=exc.status_code,
            )
        else:
            logger.warning(
                "api.application_error",
                error_type=type(exc).__name__,
                error=str(exc),
                status_code=exc.status_code,
            )
        body = ApiResponse.error(exc.message)
        return Response(body.to_data(), status=exc.status_code)

    if isinstance(exc, ValidationError):
        errors = _drf_field_errors(exc.detail, _request_data(context))
        logger.warning("api.validation_failed", fields=[e.field for e in errors])
        body = ApiResponse.validation_error(VALIDATION_FAILED_MESSAGE, errors)
        return Response(body.to_data(), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, PydanticValidationError):
        errors = _pydantic_field_errors(exc)
        logger.warning("api.validation_failed", fields=[e.field for e in errors])
        body = ApiResponse.validation_error(VALIDATION_FAILED_MESSAGE, errors)
        return Response(body.to_data(), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ParseError):
        logger.warning("api.malformed_request", error=str(exc.detail))
        body = ApiResponse.validation_error(
            "Invalid request body",
            [FieldError(field="body", message=str(exc.detail))],
        )
        return Response(body.to_data(), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, APIException):
        logger.warning(
            "api.request_rejected",
            error_type=type(exc).__name__,
            status_code=exc.status_code,
        )
        body = ApiResponse.error(str(exc.detail))
        headers = {}
        if getattr(exc, "wait", None):
            headers["Retry-After"] = str(int(exc.wait))
        return Response(body.to_data(), status=exc.status_code, headers=headers)

    return None
