"""Request correlation for the Client Management API.

Each request gets an id (the caller's ``X-Request-ID`` or a fresh UUID4)
that is bound into structlog's contextvars, so the service, repository
and country-lookup events of one request can be grouped.  The id is
echoed on every response, including error envelopes.
"""

import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _request_id(request: HttpRequest) -> str:
    return request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Binds ``correlation_id`` for the duration of a request.

    Emits ``request_started`` and ``request_finished`` (status and
    ``duration_ms``) around the view.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = _request_id(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=request_id)

        path = request.get_full_path()
        logger.info("request_started", method=request.method, path=path)
        started = time.monotonic()

        response = self.get_response(request)

        logger.info(
            "request_finished",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        response[REQUEST_ID_HEADER] = request_id
        return response
