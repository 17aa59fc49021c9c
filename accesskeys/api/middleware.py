"""Request correlation middleware.

Assigns every request a ULID request ID (or keeps a caller-supplied
X-Request-ID), binds it into the structlog context for the duration of the
request, and echoes it on the response. One key mutation, its store write
and its audit write therefore log under one request_id.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from accesskeys.utils.logger import bind_request_context, clear_request_context
from accesskeys.utils.ulid import generate_ulid

REQUEST_ID_HEADER = "X-Request-ID"

# Caller-supplied IDs longer than this are replaced
_MAX_REQUEST_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER, "")
        if not request_id or len(request_id) > _MAX_REQUEST_ID_LENGTH:
            request_id = generate_ulid()

        bind_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
