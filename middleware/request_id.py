"""
Request ID middleware for log correlation.

Each request gets an id taken from X-Request-ID, or from the id API Gateway
forwards, or a fresh UUID. The id is kept in request.state for the error
handlers, in a context variable for the JSON log formatter, and echoed on
the response.
"""

import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

# Set by API Gateway on proxied requests
GATEWAY_REQUEST_ID_HEADER = "X-Amzn-Request-Id"


def resolve_request_id(request: Request) -> str:
    """Pick the inbound request id, falling back to a new UUID."""
    for header in (REQUEST_ID_HEADER, GATEWAY_REQUEST_ID_HEADER):
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to every request and its response."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = resolve_request_id(request)
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            # Reset so the id does not leak into the next request on this task
            request_id_var.reset(token)


def get_request_id() -> str:
    """Return the current request id, or '' outside a request."""
    return request_id_var.get()
