"""
Request ID middleware.

Every request gets an id (the client's X-Request-ID if it sent one). The id
is stored on request.state and in a context variable that RequestIDFilter
(core/logging_config.py) copies onto log records, and it is echoed back in
the X-Request-ID response header. Being a context variable, it stays with
its own request when requests overlap.
"""

import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from core.logging_config import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


def get_request_id(request: Request) -> str:
    """Request id for the current request, or "no-request-id" outside the middleware."""
    return getattr(request.state, "request_id", "no-request-id")
