"""
Middleware package exports.
"""

from middleware.request_id import RequestIDMiddleware, get_request_id, REQUEST_ID_HEADER
from middleware.rate_limiter import limiter, get_user_id

__all__ = ["RequestIDMiddleware", "get_request_id", "REQUEST_ID_HEADER", "limiter", "get_user_id"]
