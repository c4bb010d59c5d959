from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from core.config import settings
from core.exceptions import UnauthorizedError
from services.token_service import TokenService

def get_user_id(request: Request):
    """Rate limit key: the access token's user id, falling back to the client address."""
    authorization = request.headers.get("Authorization")
    if authorization:
        try:
            token = TokenService.get_bearer_token(authorization)
            return str(TokenService.validate_access_token(token, settings.JWT_SECRET))
        except UnauthorizedError:
            pass  # refresh tokens and junk fall back to the address

    return get_remote_address(request)

limiter = Limiter(
    key_func=get_user_id,
    default_limits=["200/hour"],
    enabled=settings.RATE_LIMIT_ENABLED and settings.ENV != "testing"
)
