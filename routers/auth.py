from fastapi import APIRouter, Request, Response
from starlette import status
from utils.deps import bearer_dependency, session_dependency
from schemas.auth_schemas import LoginRequest, LoginResponse, TokenResponse
from middleware.rate_limiter import limiter
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/api",
    tags=["auth"]
)


@router.post("/login", response_model=LoginResponse)
@limiter.limit("5/minute")
def login(request: Request, body: LoginRequest, sessions: session_dependency):
    result = sessions.login(body.email, body.password)

    return LoginResponse(
        id=result.user.id,
        created_at=result.user.created_at,
        updated_at=result.user.updated_at,
        email=result.user.email,
        token=result.token,
        refresh_token=result.refresh_token
    )


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit("10/minute")
def refresh(request: Request, refresh_token: bearer_dependency, sessions: session_dependency):
    """
    New access token for the refresh token in the Authorization header.
    """
    return TokenResponse(token=sessions.refresh(refresh_token))


@router.post("/revoke", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("10/minute")
def revoke(request: Request, refresh_token: bearer_dependency, sessions: session_dependency):
    """
    Revoke the refresh token in the Authorization header (logout).
    Succeeds whether or not the token exists or was already revoked.
    """
    sessions.revoke(refresh_token)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
