from fastapi import APIRouter, Request, status
from utils.deps import bearer_dependency, db_dependency, session_dependency
from schemas.auth_schemas import CreateUserRequest, UpdateUserRequest, UserResponse
from services.auth_service import AuthService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/users",
    tags=["users"]
)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
@limiter.limit("3/minute")
def create_user(request: Request, body: CreateUserRequest, db: db_dependency):
    user = AuthService.create_user(body.email, body.password, db)

    logger.info(
        "User registered successfully",
        extra={"user_id": str(user.id), "email": user.email}
    )

    return user


@router.put("", status_code=status.HTTP_200_OK, response_model=UserResponse)
@limiter.limit("5/minute")
def update_user(request: Request, body: UpdateUserRequest,
                      access_token: bearer_dependency, sessions: session_dependency):
    """
    Change email and password (requires an access token).
    """
    return sessions.update_credentials(access_token, body.email, body.password)
