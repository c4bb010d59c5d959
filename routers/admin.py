from fastapi import APIRouter, status
from core.config import settings
from core.exceptions import ForbiddenError
from services.auth_service import AuthService
from utils.deps import db_dependency
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)


@router.post("/reset", status_code=status.HTTP_200_OK)
def reset(db: db_dependency):
    """
    Delete every user, chirp and refresh token. Only on the dev platform.
    """
    if settings.PLATFORM != "dev":
        logger.warning("Reset attempted outside dev", extra={"platform": settings.PLATFORM})
        raise ForbiddenError("Reset is only allowed in dev environment")

    deleted = AuthService.delete_all_users(db)

    logger.info("Database reset", extra={"users_deleted": deleted})

    return {"message": "Reset complete", "users_deleted": deleted}
