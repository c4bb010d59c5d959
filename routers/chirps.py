from typing import Optional
from fastapi import APIRouter, Request, Response, status
from utils.deps import db_dependency, user_id_dependency
from schemas.chirp_schemas import ChirpResponse, CreateChirpRequest
from services.chirp_service import ChirpService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/chirps",
    tags=["chirps"]
)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ChirpResponse)
@limiter.limit("30/minute")
def create_chirp(request: Request, body: CreateChirpRequest, user_id: user_id_dependency, db: db_dependency):
    chirp = ChirpService.create_chirp(user_id, body.body, db)

    logger.info("Chirp created", extra={"chirp_id": str(chirp.id), "user_id": str(user_id)})

    return chirp


@router.get("", response_model=list[ChirpResponse])
def list_chirps(db: db_dependency, author_id: Optional[str] = None, sort: str = "asc"):
    return ChirpService.list_chirps(db, author_id=author_id, sort=sort)


@router.get("/{chirp_id}", response_model=ChirpResponse)
def get_chirp(chirp_id: str, db: db_dependency):
    return ChirpService.get_chirp(chirp_id, db)


@router.delete("/{chirp_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_chirp(chirp_id: str, user_id: user_id_dependency, db: db_dependency):
    ChirpService.delete_chirp(chirp_id, user_id, db)

    logger.info("Chirp deleted", extra={"chirp_id": chirp_id, "user_id": str(user_id)})

    return Response(status_code=status.HTTP_204_NO_CONTENT)
