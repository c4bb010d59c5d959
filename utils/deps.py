import uuid
from core.database import SessionLocal
from typing import Annotated, Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from core.config import settings
from datetime import timedelta
from services.session_service import SessionService
from services.refresh_token_store import RefreshTokenStore
from services.token_service import TokenService

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


def get_session_service(db: db_dependency) -> SessionService:
    refresh_tokens = RefreshTokenStore(db, lifetime=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))
    return SessionService(
        db,
        token_secret=settings.JWT_SECRET,
        access_token_lifetime=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        refresh_tokens=refresh_tokens
    )

session_dependency = Annotated[SessionService, Depends(get_session_service)]


def get_bearer_token(authorization: Annotated[Optional[str], Header()] = None) -> str:
    return TokenService.get_bearer_token(authorization)

bearer_dependency = Annotated[str, Depends(get_bearer_token)]


def get_current_user_id(token: bearer_dependency, sessions: session_dependency) -> uuid.UUID:
    return sessions.authenticate(token)

user_id_dependency = Annotated[uuid.UUID, Depends(get_current_user_id)]
