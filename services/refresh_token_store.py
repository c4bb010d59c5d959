import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from core.exceptions import NotFoundError, StorageError
from models.refresh_tokens import RefreshToken
from utils.clock import utc_now
from utils.logger import get_logger

logger = get_logger(__name__)

REFRESH_TOKEN_LIFETIME = timedelta(days=60)


def make_refresh_token() -> str:
    """256 bits from the OS CSPRNG, hex encoded."""
    return secrets.token_hex(32)


class RefreshTokenStore:
    """
    Issues, looks up and revokes refresh tokens in the refresh_tokens table.

    The store does not decide whether a token is usable. lookup() returns
    expired and revoked rows as well so the caller can tell the cases apart.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now,
                 lifetime: timedelta = REFRESH_TOKEN_LIFETIME):
        self.db = db
        self.clock = clock
        self.lifetime = lifetime

    def issue(self, user_id: uuid.UUID) -> RefreshToken:
        now = self.clock()
        model = RefreshToken(
            token=make_refresh_token(),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            expires_at=now + self.lifetime,
            revoked_at=None
        )

        try:
            self.db.add(model)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Could not store refresh token", extra={"user_id": str(user_id)}, exc_info=True)
            raise StorageError("Couldn't create refresh token") from e

        self.db.refresh(model)
        return model

    def lookup(self, token: str) -> RefreshToken:
        try:
            model = self.db.query(RefreshToken).filter(RefreshToken.token == token).one_or_none()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Couldn't look up refresh token") from e

        if model is None:
            raise NotFoundError("Refresh token not found")

        return model

    def revoke(self, token: str) -> None:
        """
        Marks the token revoked. Revoking an already revoked token is a no-op
        and keeps the original revoked_at.

        Raises:
            NotFoundError: no such token
            StorageError: the update failed
        """
        model = self.lookup(token)
        if model.is_revoked:
            return

        now = self.clock()
        model.revoked_at = now
        model.updated_at = now

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Couldn't revoke refresh token") from e
