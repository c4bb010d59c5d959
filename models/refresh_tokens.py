from datetime import datetime
from core.database import Base
from sqlalchemy import Column, DateTime, String, Uuid, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, UpdatedAtMixin
from utils.clock import as_utc

class RefreshToken(Base, CreatedAtMixin, UpdatedAtMixin):
    """
    Opaque long-lived token that can mint new access tokens.

    A row is usable while now < expires_at and revoked_at is NULL. Expired
    rows are never swept, they simply stop working.
    """
    __tablename__ = "refresh_tokens"

    #pk
    token = Column(String(64), primary_key=True)

    #fk
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="refresh_tokens")

    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    def is_expired(self, now: datetime) -> bool:
        return now >= as_utc(self.expires_at)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None
