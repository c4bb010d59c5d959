import uuid
from core.database import Base
from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, UpdatedAtMixin

class User(Base, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "users"

    #pk
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    #relationships
    chirps = relationship("Chirp", back_populates="user", cascade="all, delete-orphan")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
