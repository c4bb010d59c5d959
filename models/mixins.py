from sqlalchemy import Column, DateTime
from utils.clock import utc_now


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
class UpdatedAtMixin:
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
