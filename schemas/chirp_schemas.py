import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class CreateChirpRequest(BaseModel):
    body: str


class ChirpResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    body: str
    user_id: uuid.UUID
