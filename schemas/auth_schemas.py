import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    email: str


class LoginResponse(UserResponse):
    token: str
    refresh_token: str


class TokenResponse(BaseModel):
    token: str


class CredentialsRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower().strip()


class CreateUserRequest(CredentialsRequest):
    pass


class LoginRequest(BaseModel):
    # Not EmailStr: a malformed email is just another failed login
    email: str
    password: str


class UpdateUserRequest(CredentialsRequest):
    pass
