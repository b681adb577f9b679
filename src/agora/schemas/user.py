"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login; exactly one identifier is used, email first."""

    email: str = Field("", description="Registered email address")
    username: str = Field("", description="Registered username")
    password: str = Field("", description="Plaintext password")


class UserResponse(BaseModel):
    """Profile of a forum member. Never carries the password hash."""

    id: str
    username: str
    email: str
    avatar_url: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicUserResponse(BaseModel):
    """Profile shown to other members (no email)."""

    id: str
    username: str
    avatar_url: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
