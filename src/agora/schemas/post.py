# src/agora/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class PostUpdate(BaseModel):
    """Schema for editing the text of an existing post."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=10000)


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    user_id: str
    username: str | None = None
    title: str
    content: str
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime
    category_ids: list[int] = Field(default_factory=list)
    category_names: list[str] = Field(default_factory=list)
