"""Comment and reply Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class ReplyResponse(BaseModel):
    id: int
    user_id: str
    parent_comment_id: int
    content: str
    created_at: datetime
    updated_at: datetime
    username: str | None = None
    avatar_url: str | None = None


class CommentResponse(BaseModel):
    """Top-level comment with its replies, oldest first."""

    id: int
    user_id: str
    post_id: int
    content: str
    created_at: datetime
    updated_at: datetime
    username: str | None = None
    avatar_url: str | None = None
    replies: list[ReplyResponse] = Field(default_factory=list)
