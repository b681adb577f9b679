# src/agora/schemas/reaction.py
"""Reaction-related Pydantic schemas."""

from pydantic import BaseModel, Field


class ReactionToggle(BaseModel):
    """Toggle request. Target and type are checked by the reaction service."""

    post_id: int | None = None
    comment_id: int | None = None
    type: str = Field(..., description="'like' or 'dislike'")


class ReactionCountsResponse(BaseModel):
    likes: int
    dislikes: int


class ReactionToggleResponse(ReactionCountsResponse):
    """Counts after the toggle plus the caller's resulting state."""

    state: str = Field(..., description="'like', 'dislike' or 'none'")
