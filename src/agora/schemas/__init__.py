# src/agora/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .category import CategoryCreate, CategoryResponse
from .comment import CommentCreate, CommentResponse, ReplyResponse
from .common import MessageResponse
from .post import PostResponse, PostUpdate
from .reaction import ReactionCountsResponse, ReactionToggle, ReactionToggleResponse
from .user import LoginRequest, PublicUserResponse, UserResponse

__all__ = [
    "CategoryCreate", "CategoryResponse",
    "CommentCreate", "CommentResponse", "ReplyResponse",
    "MessageResponse",
    "PostResponse", "PostUpdate",
    "ReactionCountsResponse", "ReactionToggle", "ReactionToggleResponse",
    "LoginRequest", "PublicUserResponse", "UserResponse",
]
