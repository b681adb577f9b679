# src/agora/models/__init__.py
"""SQLAlchemy models for the Agora forum."""

from .category import Category, PostCategory
from .comment import Comment, ReplyComment
from .post import Post
from .reaction import Reaction
from .user import User, UserSession

__all__ = [
    "Category", "PostCategory",
    "Comment", "ReplyComment",
    "Post",
    "Reaction",
    "User", "UserSession",
]
