"""Repositories wrapping SQLAlchemy access per aggregate."""

from .category_repo import CategoryRepository
from .comment_repo import CommentRepository, CommentThread
from .post_repo import PostRepository
from .reaction_repo import ReactionRepository
from .session_repo import SessionRepository
from .user_repo import UserRepository

__all__ = [
    "CategoryRepository",
    "CommentRepository", "CommentThread",
    "PostRepository",
    "ReactionRepository",
    "SessionRepository",
    "UserRepository",
]
