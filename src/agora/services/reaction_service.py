"""Like/dislike toggle state machine and per-target aggregation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.orm import Session

from agora.core.errors import StorageError, ValidationError
from agora.db.session import atomic
from agora.models.reaction import REACTION_DISLIKE, REACTION_LIKE, REACTION_TYPES
from agora.repositories.comment_repo import CommentRepository
from agora.repositories.post_repo import PostRepository
from agora.repositories.reaction_repo import ReactionRepository

logger = logging.getLogger(__name__)

__all__ = ["ReactionState", "ReactionTarget", "ReactionCounts", "ReactionService"]


class ReactionState(str, Enum):
    """Where a (user, target) pair currently stands."""

    NONE = "none"
    LIKED = "like"
    DISLIKED = "dislike"

    @classmethod
    def from_type(cls, reaction_type: str | None) -> ReactionState:
        if reaction_type == REACTION_LIKE:
            return cls.LIKED
        if reaction_type == REACTION_DISLIKE:
            return cls.DISLIKED
        return cls.NONE


@dataclass(frozen=True)
class ReactionTarget:
    """Exactly one of a post or a comment."""

    post_id: int | None = None
    comment_id: int | None = None

    @classmethod
    def of(cls, post_id: int | None = None, comment_id: int | None = None) -> ReactionTarget:
        if (post_id is None) == (comment_id is None):
            raise ValidationError("Must provide either post_id or comment_id, but not both")
        return cls(post_id=post_id, comment_id=comment_id)


@dataclass(frozen=True)
class ReactionCounts:
    likes: int = 0
    dislikes: int = 0


class ReactionService:
    """Apply the toggle rules for one user against one target.

    ====================  ==========  ===========
    current \\ requested   like        dislike
    ====================  ==========  ===========
    NONE                  LIKED       DISLIKED
    LIKED                 NONE        DISLIKED
    DISLIKED              LIKED       NONE
    ====================  ==========  ===========
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.reactions = ReactionRepository(db)
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)

    def _ensure_target_exists(self, target: ReactionTarget) -> None:
        if target.post_id is not None:
            self.posts.get(target.post_id)
        else:
            self.comments.get_comment(target.comment_id)

    def toggle(self, user_id: str, target: ReactionTarget, requested_type: str) -> ReactionState:
        """Apply ``requested_type`` and return the resulting state.

        The read of the current row and the write happen in one transaction.
        If a concurrent toggle inserts the row first, the rules are applied
        once more against that row, as if the two requests had run in order.
        """
        if requested_type not in REACTION_TYPES:
            raise ValidationError("Invalid reaction type")
        self._ensure_target_exists(target)

        with atomic(self.db):
            existing = self.reactions.find(
                user_id, post_id=target.post_id, comment_id=target.comment_id
            )
            if existing is None:
                created = self.reactions.add(
                    user_id,
                    requested_type,
                    post_id=target.post_id,
                    comment_id=target.comment_id,
                )
                if created is not None:
                    return ReactionState.from_type(requested_type)
                existing = self.reactions.find(
                    user_id, post_id=target.post_id, comment_id=target.comment_id
                )
                if existing is None:
                    logger.error("Reaction of user %s vanished after a conflict", user_id)
                    raise StorageError()
            if existing.type == requested_type:
                self.reactions.remove(existing)
                return ReactionState.NONE
            self.reactions.set_type(existing, requested_type)
            return ReactionState.from_type(requested_type)

    def count(self, target: ReactionTarget) -> ReactionCounts:
        likes, dislikes = self.reactions.counts(
            post_id=target.post_id, comment_id=target.comment_id
        )
        return ReactionCounts(likes=likes, dislikes=dislikes)

    def state_for(self, user_id: str, target: ReactionTarget) -> ReactionState:
        existing = self.reactions.find(
            user_id, post_id=target.post_id, comment_id=target.comment_id
        )
        return ReactionState.from_type(existing.type if existing is not None else None)
