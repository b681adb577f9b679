"""Data access helpers for like/dislike rows."""
from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agora.models.reaction import REACTION_DISLIKE, REACTION_LIKE, Reaction
from agora.repositories.errors import is_unique_violation, storage_guard

__all__ = ["ReactionRepository"]


class ReactionRepository:
    """Row-level access to reactions keyed by (user, post) or (user, comment)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @staticmethod
    def _target_clause(post_id: int | None, comment_id: int | None):
        if post_id is not None:
            return Reaction.post_id == post_id
        return Reaction.comment_id == comment_id

    def find(self, user_id: str, *, post_id: int | None, comment_id: int | None) -> Reaction | None:
        with storage_guard("fetch reaction"):
            return self.session.execute(
                select(Reaction).where(
                    Reaction.user_id == user_id,
                    self._target_clause(post_id, comment_id),
                )
            ).scalar_one_or_none()

    def add(
        self,
        user_id: str,
        reaction_type: str,
        *,
        post_id: int | None,
        comment_id: int | None,
    ) -> Reaction | None:
        """Insert a reaction row.

        Returns None when the (user, target) pair already has a row, which
        happens when another writer inserted it after the caller looked.
        """
        reaction = Reaction(
            user_id=user_id,
            post_id=post_id,
            comment_id=comment_id,
            type=reaction_type,
        )
        with storage_guard("insert reaction"):
            try:
                with self.session.begin_nested():
                    self.session.add(reaction)
                    self.session.flush()
            except IntegrityError as err:
                if not is_unique_violation(err):
                    raise
                return None
        return reaction

    def remove(self, reaction: Reaction) -> None:
        with storage_guard("delete reaction"):
            self.session.execute(delete(Reaction).where(Reaction.id == reaction.id))

    def set_type(self, reaction: Reaction, reaction_type: str) -> Reaction:
        reaction.type = reaction_type
        with storage_guard("update reaction"):
            self.session.flush()
        return reaction

    def counts(self, *, post_id: int | None, comment_id: int | None) -> tuple[int, int]:
        """Return ``(likes, dislikes)`` for the target; missing rows count as zero."""
        with storage_guard("count reactions"):
            rows = self.session.execute(
                select(Reaction.type, func.count())
                .where(self._target_clause(post_id, comment_id))
                .group_by(Reaction.type)
            ).all()
        totals = {reaction_type: count for reaction_type, count in rows}
        return totals.get(REACTION_LIKE, 0), totals.get(REACTION_DISLIKE, 0)
