"""Data access helpers for comments and replies."""
from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from agora.core.errors import NotFound
from agora.models.comment import Comment, ReplyComment
from agora.models.post import Post
from agora.models.reaction import Reaction
from agora.repositories.errors import storage_guard

__all__ = ["CommentRepository", "CommentThread"]


@dataclass
class CommentThread:
    """A top-level comment with its replies in creation order."""

    comment: Comment
    replies: list[ReplyComment] = field(default_factory=list)


class CommentRepository:
    """Two-level comment trees attached to posts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create_comment(self, *, user_id: str, post_id: int, content: str) -> Comment:
        with storage_guard("create comment"):
            if self.session.get(Post, post_id) is None:
                raise NotFound("Post not found")
            comment = Comment(user_id=user_id, post_id=post_id, content=content)
            self.session.add(comment)
            self.session.flush()
        return comment

    def create_reply(self, *, user_id: str, parent_comment_id: int, content: str) -> ReplyComment:
        """Attach a reply to a top-level comment.

        Only ids of ``comments`` rows qualify as parents, so a reply can never
        itself be replied to.
        """
        with storage_guard("create reply"):
            if self.session.get(Comment, parent_comment_id) is None:
                raise NotFound("Comment not found")
            reply = ReplyComment(
                user_id=user_id,
                parent_comment_id=parent_comment_id,
                content=content,
            )
            self.session.add(reply)
            self.session.flush()
        return reply

    def get_comment(self, comment_id: int) -> Comment:
        with storage_guard("fetch comment"):
            comment = self.session.get(Comment, comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        return comment

    def delete_comment(self, comment_id: int) -> None:
        """Delete a comment with its replies and the reactions on it."""
        self.get_comment(comment_id)
        with storage_guard("delete comment"):
            self.session.execute(delete(Reaction).where(Reaction.comment_id == comment_id))
            self.session.execute(
                delete(ReplyComment).where(ReplyComment.parent_comment_id == comment_id)
            )
            self.session.execute(delete(Comment).where(Comment.id == comment_id))

    def list_for_post(self, post_id: int) -> list[CommentThread]:
        """Return the comment tree of a post using exactly two queries.

        The first query loads the top-level comments oldest first; the second
        loads every reply whose parent belongs to the post, also oldest first,
        and each reply is appended to its parent's thread.
        """
        with storage_guard("list comments"):
            comments = self.session.execute(
                select(Comment)
                .where(Comment.post_id == post_id)
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            ).scalars().all()
            threads = [CommentThread(comment=comment) for comment in comments]
            if not threads:
                return threads

            parent_ids = select(Comment.id).where(Comment.post_id == post_id)
            replies = self.session.execute(
                select(ReplyComment)
                .where(ReplyComment.parent_comment_id.in_(parent_ids))
                .order_by(ReplyComment.created_at.asc(), ReplyComment.id.asc())
            ).scalars().all()

        by_id = {thread.comment.id: thread for thread in threads}
        for reply in replies:
            thread = by_id.get(reply.parent_comment_id)
            if thread is not None:
                thread.replies.append(reply)
        return threads
