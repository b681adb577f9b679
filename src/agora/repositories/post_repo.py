"""Data access helpers for working with posts."""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from agora.core.errors import NotFound
from agora.models.category import PostCategory
from agora.models.comment import Comment, ReplyComment
from agora.models.post import Post
from agora.models.reaction import REACTION_LIKE, Reaction
from agora.repositories.errors import storage_guard

__all__ = ["PostRepository", "page_offset"]


def page_offset(page: int, page_size: int) -> int:
    """Return the row offset of a 1-based ``page``."""
    return (max(page, 1) - 1) * page_size


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def create(
        self,
        *,
        author_id: str,
        category_ids: Sequence[int],
        title: str,
        content: str,
        image_url: str | None = None,
    ) -> Post:
        """Insert a post plus one association row per category id.

        Both writes are only flushed; the caller owns the transaction so the
        post and its links commit or roll back together.
        """
        post = Post(user_id=author_id, title=title, content=content, image_url=image_url)
        with storage_guard("create post"):
            self.session.add(post)
            self.session.flush()
            for category_id in dict.fromkeys(category_ids):
                self.session.add(PostCategory(post_id=post.id, category_id=category_id))
            self.session.flush()
        return post

    def get(self, post_id: int) -> Post:
        """Return a post by identifier or raise :class:`NotFound`."""
        with storage_guard("fetch post"):
            post = self.session.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    def category_ids_for(self, post_id: int) -> list[int]:
        with storage_guard("fetch post categories"):
            return list(
                self.session.execute(
                    select(PostCategory.category_id).where(PostCategory.post_id == post_id)
                ).scalars()
            )

    def category_ids_for_posts(self, post_ids: Sequence[int]) -> dict[int, list[int]]:
        """Fetch the category ids of a whole page of posts in one query."""
        mapping: dict[int, list[int]] = {post_id: [] for post_id in post_ids}
        if not post_ids:
            return mapping
        with storage_guard("fetch page categories"):
            rows = self.session.execute(
                select(PostCategory.post_id, PostCategory.category_id).where(
                    PostCategory.post_id.in_(list(post_ids))
                )
            ).all()
        grouped: defaultdict[int, list[int]] = defaultdict(list)
        for post_id, category_id in rows:
            grouped[post_id].append(category_id)
        for post_id in mapping:
            mapping[post_id] = grouped.get(post_id, [])
        return mapping

    def list_page(self, page: int, page_size: int) -> list[Post]:
        """Return one page of posts, newest first."""
        stmt = (
            select(Post)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(page_size)
            .offset(page_offset(page, page_size))
        )
        with storage_guard("list posts"):
            return list(self.session.execute(stmt).scalars().unique())

    def list_liked_by_user(self, user_id: str, page: int, page_size: int) -> list[Post]:
        """Return posts ``user_id`` currently likes, most recently liked first."""
        stmt = (
            select(Post)
            .join(Reaction, Reaction.post_id == Post.id)
            .where(Reaction.user_id == user_id, Reaction.type == REACTION_LIKE)
            .order_by(Reaction.created_at.desc(), Reaction.id.desc())
            .limit(page_size)
            .offset(page_offset(page, page_size))
        )
        with storage_guard("list liked posts"):
            return list(self.session.execute(stmt).scalars().unique())

    def update(self, post_id: int, *, title: str, content: str) -> Post:
        post = self.get(post_id)
        post.title = title
        post.content = content
        with storage_guard("update post"):
            self.session.flush()
        return post

    def delete(self, post_id: int) -> None:
        """Delete a post together with its links, comments, replies and reactions.

        Foreign keys cascade too; these statements perform the same cleanup
        explicitly.
        """
        self.get(post_id)
        comment_ids = select(Comment.id).where(Comment.post_id == post_id)
        with storage_guard("delete post"):
            self.session.execute(
                delete(Reaction).where(
                    (Reaction.post_id == post_id) | Reaction.comment_id.in_(comment_ids)
                )
            )
            self.session.execute(
                delete(ReplyComment).where(ReplyComment.parent_comment_id.in_(comment_ids))
            )
            self.session.execute(delete(Comment).where(Comment.post_id == post_id))
            self.session.execute(delete(PostCategory).where(PostCategory.post_id == post_id))
            self.session.execute(delete(Post).where(Post.id == post_id))
