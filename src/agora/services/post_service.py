"""Service-level helpers for posts, categories and comment threads."""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sqlalchemy.orm import Session

from agora.core.errors import StorageError, Unauthorized, ValidationError
from agora.db.session import atomic
from agora.models.category import Category
from agora.models.comment import Comment, ReplyComment
from agora.models.post import Post
from agora.repositories.category_repo import CategoryRepository
from agora.repositories.comment_repo import CommentRepository, CommentThread
from agora.repositories.post_repo import PostRepository
from agora.schemas.comment import CommentResponse, ReplyResponse
from agora.schemas.post import PostResponse
from agora.services.uploads import staged_image
from agora.services.validation import sanitize_string

logger = logging.getLogger(__name__)

__all__ = [
    "PostService",
    "category_names_or_empty",
    "to_post_response",
    "to_comment_response",
    "to_reply_response",
]

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 10000
COMMENT_MAX_LENGTH = 2000


def category_names_or_empty(
    lookup: Callable[[], list[str]],
    post_id: int | None = None,
) -> list[str]:
    """Run a category-name lookup, degrading to ``[]`` if the store fails.

    Names are display data only, so a failure is logged rather than failing
    the request.
    """
    try:
        return lookup()
    except StorageError:
        logger.warning("Failed to get category names for post %s", post_id)
        return []


def to_post_response(
    post: Post,
    category_ids: Sequence[int],
    category_names: Sequence[str],
) -> PostResponse:
    """Convert a Post ORM instance to an API schema."""
    return PostResponse(
        id=post.id,
        user_id=post.user_id,
        username=post.author.username if post.author is not None else None,
        title=post.title,
        content=post.content,
        image_url=post.image_url,
        created_at=post.created_at,
        updated_at=post.updated_at,
        category_ids=list(category_ids),
        category_names=list(category_names),
    )


def to_reply_response(reply: ReplyComment) -> ReplyResponse:
    author = reply.author
    return ReplyResponse(
        id=reply.id,
        user_id=reply.user_id,
        parent_comment_id=reply.parent_comment_id,
        content=reply.content,
        created_at=reply.created_at,
        updated_at=reply.updated_at,
        username=author.username if author is not None else None,
        avatar_url=author.avatar_url if author is not None else None,
    )


def to_comment_response(comment: Comment, replies: Sequence[ReplyComment] = ()) -> CommentResponse:
    author = comment.author
    return CommentResponse(
        id=comment.id,
        user_id=comment.user_id,
        post_id=comment.post_id,
        content=comment.content,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        username=author.username if author is not None else None,
        avatar_url=author.avatar_url if author is not None else None,
        replies=[to_reply_response(reply) for reply in replies],
    )


class PostService:
    """Posts with their categories, plus the comment threads below them."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.posts = PostRepository(db)
        self.categories = CategoryRepository(db)
        self.comments = CommentRepository(db)

    # -- posts -----------------------------------------------------------

    def create_post(
        self,
        *,
        author_id: str,
        category_names: Sequence[str],
        title: str,
        content: str,
        image: bytes | None = None,
    ) -> PostResponse:
        """Create a post and link it to its categories in one transaction.

        Unknown category names are created on the fly. If any step fails the
        post, the new categories and the links are all rolled back, and the
        uploaded image is removed from disk. The image is only written once
        the text fields and categories have been validated.
        """
        clean_title = sanitize_string(title, TITLE_MAX_LENGTH, "title")
        clean_content = sanitize_string(content, CONTENT_MAX_LENGTH, "content")
        if not category_names:
            raise ValidationError("Please select at least one category")

        with staged_image(image, "post") as image_url, atomic(self.db):
            category_ids = self.categories.resolve_or_create(category_names)
            post = self.posts.create(
                author_id=author_id,
                category_ids=category_ids,
                title=clean_title,
                content=clean_content,
                image_url=image_url,
            )
        # Repeated names resolve to the same id.
        category_ids = list(dict.fromkeys(category_ids))
        names = category_names_or_empty(
            lambda: self.categories.names_for_ids(category_ids), post.id
        )
        return to_post_response(post, category_ids, names)

    def get_post(self, post_id: int) -> PostResponse:
        post = self.posts.get(post_id)
        category_ids = self.posts.category_ids_for(post_id)
        names = category_names_or_empty(
            lambda: self.categories.names_for_ids(category_ids), post_id
        )
        return to_post_response(post, category_ids, names)

    def _assemble_page(self, posts: list[Post]) -> list[PostResponse]:
        """Attach categories to a page of posts without one query per post."""
        if not posts:
            return []
        post_ids = [post.id for post in posts]
        ids_by_post = self.posts.category_ids_for_posts(post_ids)
        all_ids = [cid for ids in ids_by_post.values() for cid in ids]
        try:
            name_map = self.categories.name_map(all_ids)
        except StorageError:
            logger.warning("Failed to get category names for a page of %d posts", len(posts))
            name_map = {}

        page: list[PostResponse] = []
        for post in posts:
            category_ids = ids_by_post.get(post.id, [])
            names = sorted(name_map[cid] for cid in category_ids if cid in name_map)
            page.append(to_post_response(post, category_ids, names))
        return page

    def list_posts(self, page: int, page_size: int) -> list[PostResponse]:
        return self._assemble_page(self.posts.list_page(page, page_size))

    def list_liked_posts(self, user_id: str, page: int, page_size: int) -> list[PostResponse]:
        return self._assemble_page(self.posts.list_liked_by_user(user_id, page, page_size))

    def update_post(self, *, actor_id: str, post_id: int, title: str, content: str) -> PostResponse:
        post = self.posts.get(post_id)
        if post.user_id != actor_id:
            raise Unauthorized("You can only edit your own posts")
        clean_title = sanitize_string(title, TITLE_MAX_LENGTH, "title")
        clean_content = sanitize_string(content, CONTENT_MAX_LENGTH, "content")
        with atomic(self.db):
            self.posts.update(post_id, title=clean_title, content=clean_content)
        return self.get_post(post_id)

    def delete_post(self, *, actor_id: str, post_id: int) -> None:
        post = self.posts.get(post_id)
        if post.user_id != actor_id:
            raise Unauthorized("You can only delete your own posts")
        with atomic(self.db):
            self.posts.delete(post_id)

    # -- categories ------------------------------------------------------

    def list_categories(self) -> list[Category]:
        return self.categories.list_all()

    def create_category(self, name: str) -> Category:
        with atomic(self.db):
            category = self.categories.create(name)
        return category

    # -- comments --------------------------------------------------------

    def create_comment(self, *, user_id: str, post_id: int, content: str) -> CommentResponse:
        clean = sanitize_string(content, COMMENT_MAX_LENGTH, "content")
        with atomic(self.db):
            comment = self.comments.create_comment(user_id=user_id, post_id=post_id, content=clean)
        return to_comment_response(comment)

    def create_reply(self, *, user_id: str, parent_comment_id: int, content: str) -> ReplyResponse:
        clean = sanitize_string(content, COMMENT_MAX_LENGTH, "content")
        with atomic(self.db):
            reply = self.comments.create_reply(
                user_id=user_id,
                parent_comment_id=parent_comment_id,
                content=clean,
            )
        return to_reply_response(reply)

    def delete_comment(self, *, actor_id: str, comment_id: int) -> None:
        comment = self.comments.get_comment(comment_id)
        if comment.user_id != actor_id:
            raise Unauthorized("You can only delete your own comments")
        with atomic(self.db):
            self.comments.delete_comment(comment_id)

    def get_post_comments(self, post_id: int) -> list[CommentResponse]:
        threads: list[CommentThread] = self.comments.list_for_post(post_id)
        return [to_comment_response(thread.comment, thread.replies) for thread in threads]
