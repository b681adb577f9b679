"""Post-related endpoints for the forum API."""

import json
from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile, status

from agora.api.v1.dependencies import CurrentUserDep, PaginationDep, PostServiceDep
from agora.core.errors import ValidationError
from agora.schemas.comment import CommentCreate, CommentResponse
from agora.schemas.common import MessageResponse
from agora.schemas.post import PostResponse, PostUpdate

router = APIRouter(prefix="/posts", tags=["posts"])


def _parse_category_names(raw: str) -> list[str]:
    """Decode the ``category_names`` form field, a JSON array of strings."""
    try:
        names = json.loads(raw) if raw else []
    except json.JSONDecodeError as err:
        raise ValidationError("Invalid category format") from err
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise ValidationError("Invalid category format")
    return names


@router.get("/", response_model=list[PostResponse])
def list_posts(pagination: PaginationDep, posts: PostServiceDep) -> list[PostResponse]:
    """List posts, newest first."""
    return posts.list_posts(pagination.page, pagination.page_size)


@router.get("/liked", response_model=list[PostResponse])
def list_liked_posts(
    pagination: PaginationDep,
    current_user: CurrentUserDep,
    posts: PostServiceDep,
) -> list[PostResponse]:
    """List posts the caller likes, most recently liked first."""
    return posts.list_liked_posts(current_user.id, pagination.page, pagination.page_size)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=PostResponse)
def create_post(
    current_user: CurrentUserDep,
    posts: PostServiceDep,
    title: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
    category_names: Annotated[str, Form()] = "",
    image: Annotated[UploadFile | None, File()] = None,
) -> PostResponse:
    """Create a post tagged with one or more categories.

    Categories that do not exist yet are created along with the post.
    """
    names = _parse_category_names(category_names)
    image_bytes = image.file.read() if image is not None and image.filename else None
    return posts.create_post(
        author_id=current_user.id,
        category_names=names,
        title=title,
        content=content,
        image=image_bytes,
    )


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, posts: PostServiceDep) -> PostResponse:
    return posts.get_post(post_id)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    payload: PostUpdate,
    current_user: CurrentUserDep,
    posts: PostServiceDep,
) -> PostResponse:
    return posts.update_post(
        actor_id=current_user.id,
        post_id=post_id,
        title=payload.title,
        content=payload.content,
    )


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    posts: PostServiceDep,
) -> MessageResponse:
    """Delete a post with its comments, replies and reactions."""
    posts.delete_post(actor_id=current_user.id, post_id=post_id)
    return MessageResponse(message="Post deleted")


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
def list_post_comments(post_id: int, posts: PostServiceDep) -> list[CommentResponse]:
    """Return the comment tree of a post, oldest first at both levels."""
    posts.get_post(post_id)
    return posts.get_post_comments(post_id)


@router.post(
    "/{post_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentResponse,
)
def create_comment(
    post_id: int,
    payload: CommentCreate,
    current_user: CurrentUserDep,
    posts: PostServiceDep,
) -> CommentResponse:
    return posts.create_comment(user_id=current_user.id, post_id=post_id, content=payload.content)
