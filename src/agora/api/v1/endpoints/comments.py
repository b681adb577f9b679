"""Reply and comment deletion endpoints."""

from fastapi import APIRouter, status

from agora.api.v1.dependencies import CurrentUserDep, PostServiceDep
from agora.schemas.comment import CommentCreate, ReplyResponse
from agora.schemas.common import MessageResponse

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post(
    "/{comment_id}/replies",
    status_code=status.HTTP_201_CREATED,
    response_model=ReplyResponse,
)
def create_reply(
    comment_id: int,
    payload: CommentCreate,
    current_user: CurrentUserDep,
    posts: PostServiceDep,
) -> ReplyResponse:
    """Reply to a top-level comment. Replies cannot be replied to."""
    return posts.create_reply(
        user_id=current_user.id,
        parent_comment_id=comment_id,
        content=payload.content,
    )


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    posts: PostServiceDep,
) -> MessageResponse:
    posts.delete_comment(actor_id=current_user.id, comment_id=comment_id)
    return MessageResponse(message="Comment deleted")
