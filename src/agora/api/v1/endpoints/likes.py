"""Like/dislike endpoints for posts and comments."""

from typing import Annotated

from fastapi import APIRouter, Query

from agora.api.v1.dependencies import CurrentUserDep, ReactionServiceDep
from agora.schemas.reaction import (
    ReactionCountsResponse,
    ReactionToggle,
    ReactionToggleResponse,
)
from agora.services.reaction_service import ReactionTarget

router = APIRouter(prefix="/likes", tags=["likes"])


@router.post("/toggle", response_model=ReactionToggleResponse)
def toggle_reaction(
    payload: ReactionToggle,
    current_user: CurrentUserDep,
    reactions: ReactionServiceDep,
) -> ReactionToggleResponse:
    """Toggle a like or dislike and return the caller's state with fresh counts."""
    target = ReactionTarget.of(payload.post_id, payload.comment_id)
    state = reactions.toggle(current_user.id, target, payload.type)
    counts = reactions.count(target)
    return ReactionToggleResponse(
        state=state.value,
        likes=counts.likes,
        dislikes=counts.dislikes,
    )


@router.get("/reactions", response_model=ReactionCountsResponse)
def get_reactions(
    reactions: ReactionServiceDep,
    post_id: Annotated[int | None, Query()] = None,
    comment_id: Annotated[int | None, Query()] = None,
) -> ReactionCountsResponse:
    counts = reactions.count(ReactionTarget.of(post_id, comment_id))
    return ReactionCountsResponse(likes=counts.likes, dislikes=counts.dislikes)
