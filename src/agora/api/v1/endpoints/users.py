"""Public user profile endpoints."""

from fastapi import APIRouter

from agora.api.v1.dependencies import AuthServiceDep
from agora.schemas.user import PublicUserResponse
from agora.services.validation import validate_user_id

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=PublicUserResponse)
def get_user(user_id: str, auth: AuthServiceDep) -> PublicUserResponse:
    """Look up a post or comment owner by id."""
    user = auth.users.get_by_id(validate_user_id(user_id))
    return PublicUserResponse.model_validate(user)
