"""Category listing and creation endpoints."""

from fastapi import APIRouter, status

from agora.api.v1.dependencies import CurrentUserDep, PostServiceDep
from agora.schemas.category import CategoryCreate, CategoryResponse

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=list[CategoryResponse])
def list_categories(posts: PostServiceDep) -> list[CategoryResponse]:
    return [CategoryResponse.model_validate(c) for c in posts.list_categories()]


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=CategoryResponse)
def create_category(
    payload: CategoryCreate,
    current_user: CurrentUserDep,
    posts: PostServiceDep,
) -> CategoryResponse:
    """Create a category, or return the existing one with the same name."""
    return CategoryResponse.model_validate(posts.create_category(payload.name))
