"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Cookie, Depends, Query
from sqlalchemy.orm import Session

from agora.core.settings import settings
from agora.db.session import get_db
from agora.models import User
from agora.services.auth_service import AuthService
from agora.services.post_service import PostService
from agora.services.reaction_service import ReactionService

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_auth_service(db: SessionDep) -> AuthService:
    """Return an auth service bound to the request's DB session."""
    return AuthService(db)


def get_post_service(db: SessionDep) -> PostService:
    """Return a post service bound to the request's DB session."""
    return PostService(db)


def get_reaction_service(db: SessionDep) -> ReactionService:
    """Return a reaction service bound to the request's DB session."""
    return ReactionService(db)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
PostServiceDep = Annotated[PostService, Depends(get_post_service)]
ReactionServiceDep = Annotated[ReactionService, Depends(get_reaction_service)]


def get_session_token(
    session_id: Annotated[str | None, Cookie(alias=settings.session_cookie_name)] = None,
) -> str | None:
    """Read the opaque session token from the request cookie."""
    return session_id or None


SessionTokenDep = Annotated[str | None, Depends(get_session_token)]


def get_current_user(token: SessionTokenDep, auth: AuthServiceDep) -> User:
    """Get the user behind the session cookie.

    Raises:
        Unauthenticated: If the cookie is missing, unknown or expired.
    """
    return auth.current_user(token)


CurrentUserDep = Annotated[User, Depends(get_current_user)]


class Pagination:
    """``page``/``limit`` query parameters clamped to the configured bounds."""

    def __init__(
        self,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int | None, Query(ge=1)] = None,
    ) -> None:
        self.page = page
        self.page_size = min(limit or settings.default_page_size, settings.max_page_size)


PaginationDep = Annotated[Pagination, Depends()]
