"""Registration, login and logout endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, Response, UploadFile, status

from agora.api.v1.dependencies import AuthServiceDep, CurrentUserDep, SessionTokenDep
from agora.core.settings import settings
from agora.schemas.common import MessageResponse
from agora.schemas.user import LoginRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
)
def register_user(
    auth: AuthServiceDep,
    username: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    avatar: Annotated[UploadFile | None, File()] = None,
) -> MessageResponse:
    """Create an account; an optional avatar image may be attached."""
    avatar_bytes = None
    if avatar is not None and avatar.filename:
        avatar_bytes = avatar.file.read()
    else:
        logger.debug("No avatar uploaded, using the default")

    auth.register(username=username, email=email, password=password, avatar=avatar_bytes)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=MessageResponse)
def login_user(
    credentials: LoginRequest,
    response: Response,
    auth: AuthServiceDep,
) -> MessageResponse:
    """Authenticate by email or username and open a cookie session.

    Any earlier session of the same user stops working.
    """
    _, token = auth.login(
        email=credentials.email,
        username=credentials.username,
        password=credentials.password,
    )
    _set_session_cookie(response, token)
    return MessageResponse(message="Logged in")


@router.post("/logout", response_model=MessageResponse)
def logout_user(
    response: Response,
    token: SessionTokenDep,
    auth: AuthServiceDep,
) -> MessageResponse:
    auth.logout(token)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: CurrentUserDep) -> UserResponse:
    """Return the profile of the logged-in user."""
    return UserResponse.model_validate(current_user)
