"""Registration, login and session lifecycle for forum members."""
from __future__ import annotations

import functools
import logging

from sqlalchemy.orm import Session

from agora.core.errors import NotFound, StorageError, Unauthenticated, ValidationError
from agora.core.security import hash_password, validate_password_strength, verify_password
from agora.core.settings import Settings, settings as default_settings
from agora.db.session import atomic
from agora.models.user import User
from agora.repositories.session_repo import SessionRepository
from agora.repositories.user_repo import UserRepository
from agora.services.uploads import staged_image
from agora.services.validation import validate_email, validate_username

logger = logging.getLogger(__name__)

__all__ = ["AuthService", "INVALID_CREDENTIALS"]

INVALID_CREDENTIALS = "Invalid credentials"


@functools.cache
def _dummy_hash(rounds: int) -> str:
    """Hash compared against when the identity does not exist, one per cost."""
    return hash_password("not-a-real-password-0", rounds)


class AuthService:
    """Glue between the user directory and the session store."""

    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or default_settings
        self.users = UserRepository(db)
        self.sessions = SessionRepository(db)

    def register(
        self,
        *,
        username: str,
        email: str,
        password: str,
        avatar: bytes | None = None,
    ) -> User:
        """Validate and persist a new member.

        ``avatar`` holds the raw bytes of an uploaded image. It is written to
        disk only after every other field has passed validation.

        Raises:
            ValidationError: Bad username/email format, weak password or an
                unsupported avatar.
            DuplicateIdentity: Username or email already registered.
            StorageError: Any other store failure.
        """
        if not username or not email or not password:
            raise ValidationError("Missing required fields")
        clean_username = validate_username(username)
        clean_email = validate_email(email)
        validate_password_strength(password)

        password_hash = hash_password(password, self.settings.bcrypt_rounds)
        avatar_dir = f"{self.settings.upload_dir}/profiles"
        with staged_image(avatar, "avatar", avatar_dir) as avatar_url, atomic(self.db):
            user = self.users.create(
                username=clean_username,
                email=clean_email,
                password_hash=password_hash,
                avatar_url=avatar_url or self.settings.default_avatar_url,
            )
        logger.info("Registered user %s", user.id)
        return user

    def _burn_password_check(self, password: str) -> None:
        # Unknown identities still pay for one bcrypt comparison.
        verify_password(password, _dummy_hash(self.settings.bcrypt_rounds))

    def authenticate(self, *, email: str = "", username: str = "", password: str = "") -> User:
        """Resolve credentials to a user.

        Email wins when both identifiers are supplied. Unknown identities and
        wrong passwords raise the same :class:`Unauthenticated` error.
        """
        if not password:
            raise ValidationError("Password cannot be empty")
        if not email and not username:
            raise ValidationError("Email or username is required")

        try:
            if email:
                try:
                    identifier = validate_email(email)
                except ValidationError as err:
                    raise ValidationError("Invalid email format") from err
                user = self.users.get_by_email(identifier)
            else:
                try:
                    identifier = validate_username(username)
                except ValidationError as err:
                    raise ValidationError("Invalid username format") from err
                user = self.users.get_by_username(identifier)
        except NotFound as err:
            self._burn_password_check(password)
            raise Unauthenticated(INVALID_CREDENTIALS) from err

        if not verify_password(password, user.password_hash):
            raise Unauthenticated(INVALID_CREDENTIALS)
        return user

    def login(self, *, email: str = "", username: str = "", password: str = "") -> tuple[User, str]:
        """Authenticate and open the user's only session.

        Existing sessions are removed first. Failing to remove them is logged
        and does not block the login.
        """
        user = self.authenticate(email=email, username=username, password=password)
        try:
            with atomic(self.db):
                self.sessions.delete_all_for_user(user.id)
        except StorageError:
            logger.warning("Failed to delete existing sessions for user %s", user.id)

        with atomic(self.db):
            token = self.sessions.create(user.id)
        return user, token

    def logout(self, token: str | None) -> None:
        """Drop the session behind ``token``; missing or stale tokens are fine."""
        if not token:
            return
        with atomic(self.db):
            self.sessions.delete(token)

    def resolve_user_id(self, token: str | None) -> str | None:
        return self.sessions.resolve(token, self.settings.session_ttl_hours)

    def current_user(self, token: str | None) -> User:
        """Return the user owning a live session or raise :class:`Unauthenticated`."""
        user_id = self.resolve_user_id(token)
        if user_id is None:
            raise Unauthenticated()
        try:
            return self.users.get_by_id(user_id)
        except NotFound as err:
            raise Unauthenticated() from err

    def purge_expired_sessions(self, max_age_hours: float | None = None) -> int:
        hours = max_age_hours if max_age_hours is not None else self.settings.session_ttl_hours
        with atomic(self.db):
            removed = self.sessions.purge_expired(hours)
        return removed
