"""Data access helpers for forum accounts."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agora.core.errors import DuplicateIdentity, NotFound
from agora.models.user import User
from agora.repositories.errors import is_unique_violation, storage_guard

__all__ = ["UserRepository"]


class UserRepository:
    """Lookup and creation of users; uniqueness is left to the store."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        avatar_url: str,
    ) -> User:
        """Insert a new user and return the persisted ORM instance.

        Raises:
            DuplicateIdentity: If the username or email is already registered.
            StorageError: On any other store failure.
        """
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            avatar_url=avatar_url,
        )
        with storage_guard("create user"):
            try:
                self.session.add(user)
                self.session.flush()
            except IntegrityError as err:
                if is_unique_violation(err):
                    raise DuplicateIdentity() from err
                raise
        return user

    def _get_one(self, action: str, *criteria) -> User:
        with storage_guard(action):
            user = self.session.execute(select(User).where(*criteria)).scalars().first()
        if user is None:
            raise NotFound("User not found")
        return user

    def get_by_id(self, user_id: str) -> User:
        return self._get_one("fetch user by id", User.id == user_id)

    def get_by_username(self, username: str) -> User:
        return self._get_one("fetch user by username", User.username == username)

    def get_by_email(self, email: str) -> User:
        return self._get_one("fetch user by email", User.email == email)
