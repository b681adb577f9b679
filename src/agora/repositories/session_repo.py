"""Persistence of login sessions."""
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from agora.core.security import generate_session_token
from agora.db.time import hours_ago, utcnow
from agora.models.user import UserSession
from agora.repositories.errors import storage_guard

__all__ = ["SessionRepository"]


class SessionRepository:
    """Issue, resolve and revoke opaque session tokens.

    The single-session policy is applied by the caller: login deletes every
    row of the user before calling :meth:`create`.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, user_id: str) -> str:
        """Persist a fresh token for ``user_id`` and return it."""
        token = generate_session_token()
        with storage_guard("create session"):
            self.session.add(UserSession(id=token, user_id=user_id, created_at=utcnow()))
            self.session.flush()
        return token

    def resolve(self, token: str | None, max_age_hours: float) -> str | None:
        """Return the owner of ``token``, or None if it is missing, unknown or expired."""
        if not token:
            return None
        with storage_guard("resolve session"):
            return self.session.execute(
                select(UserSession.user_id).where(
                    UserSession.id == token,
                    UserSession.created_at > hours_ago(max_age_hours),
                )
            ).scalar_one_or_none()

    def delete(self, token: str) -> None:
        """Remove one session. Deleting an unknown token is not an error."""
        with storage_guard("delete session"):
            self.session.execute(delete(UserSession).where(UserSession.id == token))

    def delete_all_for_user(self, user_id: str) -> int:
        with storage_guard("delete user sessions"):
            result = self.session.execute(
                delete(UserSession).where(UserSession.user_id == user_id)
            )
        return result.rowcount or 0

    def purge_expired(self, max_age_hours: float) -> int:
        """Delete sessions created at or before the cutoff; returns the number removed.

        Rows inserted concurrently are newer than the cutoff and are left alone.
        """
        with storage_guard("purge expired sessions"):
            result = self.session.execute(
                delete(UserSession).where(UserSession.created_at <= hours_ago(max_age_hours))
            )
        return result.rowcount or 0
