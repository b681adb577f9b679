"""Tests for session token persistence."""

from datetime import timedelta

from sqlalchemy.orm import Session

from agora.db.time import utcnow
from agora.models import User, UserSession
from agora.repositories.session_repo import SessionRepository


def test_create_and_resolve(db_session: Session, test_user: User) -> None:
    repo = SessionRepository(db_session)
    token = repo.create(test_user.id)

    assert repo.resolve(token, max_age_hours=24) == test_user.id
    assert repo.resolve("", max_age_hours=24) is None
    assert repo.resolve(None, max_age_hours=24) is None
    assert repo.resolve("unknown", max_age_hours=24) is None


def test_resolve_honours_max_age(db_session: Session, test_user: User) -> None:
    db_session.add(
        UserSession(id="two-hours", user_id=test_user.id, created_at=utcnow() - timedelta(hours=2))
    )
    db_session.flush()
    repo = SessionRepository(db_session)

    assert repo.resolve("two-hours", max_age_hours=3) == test_user.id
    assert repo.resolve("two-hours", max_age_hours=1) is None


def test_delete_all_for_user(db_session: Session, test_user: User, other_user: User) -> None:
    repo = SessionRepository(db_session)
    repo.create(test_user.id)
    repo.create(test_user.id)
    keep = repo.create(other_user.id)

    assert repo.delete_all_for_user(test_user.id) == 2
    assert repo.resolve(keep, max_age_hours=24) == other_user.id


def test_delete_unknown_token_is_noop(db_session: Session) -> None:
    SessionRepository(db_session).delete("never-issued")
