"""Tests for registration, login and session resolution."""

from datetime import timedelta

import bcrypt
import pytest
from sqlalchemy.orm import Session

from agora.core.errors import (
    DuplicateIdentity,
    PasswordPolicyError,
    StorageError,
    Unauthenticated,
    ValidationError,
)
from agora.core.security import verify_password
from agora.core.settings import settings
from agora.db.time import utcnow
from agora.models import User, UserSession
from agora.repositories.session_repo import SessionRepository
from agora.services.auth_service import INVALID_CREDENTIALS, AuthService, _dummy_hash
from tests.conftest import TEST_PASSWORD, png_bytes, stored_files


@pytest.fixture()
def auth(db_session: Session) -> AuthService:
    return AuthService(db_session)


def test_register_hashes_password_and_applies_default_avatar(auth: AuthService) -> None:
    user = auth.register(username="carol", email="Carol@Example.com", password="pass-word-1")

    assert user.id
    assert user.email == "carol@example.com"
    assert user.avatar_url == settings.default_avatar_url
    assert user.password_hash != "pass-word-1"
    assert verify_password("pass-word-1", user.password_hash)


def test_register_duplicate_username_or_email(auth: AuthService) -> None:
    auth.register(username="carol", email="carol@example.com", password="pass-word-1")

    with pytest.raises(DuplicateIdentity):
        auth.register(username="carol", email="other@example.com", password="pass-word-1")
    with pytest.raises(DuplicateIdentity):
        auth.register(username="carol2", email="carol@example.com", password="pass-word-1")


def test_register_state_unchanged_after_duplicate(auth: AuthService, db_session: Session) -> None:
    auth.register(username="carol", email="carol@example.com", password="pass-word-1")
    with pytest.raises(DuplicateIdentity):
        auth.register(username="carol", email="carol@example.com", password="pass-word-2")

    assert db_session.query(User).filter_by(username="carol").count() == 1


@pytest.mark.parametrize(
    ("username", "email", "password", "error"),
    [
        ("", "x@example.com", "pass-word-1", ValidationError),
        ("dave", "", "pass-word-1", ValidationError),
        ("dave", "x@example.com", "", ValidationError),
        ("dave smith", "x@example.com", "pass-word-1", ValidationError),
        ("d" * 31, "x@example.com", "pass-word-1", ValidationError),
        ("dave", "not-an-email", "pass-word-1", ValidationError),
        ("dave", "x@example.com", "weak", PasswordPolicyError),
    ],
)
def test_register_validation_runs_before_store(
    auth: AuthService,
    db_session: Session,
    username: str,
    email: str,
    password: str,
    error: type[Exception],
) -> None:
    with pytest.raises(error):
        auth.register(username=username, email=email, password=password)
    assert db_session.query(User).count() == 0


def test_authenticate_by_email_or_username(auth: AuthService, test_user: User) -> None:
    assert auth.authenticate(email=test_user.email, password=TEST_PASSWORD).id == test_user.id
    assert auth.authenticate(username=test_user.username, password=TEST_PASSWORD).id == test_user.id


def test_authenticate_prefers_email(auth: AuthService, test_user: User, other_user: User) -> None:
    user = auth.authenticate(
        email=test_user.email,
        username=other_user.username,
        password=TEST_PASSWORD,
    )
    assert user.id == test_user.id


def test_unknown_identity_and_wrong_password_look_the_same(auth: AuthService, test_user: User) -> None:
    with pytest.raises(Unauthenticated) as unknown:
        auth.authenticate(email="ghost@example.com", password=TEST_PASSWORD)
    with pytest.raises(Unauthenticated) as wrong:
        auth.authenticate(email=test_user.email, password="wrong-pass-1")

    assert unknown.value.detail == wrong.value.detail == INVALID_CREDENTIALS


def test_unknown_identity_does_the_same_bcrypt_work_as_wrong_password(
    db_session: Session, test_user: User, mocker
) -> None:
    _dummy_hash(settings.bcrypt_rounds)
    hashpw = mocker.spy(bcrypt, "hashpw")
    checkpw = mocker.spy(bcrypt, "checkpw")

    # A fresh service per attempt, as each request gets its own.
    with pytest.raises(Unauthenticated):
        AuthService(db_session).authenticate(email="ghost@example.com", password="wrong-pass-1")
    unknown_calls = (hashpw.call_count, checkpw.call_count)

    with pytest.raises(Unauthenticated):
        AuthService(db_session).authenticate(email=test_user.email, password="wrong-pass-1")
    wrong_calls = (hashpw.call_count - unknown_calls[0], checkpw.call_count - unknown_calls[1])

    assert unknown_calls == wrong_calls == (0, 1)


def test_register_with_avatar_stores_file_after_validation(
    auth: AuthService, db_session: Session, upload_dir: str
) -> None:
    with pytest.raises(PasswordPolicyError):
        auth.register(username="dave", email="dave@example.com", password="weak", avatar=png_bytes())
    assert stored_files(upload_dir) == []

    user = auth.register(
        username="dave", email="dave@example.com", password="pass-word-1", avatar=png_bytes()
    )
    stored = stored_files(upload_dir)
    assert len(stored) == 1
    assert user.avatar_url.endswith(stored[0].name)


def test_register_removes_avatar_when_store_fails(
    auth: AuthService, db_session: Session, upload_dir: str, mocker
) -> None:
    mocker.patch.object(auth.users, "create", side_effect=StorageError())

    with pytest.raises(StorageError):
        auth.register(
            username="dave", email="dave@example.com", password="pass-word-1", avatar=png_bytes()
        )

    assert stored_files(upload_dir) == []
    assert db_session.query(User).count() == 0


def test_authenticate_requires_password_then_identifier(auth: AuthService) -> None:
    with pytest.raises(ValidationError, match="Password"):
        auth.authenticate(email="", username="", password="")
    with pytest.raises(ValidationError, match="Email or username"):
        auth.authenticate(password="pass-word-1")
    with pytest.raises(ValidationError, match="Invalid email format"):
        auth.authenticate(email="nope", password="pass-word-1")


def test_second_login_invalidates_first(auth: AuthService, test_user: User) -> None:
    _, first = auth.login(email=test_user.email, password=TEST_PASSWORD)
    _, second = auth.login(email=test_user.email, password=TEST_PASSWORD)

    assert first != second
    assert auth.resolve_user_id(first) is None
    assert auth.resolve_user_id(second) == test_user.id


def test_login_continues_when_session_cleanup_fails(
    auth: AuthService, test_user: User, mocker
) -> None:
    mocker.patch.object(auth.sessions, "delete_all_for_user", side_effect=StorageError())

    _, token = auth.login(email=test_user.email, password=TEST_PASSWORD)

    assert auth.resolve_user_id(token) == test_user.id


def test_logout_is_idempotent(auth: AuthService, test_user: User) -> None:
    _, token = auth.login(email=test_user.email, password=TEST_PASSWORD)

    auth.logout(token)
    auth.logout(token)
    auth.logout(None)

    assert auth.resolve_user_id(token) is None


def test_expired_session_does_not_resolve(
    auth: AuthService, db_session: Session, test_user: User
) -> None:
    stale = UserSession(
        id="stale-token",
        user_id=test_user.id,
        created_at=utcnow() - timedelta(hours=settings.session_ttl_hours, minutes=1),
    )
    db_session.add(stale)
    db_session.commit()

    assert auth.resolve_user_id("stale-token") is None
    with pytest.raises(Unauthenticated):
        auth.current_user("stale-token")


def test_current_user_rejects_missing_token(auth: AuthService) -> None:
    with pytest.raises(Unauthenticated):
        auth.current_user(None)
    with pytest.raises(Unauthenticated):
        auth.current_user("unknown")


def test_purge_expired_sessions_keeps_live_ones(
    auth: AuthService, db_session: Session, test_user: User, other_user: User
) -> None:
    old = utcnow() - timedelta(hours=settings.session_ttl_hours + 1)
    db_session.add(UserSession(id="old-token", user_id=test_user.id, created_at=old))
    db_session.commit()
    live = SessionRepository(db_session).create(other_user.id)
    db_session.commit()

    assert auth.purge_expired_sessions() == 1
    assert auth.resolve_user_id(live) == other_user.id
    assert db_session.get(UserSession, "old-token") is None
