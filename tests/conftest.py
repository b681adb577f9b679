from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from pathlib import Path

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_PURGE_ENABLED"] = "false"

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Connection, Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from agora.core.security import hash_password  # noqa: E402
from agora.core.settings import settings  # noqa: E402
from agora.db.session import Base, configure_sqlite  # noqa: E402
from agora.db.session import get_db as app_get_session  # noqa: E402
from agora.main import app as fastapi_app  # noqa: E402
from agora.models import Category, Comment, Post, PostCategory, User  # noqa: E402

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-42"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def connection(engine: Engine) -> Iterator[Connection]:
    """One connection per test whose outer transaction is always rolled back."""
    connection = engine.connect()
    transaction = connection.begin()
    try:
        yield connection
    finally:
        if transaction.is_active:
            transaction.rollback()
        connection.close()


@pytest.fixture()
def session_factory(connection: Connection) -> Callable[[], Session]:
    """Sessions whose commits only release a SAVEPOINT on the test connection."""
    return sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )


@pytest.fixture()
def db_session(session_factory: Callable[[], Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch) -> str:
    """Keep uploaded files inside the test's temporary directory."""
    directory = str(tmp_path / "static")
    monkeypatch.setattr(settings, "upload_dir", directory)
    return directory


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def make_user(db: Session, username: str | None = None, password: str = TEST_PASSWORD) -> User:
    """Persist a user directly, bypassing the registration endpoint."""
    suffix = next(_USER_COUNTER)
    username = username or f"user{suffix}"
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(password),
        avatar_url=settings.default_avatar_url,
    )
    db.add(user)
    db.commit()
    return user


def make_post(
    db: Session,
    author: User,
    title: str = "Test post",
    categories: tuple[str, ...] = ("general",),
) -> Post:
    post = Post(user_id=author.id, title=title, content=f"{title} body")
    db.add(post)
    db.flush()
    for name in categories:
        category = db.query(Category).filter_by(name=name).first()
        if category is None:
            category = Category(name=name)
            db.add(category)
            db.flush()
        db.add(PostCategory(post_id=post.id, category_id=category.id))
    db.commit()
    return post


def login(client: TestClient, user: User, password: str = TEST_PASSWORD) -> TestClient:
    response = client.post(
        "/api/v1/auth/login",
        json={"email": user.email, "password": password},
    )
    assert response.status_code == 200, response.text
    return client


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return make_user(db_session, "alice")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return make_user(db_session, "bob")


@pytest.fixture()
def auth_client(app: FastAPI, test_user: User) -> Iterator[TestClient]:
    """Client holding a session cookie for ``test_user``."""
    with TestClient(app) as test_client:
        yield login(test_client, test_user)


@pytest.fixture()
def other_auth_client(app: FastAPI, other_user: User) -> Iterator[TestClient]:
    """Client holding a session cookie for ``other_user``."""
    with TestClient(app) as test_client:
        yield login(test_client, other_user)


@pytest.fixture()
def test_post(db_session: Session, test_user: User) -> Post:
    """Create a baseline post for tests."""
    return make_post(db_session, test_user)


@pytest.fixture()
def test_comment(db_session: Session, test_user: User, test_post: Post) -> Comment:
    comment = Comment(user_id=test_user.id, post_id=test_post.id, content="First!")
    db_session.add(comment)
    db_session.commit()
    return comment


def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def stored_files(upload_dir: str) -> list[Path]:
    """Every file written below ``upload_dir``, in any subdirectory."""
    return [path for path in Path(upload_dir).rglob("*") if path.is_file()]
