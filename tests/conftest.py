# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("TRENDING_ENABLED", "false")

from bloggy.api.v1 import dependencies  # noqa: E402
from bloggy.core.security import create_access_token, hash_password  # noqa: E402
from bloggy.db.session import build_engine, create_tables, drop_tables  # noqa: E402
from bloggy.db.session import get_db as app_get_session  # noqa: E402
from bloggy.main import app as fastapi_app  # noqa: E402
from bloggy.models import Post, User, UserRole  # noqa: E402
from bloggy.repositories import PostRepository, UserRepository  # noqa: E402
from bloggy.schemas.post import TrendingArticle  # noqa: E402
from bloggy.services.post_service import submit_post  # noqa: E402

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-battery"

_USER_COUNTER = count(1)


@dataclass
class SentMail:
    to: str
    subject: str
    body: str
    reply_to: str | None = None


class FakeMailer:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self) -> None:
        self.sent: list[SentMail] = []
        self.fail_for: set[str] = set()
        self.configured = True

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        *,
        sender: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        if to in self.fail_for:
            return False
        self.sent.append(SentMail(to=to, subject=subject, body=body, reply_to=reply_to))
        return True


class FakeTrendingFeed:
    def __init__(self, articles: list[TrendingArticle] | None = None) -> None:
        self.articles = articles or []

    async def fetch(self) -> list[TrendingArticle]:
        return list(self.articles)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    create_tables(bind=engine)
    try:
        yield engine
    finally:
        drop_tables(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def users(db_session: Session) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture()
def posts(db_session: Session) -> PostRepository:
    return PostRepository(db_session)


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def trending_feed() -> FakeTrendingFeed:
    return FakeTrendingFeed(
        [TrendingArticle(title="Rust in 2026", url="https://dev.to/a/rust", author="A. Writer")]
    )


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    mailer: FakeMailer,
    trending_feed: FakeTrendingFeed,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides: dict[Callable[..., object], Callable[..., object]] = {
        app_get_session: _get_session_override,
        dependencies.get_mailer_dep: lambda: mailer,
        dependencies.get_trending_feed_dep: lambda: trending_feed,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(users: UserRepository) -> Callable[..., User]:
    """Return a factory that persists users with a known password."""

    def _make_user(
        *,
        handle: str | None = None,
        email: str | None = None,
        verified: bool = True,
        role: UserRole = UserRole.STANDARD,
    ) -> User:
        number = next(_USER_COUNTER)
        handle = handle or f"writer{number}"
        user = User(
            login_email=email or f"{handle}@example.com",
            display_handle=handle,
            credential_hash=hash_password(TEST_PASSWORD),
            is_verified=verified,
            role=role,
        )
        return users.create(user)

    return _make_user


@pytest.fixture()
def author(make_user: Callable[..., User]) -> User:
    return make_user(handle="alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    return make_user(handle="bob")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user(handle="root", role=UserRole.ADMIN)


@pytest.fixture()
def unverified_user(make_user: Callable[..., User]) -> User:
    return make_user(handle="newbie", verified=False)


@pytest.fixture()
def user_password() -> str:
    return TEST_PASSWORD


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building authorization headers for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers


@pytest.fixture()
def make_post(users: UserRepository, posts: PostRepository) -> Callable[..., Post]:
    """Return a factory that publishes posts through the submission pipeline."""

    def _make_post(
        author: User,
        *,
        title: str = "Hello world",
        content: str = "First post",
        markdown: str | None = "# Hello\n\nSome *markdown*.",
    ) -> Post:
        return submit_post(
            users,
            posts,
            acting_user_id=author.id,
            title=title,
            content=content,
            markdown_source=markdown,
        )

    return _make_post


@pytest.fixture()
def test_post(author: User, make_post: Callable[..., Post]) -> Post:
    return make_post(author)
