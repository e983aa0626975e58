# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ACTOR_SALT", "test-salt")

from reveal_api.api.v1.dependencies import get_identity_resolver_dep, get_rate_limiter_dep
from reveal_api.core.settings import settings
from reveal_api.db.session import Base, build_engine
from reveal_api.db.session import get_db as app_get_session
from reveal_api.main import app as fastapi_app
from reveal_api.models import Comment, Post
from reveal_api.services.identity import ActorIdentityResolver
from reveal_api.services.rate_limit import InMemoryRateLimiter

TEST_DB_URL = "sqlite://"


class FakeClock:
    """Manually advanced clock for window and rotation tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def file_engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed engine so that threads get independent connections."""
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def limiter(clock: FakeClock) -> InMemoryRateLimiter:
    """Fresh limiter with the configured budgets and a controllable clock."""
    return InMemoryRateLimiter(settings.rate_limit_budgets, clock)


@pytest.fixture()
def resolver() -> ActorIdentityResolver:
    return ActorIdentityResolver("test-salt")


@pytest.fixture()
def actor(resolver: ActorIdentityResolver) -> Callable[[str], bytes]:
    """Return a helper mapping an IP string to its ActorId."""
    return resolver.resolve


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    limiter: InMemoryRateLimiter,
    resolver: ActorIdentityResolver,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_rate_limiter_dep] = lambda: limiter
    app.dependency_overrides[get_identity_resolver_dep] = lambda: resolver
    # Tests pick their actor through X-Forwarded-For.
    monkeypatch.setattr(settings, "trust_forwarded_for", True)
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def as_actor(ip: str) -> dict[str, str]:
    """Request headers that make the call come from ``ip``."""
    return {"X-Forwarded-For": ip}


@pytest.fixture()
def test_post(db_session: Session) -> Post:
    """Create and return a persisted post."""
    post = Post(title="Test Post", content="This is a test post body.")
    db_session.add(post)
    db_session.commit()
    return post


@pytest.fixture()
def test_comment(db_session: Session, test_post: Post) -> Comment:
    """Create and return a persisted comment on ``test_post``."""
    comment = Comment(post_id=test_post.id, content="First!")
    db_session.add(comment)
    db_session.commit()
    return comment


@pytest.fixture()
def api_post(client: TestClient) -> dict[str, Any]:
    """Create a post through the API and return its JSON body."""
    response = client.post(
        "/api/v1/posts",
        json={"title": "Hello", "content": "Posted through the API."},
        headers=as_actor("198.51.100.1"),
    )
    assert response.status_code == 201
    return response.json()
