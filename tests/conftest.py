# tests/conftest.py
from __future__ import annotations

import os
import random
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from petboard.core.security import ROLE_ADMIN, ROLE_USER
from petboard.core.settings import settings
from petboard.db.session import Base, build_engine
from petboard.db.session import get_db as app_get_session
from petboard.main import app as fastapi_app
from petboard.models import Category, User
from petboard.schemas.post import PostView
from petboard.services import (
    EventBus,
    FeedQueryEngine,
    InteractionLedger,
    ModerationWorkflow,
    PostStore,
    TagRegistry,
)

TEST_DB_URL = "sqlite://"

_EMAIL_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

        # Services commit for real, so every table is emptied between tests.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


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


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app, base_url="http://test")


def _make_user(db_session: Session, name: str, role: str = ROLE_USER) -> User:
    user = User(
        name=name,
        email=f"user{next(_EMAIL_COUNTER)}@example.com",
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting extra users."""

    def _factory(name: str, role: str = ROLE_USER) -> User:
        return _make_user(db_session, name, role)

    return _factory


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return the primary author."""
    return _make_user(db_session, "Ana")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second regular user."""
    return _make_user(db_session, "Bruno")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """Create and return a user holding the admin role."""
    return _make_user(db_session, "Moderadora", ROLE_ADMIN)


def make_token(user_id: int, role: str = ROLE_USER) -> str:
    """Mint a bearer token the way the authentication collaborator does."""
    return jwt.encode(
        {"sub": str(user_id), "role": role},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {make_token(test_user.id)}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return {"Authorization": f"Bearer {make_token(other_user.id)}"}


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the admin user."""
    return {"Authorization": f"Bearer {make_token(admin_user.id, ROLE_ADMIN)}"}


class RecordingBus(EventBus):
    """Event bus that keeps every published event for assertions."""

    def __init__(self) -> None:
        super().__init__(subscribers=[])
        self.events = []
        self.subscribe(self.events.append)

    def names(self) -> list[str]:
        return [event.name for event in self.events]


@pytest.fixture()
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture()
def tags(db_session: Session) -> TagRegistry:
    """Tag registry with a seeded generator so colors are reproducible."""
    return TagRegistry(db_session, rng=random.Random(1234))


@pytest.fixture()
def feed(db_session: Session, tags: TagRegistry) -> FeedQueryEngine:
    return FeedQueryEngine(db_session, tags)


@pytest.fixture()
def store(db_session: Session, tags: TagRegistry, feed: FeedQueryEngine, bus: RecordingBus) -> PostStore:
    return PostStore(db_session, tags=tags, feed=feed, bus=bus)


@pytest.fixture()
def ledger(db_session: Session, bus: RecordingBus) -> InteractionLedger:
    return InteractionLedger(db_session, bus=bus)


@pytest.fixture()
def workflow(db_session: Session, feed: FeedQueryEngine, bus: RecordingBus) -> ModerationWorkflow:
    return ModerationWorkflow(db_session, feed=feed, bus=bus)


@pytest.fixture()
def make_post(store: PostStore, workflow: ModerationWorkflow, admin_user: User) -> Callable[..., PostView]:
    """Return a factory creating posts, approved unless told otherwise."""

    def _factory(
        author: User,
        title: str = "Gato dormindo",
        *,
        content: str = "Meu gato dorme o dia todo",
        category: Category = Category.GATOS,
        tags: list[str] | None = None,
        approve: bool = True,
    ) -> PostView:
        view = store.create(
            author_id=author.id,
            title=title,
            content=content,
            category=category,
            tags=tags,
        )
        if approve:
            view = workflow.approve(view.id, admin_user.id)
        return view

    return _factory


@pytest.fixture()
def test_post(make_post: Callable[..., PostView], test_user: User) -> PostView:
    """Create an approved baseline post written by ``test_user``."""
    return make_post(test_user, tags=["fofura"])


@pytest.fixture()
def headers_for() -> Callable[..., dict[str, str]]:
    """Return a helper building authorization headers for any user."""

    def _headers(user: User, role: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user.id, role or user.role)}"}

    return _headers
