# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

from vayam.core.security import create_access_token  # noqa: E402
from vayam.db.session import Base  # noqa: E402
from vayam.db.session import get_db as app_get_session  # noqa: E402
from vayam.main import app as fastapi_app  # noqa: E402
from vayam.models import Comment, Conversation, User  # noqa: E402
from vayam.services.comments import submit_comment  # noqa: E402

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
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

        # Services commit, so every test wipes the tables afterwards.
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
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _make_user(db: Session, username: str, email: str, hname: str) -> User:
    user = User(username=username, email=email, hname=hname)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def owner(db_session: Session) -> User:
    """Conversation owner."""
    return _make_user(db_session, "owner", "owner@example.com", "Olive Owner")


@pytest.fixture()
def voter(db_session: Session) -> User:
    """Participant who votes in the conversation."""
    return _make_user(db_session, "voter", "voter@example.com", "Val Voter")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """User with no stake in the conversation."""
    return _make_user(db_session, "other", "other@example.com", "Ollie Other")


@pytest.fixture()
def conversation(db_session: Session, owner: User) -> Conversation:
    """Active conversation owned by `owner` holding a seed comment and two more."""
    conv = Conversation(
        topic="Public transport",
        description="How should the city fund buses and trams?",
        owner=owner.uid,
    )
    db_session.add(conv)
    db_session.commit()
    db_session.refresh(conv)

    submit_comment(db_session, owner.uid, conv.zid, "Fares should be free", is_seed=True)
    submit_comment(db_session, owner.uid, conv.zid, "Buses need dedicated lanes")
    submit_comment(db_session, owner.uid, conv.zid, "Night trams are worth the cost")
    db_session.refresh(conv)
    return conv


@pytest.fixture()
def comment_tids(db_session: Session, conversation: Conversation) -> list[int]:
    """Return the fixture conversation's comment ids in creation order."""
    return list(
        db_session.scalars(
            select(Comment.tid).where(Comment.zid == conversation.zid).order_by(Comment.tid)
        )
    )


@pytest.fixture()
def owner_headers(owner: User) -> dict[str, str]:
    """Return authorization headers for the conversation owner."""
    return {"Authorization": f"Bearer {create_access_token(owner.uid)}"}


@pytest.fixture()
def voter_headers(voter: User) -> dict[str, str]:
    """Return authorization headers for the voter."""
    return {"Authorization": f"Bearer {create_access_token(voter.uid)}"}


@pytest.fixture()
def other_headers(other_user: User) -> dict[str, str]:
    """Return authorization headers for the unrelated user."""
    return {"Authorization": f"Bearer {create_access_token(other_user.uid)}"}
