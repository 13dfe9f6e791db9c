# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("UPLOAD_DIR", "test-uploads")

from commung.core import security
from commung.core.constants import ROLE_MEMBER
from commung.db.session import Base
from commung.db.session import get_db as app_get_session
from commung.db.time import utcnow
from commung.main import app as fastapi_app
from commung.models import Community, Membership, Profile, User, UserSession
from commung.schemas.community import CommunityCreate
from commung.services import community_service, profile_service

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-battery"
# Hashing with argon2id is deliberately slow; every fixture user shares this hash.
TEST_PASSWORD_HASH = security.hash_password(TEST_PASSWORD)

_USER_COUNTER = count(1)


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
        # Ensure each test sees a clean database even though services commit.
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


def _create_user(db: Session, login_name: str | None = None) -> User:
    user = User(
        login_name=login_name or f"user{next(_USER_COUNTER)}",
        password_hash=TEST_PASSWORD_HASH,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _session_headers(db: Session, user: User, community_id: str | None = None) -> dict[str, str]:
    now = utcnow()
    session = UserSession(
        user_id=user.id,
        community_id=community_id,
        created_at=now,
        expires_at=now + timedelta(days=1),
    )
    db.add(session)
    db.commit()
    token = security.create_session_token(user.id, session.id, session.expires_at)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory creating persisted accounts sharing ``TEST_PASSWORD``."""

    def _make(login_name: str | None = None) -> User:
        return _create_user(db_session, login_name)

    return _make


@pytest.fixture()
def auth_headers(db_session: Session) -> Callable[..., dict[str, str]]:
    """Return a factory producing console Authorization headers for a user."""

    def _headers(user: User, community_id: str | None = None) -> dict[str, str]:
        return _session_headers(db_session, user, community_id)

    return _headers


@pytest.fixture()
def owner(make_user: Callable[..., User]) -> User:
    return make_user("owner")


@pytest.fixture()
def owner_headers(owner: User, auth_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    return auth_headers(owner)


def _community_payload(**overrides: Any) -> dict[str, Any]:
    now = utcnow()
    payload: dict[str, Any] = {
        "name": "테스트 커뮤",
        "slug": "test",
        "description": "테스트용 커뮤",
        "starts_at": (now - timedelta(days=1)).isoformat(),
        "ends_at": (now + timedelta(days=30)).isoformat(),
        "is_recruiting": True,
        "hashtags": ["자캐", "#판타지"],
        "profile_name": "운영자",
        "profile_username": "admin",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def community(db_session: Session, owner: User) -> Community:
    """Create a running, recruiting community ``test`` owned by ``owner``."""
    return community_service.create_community(
        db_session,
        owner,
        CommunityCreate.model_validate(_community_payload()),
    )


@pytest.fixture()
def owner_profile(db_session: Session, community: Community, owner: User) -> Profile:
    return (
        db_session.query(Profile)
        .filter(Profile.community_id == community.id, Profile.user_id == owner.id)
        .one()
    )


def _tenant_headers(headers: dict[str, str], slug: str = "test") -> dict[str, str]:
    """Add the Origin header that selects the tenant of an app request."""
    return {**headers, "Origin": f"https://{slug}.commu.ng"}


@pytest.fixture()
def community_payload() -> Callable[..., dict[str, Any]]:
    return _community_payload


@pytest.fixture()
def tenant_headers() -> Callable[..., dict[str, str]]:
    return _tenant_headers


@pytest.fixture()
def owner_app_headers(owner_headers: dict[str, str], community: Community) -> dict[str, str]:
    return _tenant_headers(owner_headers)


@pytest.fixture()
def add_member(
    db_session: Session,
    make_user: Callable[..., User],
) -> Callable[..., tuple[User, Profile]]:
    """Return a factory that joins a fresh account to a community with one profile."""

    def _add(
        community: Community,
        username: str,
        role: str = ROLE_MEMBER,
        muted: bool = False,
    ) -> tuple[User, Profile]:
        user = make_user(f"login_{username}")
        db_session.add(
            Membership(
                user_id=user.id,
                community_id=community.id,
                role=role,
                activated_at=utcnow(),
            )
        )
        profile = profile_service.create_profile(
            db_session,
            community_id=community.id,
            user_id=user.id,
            name=username.capitalize(),
            username=username,
            is_primary=True,
            muted=muted,
        )
        db_session.commit()
        db_session.refresh(profile)
        return user, profile

    return _add
