"""Shared fixtures: in-memory SQLite repository, fake user store and HTTP clients.

Every test gets a fresh database. Route tests that only care about handler
behaviour run against ``FakeUserStore``, which records each call so tests can
assert which store operations a request did or did not reach.
"""
from __future__ import annotations

import os
import uuid
from datetime import datetime, timezone

os.environ.setdefault("USERS_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.dependencies import get_user_store
from app.core.errors import UserNotFoundError
from app.db.base import Base
from app.main import app
from app.models.user import User
from app.services.users import UserRepository


class FakeUserStore:
    """In-memory stand-in for :class:`UserRepository`."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.calls: list[tuple[str, object]] = []
        self.failures: dict[str, Exception] = {}
        self.before_email_lookup = None

    def seed(self, **fields) -> User:
        now = datetime.now(timezone.utc)
        user = User(
            id=str(uuid.uuid4()),
            email=fields.get("email", "seed@example.com"),
            first_name=fields.get("first_name", "Seed"),
            last_name=fields.get("last_name", "User"),
            password=fields.get("password", "stored-hash"),
            active=fields.get("active", 1),
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user

    def _record(self, operation: str, argument: object) -> None:
        self.calls.append((operation, argument))
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    @staticmethod
    def _copy(user: User, with_password: bool = True) -> User:
        return User(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            password=user.password if with_password else None,
            active=user.active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    @property
    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def list_all(self) -> list[User]:
        self._record("list_all", None)
        users = sorted(self.users.values(), key=lambda item: item.last_name)
        return [self._copy(user, with_password=False) for user in users]

    async def get_by_id(self, user_id: str) -> User:
        self._record("get_by_id", user_id)
        if user_id not in self.users:
            raise UserNotFoundError(user_id)
        return self._copy(self.users[user_id])

    async def get_by_email(self, email: str) -> User:
        self._record("get_by_email", email)
        found = next((user for user in self.users.values() if user.email == email), None)
        # The hook runs after the scan so a paused lookup keeps what it already saw.
        if self.before_email_lookup is not None:
            await self.before_email_lookup()
        if found is None:
            raise UserNotFoundError(email)
        return self._copy(found)

    async def insert(self, user: User) -> str:
        self._record("insert", user.email)
        stored = self._copy(user)
        stored.id = str(uuid.uuid4())
        stored.password = f"hashed:{user.password}"
        stored.created_at = stored.updated_at = datetime.now(timezone.utc)
        self.users[stored.id] = stored
        return stored.id

    async def update(self, user: User) -> None:
        self._record("update", user.id)
        stored = self.users.get(user.id)
        if stored is None:
            return
        stored.email = user.email
        stored.first_name = user.first_name
        stored.last_name = user.last_name
        stored.active = user.active
        stored.updated_at = datetime.now(timezone.utc)

    async def delete_by_id(self, user_id: str) -> None:
        self._record("delete_by_id", user_id)
        self.users.pop(user_id, None)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def repository(test_session_factory) -> UserRepository:
    return UserRepository(test_session_factory)


@pytest.fixture
def fake_store() -> FakeUserStore:
    return FakeUserStore()


async def _client_for(store):
    app.dependency_overrides[get_user_store] = lambda: store
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def client(fake_store):
    """HTTP client whose handlers talk to the fake store."""
    async for c in _client_for(fake_store):
        yield c


@pytest.fixture
async def db_client(repository):
    """HTTP client whose handlers talk to a real repository on SQLite."""
    async for c in _client_for(repository):
        yield c


@pytest.fixture
def unreachable_repository() -> UserRepository:
    """Repository whose database refuses every connection."""

    class RefusingSessionFactory:
        def __call__(self):
            return self

        async def __aenter__(self):
            raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")

        async def __aexit__(self, *exc_info):
            return False

    return UserRepository(RefusingSessionFactory())


@pytest.fixture
async def unreachable_client(unreachable_repository):
    """HTTP client whose handlers talk to a repository with the database down."""
    async for c in _client_for(unreachable_repository):
        yield c
