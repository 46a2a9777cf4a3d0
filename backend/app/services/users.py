"""User store contract and its SQLAlchemy-backed repository."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.core.errors import RepositoryError, UserNotFoundError
from app.core.security import PasswordHasher
from app.db.queries import LIST_COLUMNS, UserQueryBuilder
from app.models.user import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UserStore(Protocol):
    """Operations the HTTP handlers need from user persistence."""

    async def list_all(self) -> list[User]:
        ...

    async def get_by_id(self, user_id: str) -> User:
        ...

    async def get_by_email(self, email: str) -> User:
        ...

    async def insert(self, user: User) -> str:
        ...

    async def update(self, user: User) -> None:
        ...

    async def delete_by_id(self, user_id: str) -> None:
        ...


class UserRepository:
    """Run user statements against a pooled async session factory.

    Every operation opens its own session and is bounded by ``timeout``
    seconds (the configured database timeout unless given). Running out of
    time, driver errors and connection errors all surface as
    :class:`RepositoryError`.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        queries: UserQueryBuilder | None = None,
        hasher: type[PasswordHasher] | PasswordHasher = PasswordHasher,
        timeout: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._queries = queries or UserQueryBuilder()
        self._hasher = hasher
        self._timeout = get_settings().db_timeout_seconds if timeout is None else timeout

    async def list_all(self) -> list[User]:
        """Return every user sorted by last name, without password hashes."""

        async def run(session: AsyncSession) -> list[User]:
            result = await session.execute(self._queries.select_all())
            return [User(**dict(zip(LIST_COLUMNS, row))) for row in result.all()]

        return await self._bounded("list_all", run)

    async def get_by_id(self, user_id: str) -> User:
        return await self._get_one("get_by_id", id=user_id)

    async def get_by_email(self, email: str) -> User:
        return await self._get_one("get_by_email", email=email)

    async def insert(self, user: User) -> str:
        """Hash the plaintext password, store the user and return its new id."""
        try:
            hashed = self._hasher.hash(user.password or "")
        except (TypeError, ValueError) as exc:
            logger.error("Password hashing failed: %s", exc)
            raise RepositoryError("Password hashing failed") from exc

        now = datetime.now(timezone.utc)
        stmt = self._queries.insert(
            {
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "password": hashed,
                "active": user.active,
                "created_at": now,
                "updated_at": now,
            }
        )

        async def run(session: AsyncSession) -> str:
            result = await session.execute(stmt)
            new_id = result.scalar_one()
            await session.commit()
            return new_id

        return await self._bounded("insert", run)

    async def update(self, user: User) -> None:
        """Overwrite the mutable fields of the row matching ``user.id``.

        The password is never written here. A missing row is not an error.
        """
        stmt = self._queries.update(
            {
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "active": user.active,
                "updated_at": datetime.now(timezone.utc),
            },
            id=user.id,
        )

        async def run(session: AsyncSession) -> None:
            result = await session.execute(stmt)
            await session.commit()
            if result.rowcount == 0:
                logger.debug("Update matched no user with id %s", user.id)

        await self._bounded("update", run)

    async def delete_by_id(self, user_id: str) -> None:
        stmt = self._queries.delete(id=user_id)

        async def run(session: AsyncSession) -> None:
            await session.execute(stmt)
            await session.commit()

        await self._bounded("delete_by_id", run)

    async def _get_one(self, operation: str, **filters: Any) -> User:
        stmt = self._queries.select_one(**filters)

        async def run(session: AsyncSession) -> User:
            result = await session.execute(stmt)
            user = result.scalars().first()
            if user is None:
                raise UserNotFoundError(f"No user matches {filters}")
            return user

        return await self._bounded(operation, run)

    async def _bounded(self, operation: str, run: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def in_session() -> T:
            async with self._session_factory() as session:
                return await run(session)

        try:
            return await asyncio.wait_for(in_session(), timeout=self._timeout)
        except UserNotFoundError:
            raise
        except asyncio.TimeoutError as exc:
            logger.error("User store %s timed out after %.1fs", operation, self._timeout)
            raise RepositoryError(f"{operation} timed out") from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.error("User store %s failed: %s", operation, exc)
            raise RepositoryError(f"{operation} failed") from exc
