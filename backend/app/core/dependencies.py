"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from functools import lru_cache

from app.db.session import async_session_factory
from app.services.users import UserRepository, UserStore


@lru_cache
def _default_user_store() -> UserRepository:
    return UserRepository(async_session_factory)


async def get_user_store() -> UserStore:
    return _default_user_store()
