"""Parameterized statement builder for the users table."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import Delete, Insert, Select, Update, delete, insert, select, update

from app.models.user import User

LIST_COLUMNS = ("id", "email", "first_name", "last_name", "active", "created_at", "updated_at")
WRITABLE_COLUMNS = ("email", "first_name", "last_name", "password", "active", "created_at", "updated_at")
FILTER_KEYS = ("id", "email")


class UserQueryBuilder:
    """Build SQLAlchemy statements against ``users`` from recognized keys.

    Filters are equality conditions; every value ends up as a bound parameter.
    A builder belongs to the repository that created it.
    """

    def __init__(
        self,
        filter_keys: tuple[str, ...] = FILTER_KEYS,
        writable_columns: tuple[str, ...] = WRITABLE_COLUMNS,
    ) -> None:
        self._filter_keys = frozenset(filter_keys)
        self._writable = frozenset(writable_columns)

    def select_all(self) -> Select:
        columns = [getattr(User, name) for name in LIST_COLUMNS]
        return select(*columns).order_by(User.last_name.asc())

    def select_one(self, **filters: Any) -> Select:
        return select(User).where(*self._conditions(filters))

    def insert(self, values: Mapping[str, Any]) -> Insert:
        return insert(User).values(self._assignments(values)).returning(User.id)

    def update(self, values: Mapping[str, Any], **filters: Any) -> Update:
        return update(User).where(*self._conditions(filters)).values(self._assignments(values))

    def delete(self, **filters: Any) -> Delete:
        return delete(User).where(*self._conditions(filters))

    def _conditions(self, filters: Mapping[str, Any]) -> list:
        if not filters:
            raise ValueError("At least one filter is required")
        unknown = set(filters) - self._filter_keys
        if unknown:
            raise ValueError(f"Unrecognized filter keys: {', '.join(sorted(unknown))}")
        return [getattr(User, key) == value for key, value in filters.items()]

    def _assignments(self, values: Mapping[str, Any]) -> dict:
        unknown = set(values) - self._writable
        if unknown:
            raise ValueError(f"Unrecognized columns: {', '.join(sorted(unknown))}")
        return {getattr(User, key): value for key, value in values.items()}
