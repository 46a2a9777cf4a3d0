"""Errors raised by the data-access layer."""
from __future__ import annotations


class RepositoryError(RuntimeError):
    """Raised when a store operation fails, including when it exceeds its time bound."""


class UserNotFoundError(RepositoryError):
    """Raised when no user row matches a lookup."""
