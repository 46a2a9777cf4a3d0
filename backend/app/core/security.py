"""Security helpers for password hashing."""
from __future__ import annotations

from passlib.context import CryptContext

# Argon2 time cost applied to every new hash.
PASSWORD_HASH_ROUNDS = 3

_password_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__rounds=PASSWORD_HASH_ROUNDS,
)


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        return _password_context.verify(password, hashed)
