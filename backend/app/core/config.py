"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="USERS_",
        extra="ignore",
    )

    app_name: str = "Users API"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Database
    database_url: str = "sqlite+aiosqlite:///./users.db"
    db_timeout_seconds: float = 3.0

    # CORS
    allowed_origins: Annotated[List[str], NoDecode] = ["*"]
    allowed_methods: Annotated[List[str], NoDecode] = ["GET", "HEAD", "POST", "DELETE"]
    allowed_headers: Annotated[List[str], NoDecode] = ["Accept", "Authorization", "Content-Type"]
    cors_max_age: int = 300

    # Logging
    log_level: str = "INFO"

    @field_validator("database_url", mode="before")
    @classmethod
    def _async_postgres_driver(cls, value: str) -> str:
        if isinstance(value, str) and value.startswith("postgresql://"):
            return value.replace("postgresql://", "postgresql+asyncpg://", 1)
        return value

    @field_validator("allowed_origins", "allowed_methods", "allowed_headers", mode="before")
    @classmethod
    def _split_csv(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
