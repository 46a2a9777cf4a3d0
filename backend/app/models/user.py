"""Database model for user accounts."""
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Account record with a hashed password and an active flag."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column("user_id", String(36), primary_key=True, default=_new_user_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(255), default="")
    last_name: Mapped[str] = mapped_column(String(255), default="", index=True)
    password: Mapped[str | None] = mapped_column(String(255))
    active: Mapped[int] = mapped_column("user_active", Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
