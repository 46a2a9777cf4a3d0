"""Pydantic schemas for user operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class UserPayload(BaseModel):
    """Request body for creating or updating a user.

    Missing fields decode to their zero value, matching a partial JSON object.
    """

    model_config = ConfigDict(extra="ignore")

    email: str = Field(default="", max_length=255)
    first_name: str = Field(default="", max_length=255)
    last_name: str = Field(default="", max_length=255)
    password: str = ""
    active: int = Field(default=0, ge=0, le=1)


class UserRead(BaseModel):
    id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("user_id", "id"),
        serialization_alias="user_id",
    )
    email: str
    first_name: str | None = None
    last_name: str | None = None
    active: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("first_name", "last_name")
    @classmethod
    def _omit_empty_name(cls, value: str | None) -> str | None:
        return value or None


class ErrorResponse(BaseModel):
    error: str
