"""Pydantic schemas for invitations."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class InviteRequest(BaseModel):
    """Schema for inviting one or more addresses.

    ``emails`` accepts a list or a single comma-separated string.
    """

    emails: list[EmailStr] = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={"example": {"emails": "ada@example.com, grace@example.com"}}
    )

    @field_validator("emails", mode="before")
    @classmethod
    def split_emails(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    provider: str
    created_at: datetime
    updated_at: datetime


class InviteResponse(BaseModel):
    items: list[InvitationResponse]
    total: int
