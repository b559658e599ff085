"""Pydantic schemas for user administration."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class UserRoleSummary(BaseModel):
    """A role as shown on a user."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    priority: int


class UserResponse(BaseModel):
    """Schema for user responses.

    Roles are listed most powerful first.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    uid: str
    email: EmailStr
    name: str
    provider: str
    roles: list[UserRoleSummary]


class PasswordResetResponse(BaseModel):
    uid: str
    queued: bool
