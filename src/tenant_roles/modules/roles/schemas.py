"""Pydantic schemas for role administration."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tenant_roles.core.constants import MAX_ROLE_NAME_LENGTH


class RoleCreate(BaseModel):
    """Schema for creating a role in the actor's provider."""

    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)


class RoleMove(BaseModel):
    """Schema for moving a role to the slot of another priority."""

    priority: int = Field(..., ge=0, description="Priority of the destination slot")


class PermissionUpdate(BaseModel):
    """Schema for upserting a role's permissions.

    Actions left out keep their current value.
    """

    permissions: dict[str, bool] = Field(..., description="Mapping of action name to granted flag")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"permissions": {"can_create_rooms": True, "can_manage_users": False}}
        }
    )


class RoleResponse(BaseModel):
    """Schema for role responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    provider: str
    priority: int
    reserved: bool


class RoleDetailResponse(RoleResponse):
    """Role with its stored permission map."""

    permissions: dict[str, bool] = Field(default_factory=dict)


class RoleListResponse(BaseModel):
    items: list[RoleResponse]
    total: int


class PermissionsResponse(BaseModel):
    role_id: UUID
    permissions: dict[str, bool]
