"""Role administration API routes."""

from uuid import UUID

from fastapi import Response, status

from tenant_roles.api.dependencies import DBSession
from tenant_roles.core.constants import CAN_EDIT_ROLES
from tenant_roles.core.permissions.decorators import require_permission
from tenant_roles.core.permissions.dependencies import CurrentActor
from tenant_roles.modules.roles import router
from tenant_roles.modules.roles.matrix import PermissionMatrixSvc
from tenant_roles.modules.roles.ordering import PriorityOrdererSvc
from tenant_roles.modules.roles.schemas import (
    PermissionsResponse,
    PermissionUpdate,
    RoleCreate,
    RoleDetailResponse,
    RoleListResponse,
    RoleMove,
    RoleResponse,
)
from tenant_roles.modules.roles.services import RoleStoreSvc


@router.get(
    "",
    response_model=RoleListResponse,
    summary="List roles",
    description="List the roles of the actor's provider, most powerful first.",
)
@require_permission(CAN_EDIT_ROLES)
async def list_roles(
    store: RoleStoreSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> RoleListResponse:
    roles = await store.list_roles(current_user.provider)
    return RoleListResponse(
        items=[RoleResponse.model_validate(role) for role in roles],
        total=len(roles),
    )


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    description="Create a role below every existing role of the provider.",
)
@require_permission(CAN_EDIT_ROLES)
async def create_role(
    data: RoleCreate,
    store: RoleStoreSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> RoleResponse:
    role = await store.create_role(data.name, current_user.provider, current_user)
    return RoleResponse.model_validate(role)


@router.get(
    "/{role_id}",
    response_model=RoleDetailResponse,
    summary="Get role",
)
@require_permission(CAN_EDIT_ROLES)
async def get_role(
    role_id: UUID,
    store: RoleStoreSvc,
    matrix: PermissionMatrixSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> RoleDetailResponse:
    """Get a role with its stored permissions."""
    role = await store.get_role(role_id, current_user.provider)
    permissions = await matrix.get_permissions(role.id, current_user.provider)
    return RoleDetailResponse(
        **RoleResponse.model_validate(role).model_dump(),
        permissions=permissions,
    )


@router.patch(
    "/{role_id}/priority",
    response_model=RoleResponse,
    summary="Reorder role",
    description=(
        "Move a role to the slot of another role of the provider. "
        "Roles in between shift by one slot."
    ),
)
@require_permission(CAN_EDIT_ROLES)
async def move_role(
    role_id: UUID,
    data: RoleMove,
    orderer: PriorityOrdererSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> RoleResponse:
    role = await orderer.move(role_id, data.priority, current_user)
    return RoleResponse.model_validate(role)


@router.put(
    "/{role_id}/permissions",
    response_model=PermissionsResponse,
    summary="Update role permissions",
    description="Upsert the given actions; actions left out keep their value.",
)
@require_permission(CAN_EDIT_ROLES)
async def update_permissions(
    role_id: UUID,
    data: PermissionUpdate,
    matrix: PermissionMatrixSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> PermissionsResponse:
    permissions = await matrix.update_permissions(role_id, data.permissions, current_user)
    return PermissionsResponse(role_id=role_id, permissions=permissions)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete role",
    description="Delete a role that no user holds.",
)
@require_permission(CAN_EDIT_ROLES)
async def delete_role(
    role_id: UUID,
    store: RoleStoreSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> Response:
    await store.delete_role(role_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
