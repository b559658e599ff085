"""Write side of the permission matrix."""

from collections.abc import Mapping
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from tenant_roles.core.constants import MAX_PERMISSION_ACTION_LENGTH
from tenant_roles.core.errors import RoleNotFoundError, UnauthorizedActionError, ValidationError
from tenant_roles.core.locks import role_locks
from tenant_roles.core.permissions.guard import ensure_can_mutate_role
from tenant_roles.modules.roles.repos import RoleRepo
from tenant_roles.modules.users.models import User
from tenant_roles.modules.users.repos import UserRepo


logger = structlog.get_logger()


def validate_actions(permission_map: Mapping[str, bool]) -> dict[str, bool]:
    """Check every action name before anything is written.

    Raises:
        ValidationError: Listing every rejected action
    """
    errors = []
    cleaned: dict[str, bool] = {}
    for action, value in permission_map.items():
        name = action.strip()
        if not name:
            errors.append({"field": "permissions", "message": "Action name is empty"})
        elif len(name) > MAX_PERMISSION_ACTION_LENGTH:
            errors.append(
                {
                    "field": f"permissions.{name[:20]}",
                    "message": f"Action name exceeds {MAX_PERMISSION_ACTION_LENGTH} characters",
                }
            )
        elif name in cleaned:
            errors.append(
                {
                    "field": f"permissions.{name[:20]}",
                    "message": "Action is listed more than once",
                }
            )
        else:
            cleaned[name] = bool(value)

    if errors:
        raise ValidationError("Invalid permission actions", errors=errors)
    return cleaned


class PermissionMatrix:
    """Service for reading and upserting role permissions."""

    def __init__(self, roles: RoleRepo, users: UserRepo) -> None:
        self.roles = roles
        self.users = users

    async def get_permissions(self, role_id: UUID, provider: str) -> dict[str, bool]:
        """Get the stored permission map of a provider's role.

        Raises:
            RoleNotFoundError: If no such role exists in the provider
        """
        role = await self.roles.get_by_id(role_id, provider)
        if not role:
            raise RoleNotFoundError(role_id)
        return await self.roles.get_permissions(role.id)

    async def update_permissions(
        self,
        role_id: UUID,
        permission_map: Mapping[str, bool],
        actor: User,
    ) -> dict[str, bool]:
        """Upsert a role's permissions as one unit.

        Actions not in ``permission_map`` keep their value.

        Args:
            role_id: The role to update
            permission_map: Mapping of action name to granted flag
            actor: The acting administrator

        Returns:
            The role's full permission map after the update

        Raises:
            ValidationError: If an action name is empty, too long or listed
                twice once surrounding whitespace is removed
            RoleNotFoundError: If the role does not exist
            UnauthorizedActionError: If the actor does not outrank the role
            ReservedRoleError: If the role is reserved
        """
        permissions = validate_actions(permission_map)

        async with role_locks.role(role_id):
            role = await self.roles.get_by_id(role_id, for_update=True)
            if not role:
                raise RoleNotFoundError(role_id)

            fresh_actor = await self.users.get_by_id(actor.id)
            if fresh_actor is None:
                raise UnauthorizedActionError("Actor no longer exists")
            ensure_can_mutate_role(fresh_actor, role)

            try:
                await self.roles.upsert_permissions(role.id, permissions)
                await self.roles.commit()
            except Exception:
                await self.roles.rollback()
                raise
            merged = await self.roles.get_permissions(role.id)

        logger.info(
            "role_permissions_updated",
            role_id=str(role_id),
            provider=role.provider,
            actions=sorted(permissions),
            actor_id=str(fresh_actor.id),
        )
        return merged


PermissionMatrixSvc = Annotated[PermissionMatrix, Depends(PermissionMatrix)]
