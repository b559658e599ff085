"""Permission checking logic.

When a user holds several roles, their roles are walked in priority
order and, for every action, the value of the highest-priority role
that defines it wins. An action no role defines is not granted.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_roles.core.permissions.models import Role, RolePermission


if TYPE_CHECKING:
    from tenant_roles.modules.users.models import User


class PermissionChecker:
    """Read side of the permission matrix."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_role_permissions(self, role_ids: Iterable[UUID]) -> dict[UUID, dict[str, bool]]:
        """Get the stored permission map of each role.

        Args:
            role_ids: Roles to load

        Returns:
            Mapping of role ID to {action: value}; roles without rows map
            to an empty dict
        """
        ids = list(role_ids)
        matrix: dict[UUID, dict[str, bool]] = {role_id: {} for role_id in ids}
        if not ids:
            return matrix

        stmt = select(RolePermission).where(RolePermission.role_id.in_(ids))
        result = await self.session.execute(stmt)
        for permission in result.scalars().all():
            matrix[permission.role_id][permission.action] = permission.value
        return matrix

    async def effective_permissions(self, user: "User") -> dict[str, bool]:
        """Resolve the permissions that apply to a user.

        Args:
            user: User with roles loaded

        Returns:
            Mapping of action to the value of the highest-priority role
            defining it
        """
        roles: list[Role] = sorted(
            (role for role in user.roles if role.provider == user.provider),
            key=lambda role: role.priority,
        )
        matrix = await self.get_role_permissions(role.id for role in roles)

        effective: dict[str, bool] = {}
        for role in roles:
            for action, value in matrix[role.id].items():
                effective.setdefault(action, value)
        return effective

    async def has_permission(self, user: "User", action: str) -> bool:
        """Check whether a user is granted an action."""
        permissions = await self.effective_permissions(user)
        return permissions.get(action, False)
