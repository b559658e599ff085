"""Priority ordering of a provider's roles.

Priorities are only ever changed here. A move takes the role from its
slot to the slot of ``new_priority`` and rotates the roles in between
by one slot toward the vacated position:

    before: [a:5, b:6, c:7, d:8]      move(d, 6)
    after:  [a:5, d:6, b:7, c:8]

The set of priority values inside the window is preserved and roles
outside the window keep theirs, so uniqueness holds and no gap is
introduced or closed.
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from tenant_roles.core.errors import (
    InvalidTargetError,
    ReservedRoleError,
    RoleNotFoundError,
    UnauthorizedActionError,
)
from tenant_roles.core.locks import role_locks
from tenant_roles.core.permissions.guard import ensure_can_mutate_role, outranks_priority
from tenant_roles.core.permissions.models import Role
from tenant_roles.modules.roles.repos import RoleRepo
from tenant_roles.modules.users.models import User
from tenant_roles.modules.users.repos import UserRepo


logger = structlog.get_logger()


def _slot_index(ordered: list[Role], new_priority: int) -> int:
    """Position of the role holding ``new_priority``.

    Raises:
        InvalidTargetError: If no role of the provider holds ``new_priority``
    """
    for index, role in enumerate(ordered):
        if role.priority == new_priority:
            return index
    raise InvalidTargetError(
        f"No role holds priority {new_priority}",
        details={"priority": new_priority},
    )


def plan_move(
    ordered: list[Role], role: Role, new_priority: int
) -> tuple[list[Role], dict[UUID, int]]:
    """Compute the relabeling for moving ``role`` to ``new_priority``.

    Args:
        ordered: The provider's roles sorted by priority
        role: The role to move (must be in ``ordered``)
        new_priority: Priority of the destination slot

    Returns:
        Tuple of (roles in the affected window, new priority per role ID)

    Raises:
        InvalidTargetError: If no role of the provider holds ``new_priority``
        ReservedRoleError: If a reserved role sits inside the window
    """
    slots = [r.priority for r in ordered]
    source = ordered.index(role)
    target = _slot_index(ordered, new_priority)
    low, high = min(source, target), max(source, target)
    window = ordered[low : high + 1]

    blocking = [r for r in window if r.reserved]
    if blocking:
        raise ReservedRoleError(
            f"The move would shift the reserved '{blocking[0].name}' role",
            details={"blocking_role": blocking[0].name, "priority": new_priority},
        )

    reordered = list(ordered)
    reordered.pop(source)
    reordered.insert(target, role)
    labels = {r.id: slots[index] for index, r in enumerate(reordered) if low <= index <= high}
    return window, labels


class PriorityOrderer:
    """Service owning the strict total order of role priorities."""

    def __init__(self, roles: RoleRepo, users: UserRepo) -> None:
        self.roles = roles
        self.users = users

    async def move(self, role_id: UUID, new_priority: int, actor: User) -> Role:
        """Move a role to the slot currently holding ``new_priority``.

        Args:
            role_id: The role to move
            new_priority: Priority of the destination slot
            actor: The acting administrator

        Returns:
            The moved role with its new priority

        Raises:
            RoleNotFoundError: If the role does not exist
            ReservedRoleError: If the role, or a role the move would shift,
                is reserved
            UnauthorizedActionError: If the actor does not outrank both the
                source and the destination slot in the same provider
            InvalidTargetError: If no role holds ``new_priority``; checked
                before the destination's privilege
        """
        role = await self.roles.get_by_id(role_id)
        if not role:
            raise RoleNotFoundError(role_id)
        provider = role.provider

        async with role_locks.provider(provider):
            ordered = await self.roles.list_by_provider(provider, for_update=True)
            role = next((r for r in ordered if r.id == role_id), None)
            if role is None:
                raise RoleNotFoundError(role_id)

            fresh_actor = await self.users.get_by_id(actor.id)
            if fresh_actor is None:
                raise UnauthorizedActionError("Actor no longer exists")
            ensure_can_mutate_role(fresh_actor, role)

            if new_priority == role.priority:
                return role

            _slot_index(ordered, new_priority)
            if not outranks_priority(fresh_actor, new_priority):
                raise UnauthorizedActionError(
                    "Destination is at or above your privilege",
                    details={"priority": new_priority},
                )

            window, labels = plan_move(ordered, role, new_priority)
            previous = role.priority
            try:
                await self.roles.relabel(labels, window)
                await self.roles.commit()
            except Exception:
                await self.roles.rollback()
                raise

        logger.info(
            "role_moved",
            role_id=str(role.id),
            role=role.name,
            provider=provider,
            from_priority=previous,
            to_priority=role.priority,
            shifted=len(window) - 1,
            actor_id=str(fresh_actor.id),
        )
        return role


PriorityOrdererSvc = Annotated[PriorityOrderer, Depends(PriorityOrderer)]
