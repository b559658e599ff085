"""Privilege comparison between actors, users and roles.

Everything here is a pure function of the role sets already loaded on
the objects passed in. Nothing is cached: callers reload the actor and
target inside their critical section right before asking, because roles
can change between two requests.

Lower priority value means more power. An actor may only act on users
and roles that sit strictly below their own highest-priority role, in
their own provider.
"""

from typing import TYPE_CHECKING

import structlog

from tenant_roles.core.errors import (
    NoRoleAssignedError,
    ReservedRoleError,
    UnauthorizedActionError,
)
from tenant_roles.core.permissions.models import Role


if TYPE_CHECKING:
    from tenant_roles.modules.users.models import User


logger = structlog.get_logger()


def highest_priority_role(user: "User") -> Role:
    """Return the most powerful role the user holds in their provider.

    Raises:
        NoRoleAssignedError: If the user holds no role in their provider.
            This is a consistency violation and is logged as such.
    """
    scoped = [role for role in user.roles if role.provider == user.provider]
    if not scoped:
        logger.critical(
            "role_consistency_violation",
            user_id=str(user.id),
            provider=user.provider,
            reason="no_role_assigned",
        )
        raise NoRoleAssignedError(details={"user_id": str(user.id)})
    return min(scoped, key=lambda role: role.priority)


def outranks_priority(actor: "User", priority: int) -> bool:
    """Whether the actor's highest role sits strictly above ``priority``."""
    return highest_priority_role(actor).priority < priority


def outranks(actor: "User", role: Role) -> bool:
    """Whether the actor may grant, revoke or edit ``role``."""
    return actor.provider == role.provider and outranks_priority(actor, role.priority)


def admin_of(actor: "User", target: "User") -> bool:
    """Whether ``actor`` administers ``target``.

    This is the single gate for every user-targeting admin action
    (edit, ban, unban, approve, reset, role assignment).
    """
    if actor.provider != target.provider:
        return False
    return highest_priority_role(actor).priority < highest_priority_role(target).priority


def can_mutate_role(actor: "User", role: Role) -> bool:
    """Whether ``actor`` may reorder, delete or edit permissions of ``role``."""
    return not role.reserved and outranks(actor, role)


def ensure_admin_of(actor: "User", target: "User") -> None:
    if not admin_of(actor, target):
        raise UnauthorizedActionError(
            "You are not an administrator of this user",
            details={"user_uid": target.uid},
        )


def ensure_outranks(actor: "User", role: Role) -> None:
    if not outranks(actor, role):
        raise UnauthorizedActionError(
            "Role is at or above your privilege",
            details={"role_id": str(role.id), "role": role.name},
        )


def ensure_not_reserved(role: Role) -> None:
    if role.reserved:
        raise ReservedRoleError(
            f"The '{role.name}' role is reserved",
            details={"role_id": str(role.id), "role": role.name},
        )


def ensure_can_mutate_role(actor: "User", role: Role) -> None:
    """Raise the typed reason why ``actor`` may not change ``role``.

    Privilege is checked before reservation: an actor who does not
    outrank the role learns nothing more than that. Deletion checks the
    reserved flag first instead (see RoleStore.delete_role).
    """
    ensure_outranks(actor, role)
    ensure_not_reserved(role)
