"""Provider-scoped role hierarchy: models, privilege guard and checks."""

from tenant_roles.core.permissions.checker import PermissionChecker
from tenant_roles.core.permissions.guard import (
    admin_of,
    can_mutate_role,
    ensure_admin_of,
    ensure_can_mutate_role,
    ensure_not_reserved,
    ensure_outranks,
    highest_priority_role,
    outranks,
    outranks_priority,
)
from tenant_roles.core.permissions.models import Role, RolePermission, UserRole


__all__ = [
    "PermissionChecker",
    "Role",
    "RolePermission",
    "UserRole",
    "admin_of",
    "can_mutate_role",
    "ensure_admin_of",
    "ensure_can_mutate_role",
    "ensure_not_reserved",
    "ensure_outranks",
    "highest_priority_role",
    "outranks",
    "outranks_priority",
]
