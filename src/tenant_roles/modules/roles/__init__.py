"""Roles module - provider role hierarchy and permission matrix."""

from fastapi import APIRouter


router = APIRouter(prefix="/admin/roles", tags=["roles"])

# Module metadata
__module_info__ = {
    "name": "roles",
    "version": "1.0.0",
    "description": "Role ordering, lifecycle and permissions",
    "dependencies": ["users"],
}

from tenant_roles.modules.roles import routes  # noqa: E402, F401
