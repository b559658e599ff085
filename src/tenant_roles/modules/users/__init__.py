"""Users module - role bindings of a provider's users."""

from fastapi import APIRouter


router = APIRouter(prefix="/admin/users", tags=["users"])

# Module metadata
__module_info__ = {
    "name": "users",
    "version": "1.0.0",
    "description": "Ban, unban, approve and role assignment of users",
    "dependencies": [],
}

from tenant_roles.modules.users import routes  # noqa: E402, F401
