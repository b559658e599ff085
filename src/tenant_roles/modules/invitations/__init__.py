"""Invitations module - invite-only registration support."""

from fastapi import APIRouter


router = APIRouter(prefix="/admin/invitations", tags=["invitations"])

# Module metadata
__module_info__ = {
    "name": "invitations",
    "version": "1.0.0",
    "description": "Create and refresh registration invitations",
    "dependencies": ["users"],
}

from tenant_roles.modules.invitations import routes  # noqa: E402, F401
