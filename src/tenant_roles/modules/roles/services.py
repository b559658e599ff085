"""Role store: creation, lookup and deletion of provider roles."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from tenant_roles.core.constants import (
    CREATE_ROLE_ATTEMPTS,
    MAX_ROLE_NAME_LENGTH,
    RESERVED_ROLE_NAMES,
)
from tenant_roles.core.errors import (
    ConflictError,
    DuplicateRoleNameError,
    InvalidRoleNameError,
    RoleHasUsersError,
    RoleNotFoundError,
    UnauthorizedActionError,
)
from tenant_roles.core.locks import role_locks
from tenant_roles.core.permissions.guard import (
    ensure_not_reserved,
    ensure_outranks,
    outranks_priority,
)
from tenant_roles.core.permissions.models import Role
from tenant_roles.modules.roles.repos import RoleRepo
from tenant_roles.modules.users.models import User
from tenant_roles.modules.users.repos import UserRepo


logger = structlog.get_logger()


def _normalize_role_name(name: str) -> str:
    """Strip a role name and reject empty, oversized or reserved names.

    Raises:
        InvalidRoleNameError: If the name cannot be used for a new role
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidRoleNameError("Role name cannot be empty")
    if len(cleaned) > MAX_ROLE_NAME_LENGTH:
        raise InvalidRoleNameError(
            f"Role name cannot exceed {MAX_ROLE_NAME_LENGTH} characters",
            details={"max_length": MAX_ROLE_NAME_LENGTH},
        )
    if cleaned.lower() in RESERVED_ROLE_NAMES:
        raise InvalidRoleNameError(
            f"'{cleaned}' is a reserved role name",
            details={"name": cleaned},
        )
    return cleaned


class RoleStore:
    """Service for role lifecycle operations.

    Creation and deletion read-then-write the provider's priority
    sequence, so both run under the provider lock and commit before
    releasing it.
    """

    def __init__(self, roles: RoleRepo, users: UserRepo) -> None:
        self.roles = roles
        self.users = users

    async def _reload_actor(self, actor_id: UUID) -> User:
        fresh = await self.users.get_by_id(actor_id)
        if fresh is None:
            raise UnauthorizedActionError("Actor no longer exists")
        return fresh

    async def list_roles(self, provider: str) -> list[Role]:
        """List a provider's roles from most to least powerful."""
        return await self.roles.list_by_provider(provider)

    async def get_role(self, role_id: UUID, provider: str) -> Role:
        """Get a role of a provider.

        Raises:
            RoleNotFoundError: If no such role exists in the provider
        """
        role = await self.roles.get_by_id(role_id, provider)
        if not role:
            raise RoleNotFoundError(role_id)
        return role

    async def create_role(self, name: str, provider: str, actor: User) -> Role:
        """Create a role as the least powerful role of the provider.

        The provider's role rows are locked before the next priority is
        read. If another worker process still wins the slot, the insert
        fails on the (provider, priority) constraint and is retried with
        a fresh priority.

        Args:
            name: Role name, unique within the provider
            provider: Provider to create the role in
            actor: The acting administrator

        Returns:
            The created role

        Raises:
            InvalidRoleNameError: If the name is empty, too long or reserved
            DuplicateRoleNameError: If the provider already has that name
            UnauthorizedActionError: If the actor is outside the provider
                or does not outrank the new role's slot
            ConflictError: If every attempt lost the slot to another writer
        """
        cleaned = _normalize_role_name(name)
        if actor.provider != provider:
            raise UnauthorizedActionError(
                "Roles can only be created in your own provider",
                details={"provider": provider},
            )
        actor_id = actor.id

        async with role_locks.provider(provider):
            for attempt in range(1, CREATE_ROLE_ATTEMPTS + 1):
                priority = await self._next_priority(cleaned, provider, actor_id)
                try:
                    role = await self.roles.create(
                        Role(name=cleaned, provider=provider, priority=priority, reserved=False)
                    )
                    await self.roles.commit()
                    break
                except IntegrityError:
                    await self.roles.rollback()
                    logger.warning(
                        "role_priority_conflict",
                        role=cleaned,
                        provider=provider,
                        attempt=attempt,
                    )
                except Exception:
                    await self.roles.rollback()
                    raise
            else:
                raise ConflictError(
                    "Another change to this provider's roles is in progress, try again",
                    error_code="priority_conflict",
                    details={"provider": provider},
                )

        logger.info(
            "role_created",
            role_id=str(role.id),
            role=role.name,
            provider=provider,
            priority=role.priority,
            actor_id=str(actor_id),
        )
        return role

    async def _next_priority(self, name: str, provider: str, actor_id: UUID) -> int:
        """Validate a new role against the current rows and pick its slot."""
        actor = await self._reload_actor(actor_id)

        if await self.roles.get_by_name(name, provider):
            raise DuplicateRoleNameError(
                f"A role named '{name}' already exists",
                details={"name": name},
            )

        await self.roles.list_by_provider(provider, for_update=True)
        current_max = await self.roles.max_priority(provider)
        priority = 0 if current_max is None else current_max + 1
        if not outranks_priority(actor, priority):
            raise UnauthorizedActionError(
                "New role would not be below your privilege",
                details={"priority": priority},
            )
        return priority

    async def delete_role(self, role_id: UUID, actor: User) -> None:
        """Delete a role and its permission rows.

        Checks run in this order: the role exists, it is not reserved, the
        actor outranks it in the same provider, no user is bound. A reserved
        role is refused whoever asks.

        Raises:
            RoleNotFoundError: If the role does not exist (or is already gone)
            ReservedRoleError: If the role is reserved
            UnauthorizedActionError: If the actor does not outrank the role
            RoleHasUsersError: If users are still bound to the role
        """
        role = await self.roles.get_by_id(role_id)
        if not role:
            raise RoleNotFoundError(role_id)
        provider = role.provider

        async with role_locks.provider(provider), role_locks.role(role_id):
            role = await self.roles.get_by_id(role_id, for_update=True)
            if not role:
                raise RoleNotFoundError(role_id)
            ensure_not_reserved(role)

            actor = await self._reload_actor(actor.id)
            ensure_outranks(actor, role)

            user_count = await self.roles.count_users(role.id)
            if user_count:
                raise RoleHasUsersError(user_count, details={"role_id": str(role.id)})

            role_name = role.name
            try:
                await self.roles.delete(role)
                await self.roles.commit()
            except Exception:
                await self.roles.rollback()
                raise

        logger.info(
            "role_deleted",
            role_id=str(role_id),
            role=role_name,
            provider=provider,
            actor_id=str(actor.id),
        )


# Type alias for dependency injection
RoleStoreSvc = Annotated[RoleStore, Depends(RoleStore)]
