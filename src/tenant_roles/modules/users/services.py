"""Role bindings of users: ban, unban, approve and role assignment.

Every operation looks the target up, takes the target's lock, reloads
both the target and the actor with their current role sets, and only
then asks the guard. A binding write never starts before all checks
have passed.
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from tenant_roles.core.constants import DENIED_ROLE, PENDING_ROLE, USER_ROLE
from tenant_roles.core.errors import (
    LastRoleError,
    RoleNotFoundError,
    UnauthorizedActionError,
    UserNotFoundError,
)
from tenant_roles.core.locks import role_locks
from tenant_roles.core.permissions.guard import ensure_admin_of, ensure_outranks
from tenant_roles.core.permissions.models import Role
from tenant_roles.modules.roles.repos import RoleRepo
from tenant_roles.modules.users.models import User
from tenant_roles.modules.users.repos import UserRepo


logger = structlog.get_logger()


class UserRoleBinding:
    """Service for changing which roles a user holds."""

    def __init__(self, users: UserRepo, roles: RoleRepo) -> None:
        self.users = users
        self.roles = roles

    async def _lookup(self, uid: str) -> User:
        target = await self.users.get_by_uid(uid)
        if not target:
            raise UserNotFoundError(uid)
        return target

    async def _reload(self, target: User, actor: User) -> tuple[User, User]:
        """Reload target and actor with the role sets committed now."""
        fresh_target = await self.users.get_by_id(target.id)
        if fresh_target is None:
            raise UserNotFoundError(target.uid)
        fresh_actor = await self.users.get_by_id(actor.id)
        if fresh_actor is None:
            raise UnauthorizedActionError("Actor no longer exists")
        return fresh_target, fresh_actor

    async def _reserved(self, provider: str, *names: str) -> list[Role]:
        found = await self.roles.get_by_names(names, provider)
        missing = [name for name in names if name not in found]
        if missing:
            raise RoleNotFoundError(
                message=f"Provider has no '{missing[0]}' role",
                details={"role": missing[0], "provider": provider},
            )
        return [found[name] for name in names]

    async def _save(self) -> None:
        try:
            await self.users.flush()
            await self.users.commit()
        except Exception:
            await self.users.rollback()
            raise

    async def get_managed_user(self, uid: str, actor: User) -> User:
        """Get a user the actor administers.

        Raises:
            UserNotFoundError: If no user has this UID
            UnauthorizedActionError: If the actor is not an administrator
                of the user
        """
        target = await self._lookup(uid)
        target, actor = await self._reload(target, actor)
        ensure_admin_of(actor, target)
        return target

    async def ban(self, uid: str, actor: User) -> User:
        """Replace all of a user's roles with the denied role.

        Banning a banned user changes nothing.
        """
        target = await self._lookup(uid)

        async with role_locks.user(target.id):
            target, actor = await self._reload(target, actor)
            ensure_admin_of(actor, target)
            (denied,) = await self._reserved(target.provider, DENIED_ROLE)

            if [role.id for role in target.roles] == [denied.id]:
                return target

            target.roles = [denied]
            await self._save()

        logger.info(
            "user_banned",
            user_uid=target.uid,
            provider=target.provider,
            actor_id=str(actor.id),
        )
        return target

    async def unban(self, uid: str, actor: User) -> User:
        """Remove the denied role and grant the user role.

        Raises:
            UnauthorizedActionError: If the actor is not an administrator of
                the user, or does not outrank the denied and user roles
        """
        target = await self._lookup(uid)

        async with role_locks.user(target.id):
            target, actor = await self._reload(target, actor)
            ensure_admin_of(actor, target)
            denied, user_role = await self._reserved(target.provider, DENIED_ROLE, USER_ROLE)
            ensure_outranks(actor, denied)
            ensure_outranks(actor, user_role)

            held = {role.id for role in target.roles}
            if denied.id not in held and user_role.id in held:
                return target

            target.roles = [role for role in target.roles if role.id != denied.id]
            if user_role.id not in held:
                target.roles.append(user_role)
            await self._save()

        logger.info(
            "user_unbanned",
            user_uid=target.uid,
            provider=target.provider,
            actor_id=str(actor.id),
        )
        return target

    async def approve(self, uid: str, actor: User) -> User:
        """Lift the pending gate of a user.

        Only the pending role is removed; approval grants nothing else.

        Raises:
            UnauthorizedActionError: If the actor is not an administrator of
                the user, or does not outrank the pending role
            LastRoleError: If pending is the only role the user holds
        """
        target = await self._lookup(uid)

        async with role_locks.user(target.id):
            target, actor = await self._reload(target, actor)
            ensure_admin_of(actor, target)
            (pending,) = await self._reserved(target.provider, PENDING_ROLE)
            ensure_outranks(actor, pending)

            if pending.id not in {role.id for role in target.roles}:
                return target
            if len(target.roles) == 1:
                raise LastRoleError(
                    "Approving would leave the user without a role",
                    details={"user_uid": target.uid, "role": pending.name},
                )

            target.roles = [role for role in target.roles if role.id != pending.id]
            await self._save()

        logger.info(
            "user_approved",
            user_uid=target.uid,
            provider=target.provider,
            actor_id=str(actor.id),
        )
        return target

    async def assign_role(self, uid: str, role_id: UUID, actor: User) -> User:
        """Bind a role to a user.

        Raises:
            UserNotFoundError: If no user has this UID
            RoleNotFoundError: If the role does not exist
            UnauthorizedActionError: If the actor is not an administrator of
                the user or does not outrank the role
        """
        target = await self._lookup(uid)

        async with role_locks.user(target.id), role_locks.role(role_id):
            target, actor = await self._reload(target, actor)
            ensure_admin_of(actor, target)

            role = await self.roles.get_by_id(role_id, for_update=True)
            if not role:
                raise RoleNotFoundError(role_id)
            ensure_outranks(actor, role)

            if role.id in {r.id for r in target.roles}:
                return target

            target.roles.append(role)
            await self._save()

        logger.info(
            "user_role_assigned",
            user_uid=target.uid,
            role=role.name,
            provider=target.provider,
            actor_id=str(actor.id),
        )
        return target

    async def remove_role(self, uid: str, role_id: UUID, actor: User) -> User:
        """Unbind a role from a user.

        Raises:
            UserNotFoundError: If no user has this UID
            RoleNotFoundError: If the role does not exist
            UnauthorizedActionError: If the actor is not an administrator of
                the user or does not outrank the role
            LastRoleError: If it is the user's only role
        """
        target = await self._lookup(uid)

        async with role_locks.user(target.id):
            target, actor = await self._reload(target, actor)
            ensure_admin_of(actor, target)

            role = await self.roles.get_by_id(role_id)
            if not role:
                raise RoleNotFoundError(role_id)
            ensure_outranks(actor, role)

            if role.id not in {r.id for r in target.roles}:
                return target
            if len(target.roles) == 1:
                raise LastRoleError(details={"user_uid": target.uid, "role": role.name})

            target.roles = [r for r in target.roles if r.id != role.id]
            await self._save()

        logger.info(
            "user_role_removed",
            user_uid=target.uid,
            role=role.name,
            provider=target.provider,
            actor_id=str(actor.id),
        )
        return target


UserRoleBindingSvc = Annotated[UserRoleBinding, Depends(UserRoleBinding)]
