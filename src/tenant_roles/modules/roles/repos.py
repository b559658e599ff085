"""Role repository for database operations."""

from collections.abc import Mapping, Sequence
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, func, select

from tenant_roles.api.dependencies import DBSession
from tenant_roles.core.permissions.models import Role, RolePermission, UserRole


class RoleRepository:
    """Repository for Role and RolePermission rows.

    Reads used inside a critical section pass ``for_update=True``: the
    rows are locked on databases that support it and the identity map
    is refreshed with what is committed now.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_by_id(
        self,
        role_id: UUID,
        provider: str | None = None,
        *,
        for_update: bool = False,
    ) -> Role | None:
        """Get a role by ID, optionally scoped to a provider."""
        stmt = select(Role).where(Role.id == role_id)
        if provider:
            stmt = stmt.where(Role.provider == provider)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str, provider: str) -> Role | None:
        """Get a role by name (case-insensitive) within a provider."""
        stmt = select(Role).where(
            Role.provider == provider,
            func.lower(Role.name) == name.lower(),
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_names(self, names: Sequence[str], provider: str) -> dict[str, Role]:
        """Get several roles of a provider keyed by name."""
        stmt = (
            select(Role)
            .where(Role.provider == provider, Role.name.in_(list(names)))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return {role.name: role for role in result.scalars().all()}

    async def list_by_provider(self, provider: str, *, for_update: bool = False) -> list[Role]:
        """List a provider's roles from most to least powerful."""
        stmt = select(Role).where(Role.provider == provider).order_by(Role.priority)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def max_priority(self, provider: str) -> int | None:
        stmt = select(func.max(Role.priority)).where(Role.provider == provider)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def count_users(self, role_id: UUID) -> int:
        stmt = select(func.count()).select_from(UserRole).where(UserRole.role_id == role_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def create(self, role: Role) -> Role:
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def relabel(self, labels: Mapping[UUID, int], roles: Sequence[Role]) -> None:
        """Give each role in ``roles`` its new priority from ``labels``.

        Written in two flushes: first every affected row gets a distinct
        negative placeholder, then the final values. The unique
        (provider, priority) constraint never sees a duplicate.
        """
        affected = [role for role in roles if role.id in labels]
        for offset, role in enumerate(affected, start=1):
            role.priority = -offset
        await self.session.flush()

        for role in affected:
            role.priority = labels[role.id]
        await self.session.flush()

    async def delete(self, role: Role) -> None:
        """Delete a role together with its permission rows."""
        await self.session.execute(
            delete(RolePermission).where(RolePermission.role_id == role.id)
        )
        await self.session.delete(role)
        await self.session.flush()

    async def get_permission_rows(
        self, role_id: UUID, *, for_update: bool = False
    ) -> dict[str, RolePermission]:
        """Get a role's permission rows keyed by action."""
        stmt = select(RolePermission).where(RolePermission.role_id == role_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return {row.action: row for row in result.scalars().all()}

    async def get_permissions(self, role_id: UUID) -> dict[str, bool]:
        rows = await self.get_permission_rows(role_id)
        return {action: row.value for action, row in sorted(rows.items())}

    async def upsert_permissions(self, role_id: UUID, permissions: Mapping[str, bool]) -> None:
        """Create missing action rows and update existing ones.

        Actions not present in ``permissions`` are left untouched.
        """
        existing = await self.get_permission_rows(role_id, for_update=True)
        for action, value in permissions.items():
            row = existing.get(action)
            if row is None:
                self.session.add(RolePermission(role_id=role_id, action=action, value=value))
            else:
                row.value = value
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


RoleRepo = Annotated[RoleRepository, Depends(RoleRepository)]
