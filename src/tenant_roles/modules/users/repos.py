"""User repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from tenant_roles.api.dependencies import DBSession
from tenant_roles.modules.users.models import User


class UserRepository:
    """Repository for User database operations.

    Users are always returned with their role set loaded fresh from the
    database, replacing whatever the session had cached, so privilege
    checks never run against a stale role set.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    def _select(self):
        return (
            select(User)
            .options(selectinload(User.roles))
            .execution_options(populate_existing=True)
        )

    async def get_by_id(self, user_id: UUID, provider: str | None = None) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID
            provider: Optional provider for scoping

        Returns:
            User if found, None otherwise
        """
        stmt = self._select().where(User.id == user_id)
        if provider:
            stmt = stmt.where(User.provider == provider)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_uid(self, uid: str, provider: str | None = None) -> User | None:
        """Get a user by public UID."""
        stmt = self._select().where(User.uid == uid)
        if provider:
            stmt = stmt.where(User.provider == provider)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


UserRepo = Annotated[UserRepository, Depends(UserRepository)]
