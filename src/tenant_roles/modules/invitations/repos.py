"""Invitation repository for database operations."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import select

from tenant_roles.api.dependencies import DBSession
from tenant_roles.modules.invitations.models import Invitation


class InvitationRepository:
    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_by_email(self, email: str, provider: str) -> Invitation | None:
        stmt = select(Invitation).where(
            Invitation.email == email,
            Invitation.provider == provider,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, invitation: Invitation) -> Invitation:
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


InvitationRepo = Annotated[InvitationRepository, Depends(InvitationRepository)]
