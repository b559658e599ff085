"""Invitation service: create or refresh invitations for a provider."""

from datetime import UTC, datetime
from typing import Annotated

import structlog
from fastapi import Depends

from tenant_roles.config import settings
from tenant_roles.core.errors import ForbiddenError
from tenant_roles.modules.invitations.models import Invitation
from tenant_roles.modules.invitations.repos import InvitationRepo
from tenant_roles.modules.users.models import User


logger = structlog.get_logger()


class InvitationService:
    """Service for admin invitations.

    Token delivery belongs to the notification layer; this service only
    keeps one invitation row per (email, provider) up to date.
    """

    def __init__(self, repo: InvitationRepo) -> None:
        self.repo = repo

    async def create_or_update(self, email: str, provider: str) -> tuple[Invitation, bool]:
        """Create an invitation, or refresh the existing one.

        Returns:
            Tuple of (invitation, whether it was created)
        """
        invitation = await self.repo.get_by_email(email, provider)
        if invitation:
            invitation.updated_at = datetime.now(UTC)
            await self.repo.flush()
            return invitation, False

        invitation = await self.repo.create(Invitation(email=email, provider=provider))
        return invitation, True

    async def invite(self, emails: list[str], actor: User) -> list[Invitation]:
        """Invite addresses to the actor's provider.

        Args:
            emails: Addresses to invite; duplicates are invited once
            actor: The acting administrator

        Returns:
            The created or refreshed invitations, in request order

        Raises:
            ForbiddenError: If invitation-based registration is switched off
        """
        if not settings.invitations_enabled:
            raise ForbiddenError(
                "Invitations are not enabled",
                error_code="invitations_disabled",
                details={"registration_method": settings.registration_method},
            )

        unique = list(dict.fromkeys(email.strip().lower() for email in emails))
        invitations = []
        try:
            for email in unique:
                invitation, created = await self.create_or_update(email, actor.provider)
                invitations.append(invitation)
                logger.info(
                    "invitation_created" if created else "invitation_refreshed",
                    email=email,
                    provider=actor.provider,
                    actor_id=str(actor.id),
                )
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        return invitations


InvitationSvc = Annotated[InvitationService, Depends(InvitationService)]
