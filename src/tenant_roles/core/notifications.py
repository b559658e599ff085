"""Outbound notifications triggered by administrative actions.

Delivery itself (email templates, SMTP, reset tokens) belongs to the
notification layer of the platform. The role engine only calls a
Notifier after its change has committed, through ``dispatch`` so a
delivery failure is logged and never undoes the committed change.
"""

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Annotated, Any, Protocol

import structlog
from fastapi import Depends


if TYPE_CHECKING:
    from tenant_roles.modules.invitations.models import Invitation
    from tenant_roles.modules.users.models import User


logger = structlog.get_logger()


class Notifier(Protocol):
    async def user_approved(self, user: "User") -> None: ...

    async def invitation(self, inviter_name: str, invitation: "Invitation") -> None: ...

    async def password_reset(self, user: "User") -> None: ...


class LogNotifier:
    """Notifier that records the request in the log for the mailer to pick up."""

    async def user_approved(self, user: "User") -> None:
        logger.info(
            "notification_queued",
            kind="user_approved",
            user_uid=user.uid,
            provider=user.provider,
        )

    async def invitation(self, inviter_name: str, invitation: "Invitation") -> None:
        logger.info(
            "notification_queued",
            kind="invitation",
            inviter=inviter_name,
            email=invitation.email,
            provider=invitation.provider,
        )

    async def password_reset(self, user: "User") -> None:
        logger.info(
            "notification_queued",
            kind="password_reset",
            user_uid=user.uid,
            provider=user.provider,
        )


async def dispatch(notification: Awaitable[None], **context: Any) -> bool:
    """Await a notification, logging instead of raising on failure.

    Returns:
        True if the notifier completed, False if it failed
    """
    try:
        await notification
    except Exception as exc:
        logger.exception("notification_failed", error=str(exc), **context)
        return False
    return True


def get_notifier() -> Notifier:
    return LogNotifier()


Notifications = Annotated[Notifier, Depends(get_notifier)]
