"""Invitation API routes."""

from tenant_roles.api.dependencies import DBSession
from tenant_roles.core.constants import CAN_MANAGE_USERS
from tenant_roles.core.notifications import Notifications, dispatch
from tenant_roles.core.permissions.decorators import require_permission
from tenant_roles.core.permissions.dependencies import CurrentActor
from tenant_roles.modules.invitations import router
from tenant_roles.modules.invitations.schemas import (
    InvitationResponse,
    InviteRequest,
    InviteResponse,
)
from tenant_roles.modules.invitations.services import InvitationSvc


@router.post(
    "",
    response_model=InviteResponse,
    summary="Invite users",
    description=(
        "Create an invitation per address, or refresh an existing one, "
        "and send each invitee their invitation."
    ),
)
@require_permission(CAN_MANAGE_USERS)
async def invite_users(
    data: InviteRequest,
    service: InvitationSvc,
    notifier: Notifications,
    current_user: CurrentActor,
    db: DBSession,
) -> InviteResponse:
    invitations = await service.invite(list(data.emails), current_user)

    for invitation in invitations:
        await dispatch(
            notifier.invitation(current_user.name, invitation),
            kind="invitation",
            email=invitation.email,
        )

    return InviteResponse(
        items=[InvitationResponse.model_validate(inv) for inv in invitations],
        total=len(invitations),
    )
