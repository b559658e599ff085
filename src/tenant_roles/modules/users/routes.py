"""User administration API routes."""

from uuid import UUID

from fastapi import status

from tenant_roles.api.dependencies import DBSession
from tenant_roles.core.constants import CAN_MANAGE_USERS
from tenant_roles.core.notifications import Notifications, dispatch
from tenant_roles.core.permissions.decorators import require_permission
from tenant_roles.core.permissions.dependencies import CurrentActor
from tenant_roles.modules.users import router
from tenant_roles.modules.users.schemas import PasswordResetResponse, UserResponse
from tenant_roles.modules.users.services import UserRoleBindingSvc


@router.get(
    "/{uid}",
    response_model=UserResponse,
    summary="Get user",
    description="Get a user the actor administers, with their roles.",
)
@require_permission(CAN_MANAGE_USERS)
async def get_user(
    uid: str,
    binding: UserRoleBindingSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> UserResponse:
    user = await binding.get_managed_user(uid, current_user)
    return UserResponse.model_validate(user)


@router.post(
    "/{uid}/ban",
    response_model=UserResponse,
    summary="Ban user",
    description="Replace all of the user's roles with the denied role.",
)
@require_permission(CAN_MANAGE_USERS)
async def ban_user(
    uid: str,
    binding: UserRoleBindingSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> UserResponse:
    user = await binding.ban(uid, current_user)
    return UserResponse.model_validate(user)


@router.post(
    "/{uid}/unban",
    response_model=UserResponse,
    summary="Unban user",
)
@require_permission(CAN_MANAGE_USERS)
async def unban_user(
    uid: str,
    binding: UserRoleBindingSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> UserResponse:
    user = await binding.unban(uid, current_user)
    return UserResponse.model_validate(user)


@router.post(
    "/{uid}/approve",
    response_model=UserResponse,
    summary="Approve user",
    description="Remove the pending role and notify the user.",
)
@require_permission(CAN_MANAGE_USERS)
async def approve_user(
    uid: str,
    binding: UserRoleBindingSvc,
    notifier: Notifications,
    current_user: CurrentActor,
    db: DBSession,
) -> UserResponse:
    user = await binding.approve(uid, current_user)
    await dispatch(notifier.user_approved(user), kind="user_approved", user_uid=user.uid)
    return UserResponse.model_validate(user)


@router.post(
    "/{uid}/reset",
    response_model=PasswordResetResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Send password reset",
    description="Ask the notification layer to send the user a password reset.",
)
@require_permission(CAN_MANAGE_USERS)
async def reset_password(
    uid: str,
    binding: UserRoleBindingSvc,
    notifier: Notifications,
    current_user: CurrentActor,
    db: DBSession,
) -> PasswordResetResponse:
    user = await binding.get_managed_user(uid, current_user)
    queued = await dispatch(notifier.password_reset(user), kind="password_reset", user_uid=user.uid)
    return PasswordResetResponse(uid=user.uid, queued=queued)


@router.put(
    "/{uid}/roles/{role_id}",
    response_model=UserResponse,
    summary="Assign role",
)
@require_permission(CAN_MANAGE_USERS)
async def assign_role(
    uid: str,
    role_id: UUID,
    binding: UserRoleBindingSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> UserResponse:
    user = await binding.assign_role(uid, role_id, current_user)
    return UserResponse.model_validate(user)


@router.delete(
    "/{uid}/roles/{role_id}",
    response_model=UserResponse,
    summary="Remove role",
    description="Remove a role from a user. A user always keeps at least one role.",
)
@require_permission(CAN_MANAGE_USERS)
async def remove_role(
    uid: str,
    role_id: UUID,
    binding: UserRoleBindingSvc,
    current_user: CurrentActor,
    db: DBSession,
) -> UserResponse:
    user = await binding.remove_role(uid, role_id, current_user)
    return UserResponse.model_validate(user)
