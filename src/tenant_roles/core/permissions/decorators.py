"""Permission decorators for route protection.

Routes protected here must declare ``current_user`` and ``db``
parameters so the decorator can find the actor and session.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

import structlog

from tenant_roles.core.errors import ForbiddenError, UnauthorizedError
from tenant_roles.core.permissions.checker import PermissionChecker


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from tenant_roles.modules.users.models import User


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def _get_user_and_db(
    kwargs: dict[str, Any],
) -> tuple["User | None", "AsyncSession | None"]:
    user = cast("User | None", kwargs.get("current_user"))
    db = cast("AsyncSession | None", kwargs.get("db"))
    return user, db


def require_permission(
    action: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires the actor to be granted ``action``.

    Usage:
        @router.delete("/{role_id}")
        @require_permission(CAN_EDIT_ROLES)
        async def delete_role(role_id: UUID, current_user: CurrentActor, db: DBSession):
            ...

    Raises:
        UnauthorizedError: If no actor was resolved
        ForbiddenError: If the actor's effective permissions lack ``action``
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, db = _get_user_and_db(kwargs)

            if not user:
                raise UnauthorizedError(error_code="missing_actor")

            if not db:
                raise ForbiddenError(
                    "Permission check failed",
                    error_code="permission_check_failed",
                )

            if not await PermissionChecker(db).has_permission(user, action):
                logger.info(
                    "permission_denied",
                    user_id=str(user.id),
                    provider=user.provider,
                    action=action,
                )
                raise ForbiddenError(
                    f"Missing required permission: {action}",
                    error_code="permission_denied",
                    details={"required_permission": action},
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator
