"""FastAPI dependencies resolving the acting administrator.

Authentication is done upstream: the identity layer stores the
authenticated user's ID on ``request.state.user_id``. This module only
loads that user with a fresh role set.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, Request

from tenant_roles.api.dependencies import DBSession
from tenant_roles.core.errors import UnauthorizedError


async def get_current_actor(
    request: Request,
    db: DBSession,
) -> Any:  # Returns User, but use Any to avoid circular import
    """Load the acting user for this request.

    Raises:
        UnauthorizedError: If the identity layer supplied no user, or the
            user no longer exists
    """
    from tenant_roles.modules.users.repos import UserRepository  # noqa: PLC0415

    raw_id = getattr(request.state, "user_id", None)
    if raw_id is None:
        raise UnauthorizedError("No authenticated actor", error_code="missing_actor")

    try:
        user_id = raw_id if isinstance(raw_id, UUID) else UUID(str(raw_id))
    except ValueError:
        raise UnauthorizedError("No authenticated actor", error_code="missing_actor") from None

    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise UnauthorizedError("Actor not found", error_code="actor_not_found")

    request.state.actor_id = user.id
    request.state.provider = user.provider
    return user


CurrentActor = Annotated[Any, Depends(get_current_actor)]
