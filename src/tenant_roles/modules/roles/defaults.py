"""Reserved role seeding.

Every provider starts with the reserved roles admin, user, pending and
denied, in that order of power. They are only ever created here.
"""

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_roles.core.constants import DEFAULT_ROLE_PERMISSIONS, RESERVED_ROLE_NAMES
from tenant_roles.core.permissions.models import Role, RolePermission


logger = structlog.get_logger()


async def seed_reserved_roles(session: AsyncSession, provider: str) -> list[Role]:
    """Create the reserved roles a provider is missing.

    Safe to run repeatedly: existing roles are left as they are and new
    ones are appended below the provider's current lowest role.

    Args:
        session: Database session; the caller commits
        provider: Provider to seed

    Returns:
        The provider's reserved roles, most powerful first
    """
    result = await session.execute(
        select(Role).where(Role.provider == provider, Role.name.in_(RESERVED_ROLE_NAMES))
    )
    existing = {role.name: role for role in result.scalars().all()}

    result = await session.execute(select(func.max(Role.priority)).where(Role.provider == provider))
    current_max = result.scalar_one()
    next_priority = 0 if current_max is None else current_max + 1

    created = []
    for name in RESERVED_ROLE_NAMES:
        if name in existing:
            continue
        role = Role(name=name, provider=provider, priority=next_priority, reserved=True)
        session.add(role)
        await session.flush()
        for action, value in DEFAULT_ROLE_PERMISSIONS[name].items():
            session.add(RolePermission(role_id=role.id, action=action, value=value))
        existing[name] = role
        created.append(name)
        next_priority += 1

    await session.flush()
    if created:
        logger.info("reserved_roles_seeded", provider=provider, roles=created)

    return sorted(existing.values(), key=lambda role: role.priority)
