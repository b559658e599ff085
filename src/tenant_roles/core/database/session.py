"""Async database session management."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tenant_roles.config import settings
from tenant_roles.core.database.base import Base


async_engine = create_async_engine(
    settings.async_database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    echo=settings.database_echo,
    pool_pre_ping=True,  # Verify connections before use
)

# expire_on_commit stays off: services commit inside their critical
# section and routes still serialize the returned objects afterwards.
async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session.

    Usage:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Create all tables that do not exist yet.

    Only used when ``database_auto_create`` is enabled (local development
    and demos); the models are imported here so they register with
    ``Base.metadata`` first.
    """
    from tenant_roles.core.permissions.models import (  # noqa: F401, PLC0415
        Role,
        RolePermission,
        UserRole,
    )
    from tenant_roles.modules.invitations.models import Invitation  # noqa: F401, PLC0415
    from tenant_roles.modules.users.models import User  # noqa: F401, PLC0415

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
