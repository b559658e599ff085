"""Database layer - session management, base models, and mixins."""

from tenant_roles.core.database.base import Base, ProviderMixin, TimestampMixin, UUIDMixin
from tenant_roles.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
    init_db,
)


__all__ = [
    "Base",
    "ProviderMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "init_db",
]
