"""Role hierarchy database models.

This module defines the provider-scoped RBAC models:
- Role: A named, prioritized role within a provider
- RolePermission: The value of one action for one role
- UserRole: Junction table linking users to roles
"""

from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tenant_roles.core.constants import MAX_PERMISSION_ACTION_LENGTH, MAX_ROLE_NAME_LENGTH
from tenant_roles.core.database.base import Base, ProviderMixin, TimestampMixin, UUIDMixin


class Role(Base, UUIDMixin, TimestampMixin, ProviderMixin):
    """Role model representing one rank of a provider's hierarchy.

    Attributes:
        name: Role name, unique within the provider
        priority: Rank within the provider; lower means more powerful.
            Unique per provider and only changed by the PriorityOrderer.
        reserved: True for the system roles (admin, user, pending, denied),
            which can never be renamed, reordered or deleted.
    """

    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("provider", "name", name="uq_role_provider_name"),
        UniqueConstraint("provider", "priority", name="uq_role_provider_priority"),
    )

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    priority: Mapped[int] = mapped_column(nullable=False)
    reserved: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Role(id={self.id}, name={self.name}, provider={self.provider}, "
            f"priority={self.priority})>"
        )


class RolePermission(Base, UUIDMixin, TimestampMixin):
    """Value of a single action for a role.

    Rows are keyed by (role_id, action). An action without a row is
    treated as not granted.
    """

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "action", name="uq_role_permission_action"),
    )

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    action: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_ACTION_LENGTH),
        nullable=False,
    )
    value: Mapped[bool] = mapped_column(default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<RolePermission(role_id={self.role_id}, {self.action}={self.value})>"


class UserRole(Base, TimestampMixin):
    """Junction table linking users to roles."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_role"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
