"""User database models."""

from secrets import token_hex

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tenant_roles.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_UID_LENGTH
from tenant_roles.core.database.base import Base, ProviderMixin, TimestampMixin, UUIDMixin
from tenant_roles.core.permissions.models import Role


def _generate_uid() -> str:
    """Public identifier used in admin URLs instead of the primary key."""
    return f"u-{token_hex(6)}"


class User(Base, UUIDMixin, TimestampMixin, ProviderMixin):
    """An end user of a provider.

    A user may hold several roles; the one with the lowest priority value
    decides what the user may administer (see core.permissions.guard).
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("provider", "email", name="uq_user_provider_email"),
    )

    uid: Mapped[str] = mapped_column(
        String(MAX_UID_LENGTH),
        default=_generate_uid,
        unique=True,
        index=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)

    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary="user_roles",
        lazy="selectin",
        order_by=Role.priority,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, uid={self.uid}, provider={self.provider})>"
