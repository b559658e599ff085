"""Invitation database models."""

from secrets import token_urlsafe

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tenant_roles.core.constants import (
    INVITE_TOKEN_BYTES,
    MAX_EMAIL_LENGTH,
    MAX_INVITE_TOKEN_LENGTH,
)
from tenant_roles.core.database.base import Base, ProviderMixin, TimestampMixin, UUIDMixin


def _generate_invite_token() -> str:
    return token_urlsafe(INVITE_TOKEN_BYTES)


class Invitation(Base, UUIDMixin, TimestampMixin, ProviderMixin):
    """An invitation to register with a provider.

    There is at most one invitation per (email, provider); inviting the
    same address again refreshes ``updated_at`` and keeps the token.
    """

    __tablename__ = "invitations"
    __table_args__ = (
        UniqueConstraint("email", "provider", name="uq_invitation_email_provider"),
    )

    email: Mapped[str] = mapped_column(String(MAX_EMAIL_LENGTH), nullable=False, index=True)
    invite_token: Mapped[str] = mapped_column(
        String(MAX_INVITE_TOKEN_LENGTH),
        default=_generate_invite_token,
        unique=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Invitation(email={self.email}, provider={self.provider})>"
