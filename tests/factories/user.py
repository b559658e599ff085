"""Factory for User model."""

from uuid import uuid4

from polyfactory import Ignore
from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from tenant_roles.modules.users.models import User


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for generating users without roles.

    Roles are bound separately (see the ``make_user`` fixture).
    """

    __model__ = User

    # Left to the database defaults
    created_at = Ignore()
    updated_at = Ignore()

    @classmethod
    def uid(cls) -> str:
        return f"u-{uuid4().hex[:12]}"

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@acme.io"

    @classmethod
    def name(cls) -> str:
        return cls.__faker__.name()

    @classmethod
    def provider(cls) -> str:
        return "acme"
