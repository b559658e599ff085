"""Factory for Role model."""

from uuid import uuid4

from polyfactory import Ignore
from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from tenant_roles.core.permissions.models import Role


class RoleFactory(SQLAlchemyFactory[Role]):
    """Factory for generating non-reserved roles.

    Callers always pass ``provider`` and ``priority``; priorities are
    unique per provider and random ones would collide.
    """

    __model__ = Role

    # Left to the database defaults
    created_at = Ignore()
    updated_at = Ignore()

    @classmethod
    def name(cls) -> str:
        return f"{cls.__faker__.job().split()[0].lower()}-{uuid4().hex[:6]}"

    @classmethod
    def provider(cls) -> str:
        return "acme"

    @classmethod
    def reserved(cls) -> bool:
        return False
