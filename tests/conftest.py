"""Pytest configuration and shared fixtures.

Each test gets its own SQLite database file (set TEST_DATABASE_URL to
run against PostgreSQL instead). Services that commit get sessions from
``session_factory`` so concurrent callers really use separate sessions.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from tenant_roles.api.dependencies import DBSession
from tenant_roles.core.constants import (
    ADMIN_ROLE,
    CAN_CREATE_ROOMS,
    CAN_EDIT_ROLES,
    CAN_MANAGE_USERS,
    DEFAULT_ROLE_PERMISSIONS,
    DENIED_ROLE,
    PENDING_ROLE,
    USER_ROLE,
)
from tenant_roles.core.database import Base, get_db
from tenant_roles.core.locks import role_locks
from tenant_roles.core.permissions.dependencies import get_current_actor
from tenant_roles.core.permissions.models import Role, RolePermission
from tenant_roles.modules.invitations.models import Invitation  # noqa: F401
from tenant_roles.modules.users.models import User
from tests.factories.role import RoleFactory
from tests.factories.user import UserFactory


ACTOR_HEADER = "X-Actor-ID"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'roles.db'}"
    engine = create_async_engine(url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session used to arrange test data; fixtures commit what they create."""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def _fresh_locks():
    """Locks bind to the running event loop, and every test has its own."""
    role_locks.clear()
    yield
    role_locks.clear()


@pytest.fixture
def make_role(db: AsyncSession) -> Callable[..., Awaitable[Role]]:
    async def _make_role(
        name: str,
        priority: int,
        *,
        provider: str = "acme",
        reserved: bool = False,
        permissions: dict[str, bool] | None = None,
    ) -> Role:
        role = RoleFactory.build(name=name, priority=priority, provider=provider, reserved=reserved)
        db.add(role)
        await db.flush()
        for action, value in (permissions or {}).items():
            db.add(RolePermission(role_id=role.id, action=action, value=value))
        await db.commit()
        return role

    return _make_role


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make_user(*roles: Role, provider: str = "acme", name: str | None = None) -> User:
        overrides = {"provider": provider}
        if name:
            overrides["name"] = name
        user = UserFactory.build(**overrides)
        user.roles = list(roles)
        db.add(user)
        await db.commit()
        return user

    return _make_user


@dataclass
class Provider:
    """Seeded provider: roles by name and one user per role."""

    name: str
    roles: dict[str, Role]
    users: dict[str, User]


@pytest.fixture
async def acme(make_role, make_user) -> Provider:
    """Provider "acme": admin:0, manager:1, user:2, pending:3, denied:4.

    Only manager is not reserved. Users: ``root`` (admin), ``manager``
    (manager), ``alice`` (user), ``pat`` (user + pending), ``mallory``
    (denied).
    """
    roles = {
        ADMIN_ROLE: await make_role(
            ADMIN_ROLE, 0, reserved=True, permissions=DEFAULT_ROLE_PERMISSIONS[ADMIN_ROLE]
        ),
        "manager": await make_role(
            "manager",
            1,
            permissions={CAN_EDIT_ROLES: True, CAN_MANAGE_USERS: True, CAN_CREATE_ROOMS: True},
        ),
        USER_ROLE: await make_role(
            USER_ROLE, 2, reserved=True, permissions=DEFAULT_ROLE_PERMISSIONS[USER_ROLE]
        ),
        PENDING_ROLE: await make_role(PENDING_ROLE, 3, reserved=True),
        DENIED_ROLE: await make_role(DENIED_ROLE, 4, reserved=True),
    }
    users = {
        "root": await make_user(roles[ADMIN_ROLE], name="Root"),
        "manager": await make_user(roles["manager"], name="Morgan Manager"),
        "alice": await make_user(roles[USER_ROLE], name="Alice"),
        "pat": await make_user(roles[USER_ROLE], roles[PENDING_ROLE], name="Pat"),
        "mallory": await make_user(roles[DENIED_ROLE], name="Mallory"),
    }
    return Provider(name="acme", roles=roles, users=users)


@pytest.fixture
def app(session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """Application wired to the test database.

    The identity layer is replaced by a header naming the actor's ID.
    """
    from tenant_roles.main import create_app

    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def actor_from_header(request: Request, db: DBSession):
        request.state.user_id = request.headers.get(ACTOR_HEADER)
        return await get_current_actor(request, db)

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_current_actor] = actor_from_header
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def as_actor() -> Callable[[User], dict[str, str]]:
    """Build request headers identifying a user as the acting administrator."""

    def _headers(user: User) -> dict[str, str]:
        return {ACTOR_HEADER: str(user.id)}

    return _headers
