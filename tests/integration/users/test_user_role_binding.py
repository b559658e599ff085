"""Integration tests for user role bindings.

These tests verify ban, unban, approve and role assignment including:
- idempotence
- the admin_of gate evaluated on the current role sets
- never leaving a user without a role
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_roles.core.errors import (
    LastRoleError,
    RoleNotFoundError,
    UnauthorizedActionError,
    UserNotFoundError,
)
from tenant_roles.modules.roles.repos import RoleRepository
from tenant_roles.modules.users.repos import UserRepository
from tenant_roles.modules.users.services import UserRoleBinding


pytestmark = pytest.mark.integration


@pytest.fixture
def binding(db: AsyncSession) -> UserRoleBinding:
    return UserRoleBinding(UserRepository(db), RoleRepository(db))


def names(user) -> list[str]:
    return [role.name for role in user.roles]


async def stored_roles(session_factory, user_id) -> list[str]:
    """Role names as committed, read through a separate session."""
    async with session_factory() as session:
        user = await UserRepository(session).get_by_id(user_id)
        return sorted(role.name for role in user.roles)


class TestBan:
    async def test_ban_replaces_all_roles(
        self, binding, acme, make_role, make_user, session_factory
    ):
        support = await make_role("support", 5)
        target = await make_user(acme.roles["user"], support)

        banned = await binding.ban(target.uid, acme.users["manager"])

        assert names(banned) == ["denied"]
        assert await stored_roles(session_factory, target.id) == ["denied"]

    async def test_ban_is_idempotent(self, binding, acme, session_factory):
        await binding.ban(acme.users["alice"].uid, acme.users["manager"])
        again = await binding.ban(acme.users["alice"].uid, acme.users["manager"])

        assert names(again) == ["denied"]
        assert await stored_roles(session_factory, again.id) == ["denied"]

    async def test_cannot_ban_equal_or_higher(self, binding, acme, make_user):
        peer = await make_user(acme.roles["manager"])

        with pytest.raises(UnauthorizedActionError):
            await binding.ban(peer.uid, acme.users["manager"])
        with pytest.raises(UnauthorizedActionError):
            await binding.ban(acme.users["root"].uid, acme.users["manager"])

    async def test_banned_admin_loses_power(self, binding, acme):
        await binding.ban(acme.users["manager"].uid, acme.users["root"])

        with pytest.raises(UnauthorizedActionError):
            await binding.ban(acme.users["alice"].uid, acme.users["manager"])

    async def test_unknown_user(self, binding, acme):
        with pytest.raises(UserNotFoundError):
            await binding.ban("u-nobody", acme.users["root"])


class TestUnban:
    async def test_unban_restores_user_role(self, binding, acme, session_factory):
        unbanned = await binding.unban(acme.users["mallory"].uid, acme.users["manager"])

        assert names(unbanned) == ["user"]
        assert await stored_roles(session_factory, unbanned.id) == ["user"]

    async def test_unban_is_idempotent(self, binding, acme):
        await binding.unban(acme.users["mallory"].uid, acme.users["manager"])
        again = await binding.unban(acme.users["mallory"].uid, acme.users["manager"])

        assert names(again) == ["user"]

    async def test_unban_keeps_other_roles(self, binding, acme, make_role, make_user):
        support = await make_role("support", 5)
        target = await make_user(acme.roles["denied"], support)

        unbanned = await binding.unban(target.uid, acme.users["root"])

        assert sorted(names(unbanned)) == ["support", "user"]

    async def test_regular_user_cannot_unban(self, binding, acme):
        with pytest.raises(UnauthorizedActionError):
            await binding.unban(acme.users["mallory"].uid, acme.users["alice"])


class TestApprove:
    async def test_approve_removes_pending_only(self, binding, acme, session_factory):
        approved = await binding.approve(acme.users["pat"].uid, acme.users["manager"])

        assert names(approved) == ["user"]
        assert await stored_roles(session_factory, approved.id) == ["user"]

    async def test_approve_is_idempotent(self, binding, acme):
        await binding.approve(acme.users["pat"].uid, acme.users["manager"])
        again = await binding.approve(acme.users["pat"].uid, acme.users["manager"])

        assert names(again) == ["user"]

    async def test_pending_only_user(self, binding, acme, make_user):
        waiting = await make_user(acme.roles["pending"])

        with pytest.raises(LastRoleError):
            await binding.approve(waiting.uid, acme.users["manager"])

    async def test_equal_rank_cannot_approve(self, binding, acme):
        with pytest.raises(UnauthorizedActionError):
            await binding.approve(acme.users["pat"].uid, acme.users["alice"])


class TestAssignAndRemove:
    async def test_assign_role(self, binding, acme, make_role, session_factory):
        support = await make_role("support", 5)

        updated = await binding.assign_role(
            acme.users["alice"].uid, support.id, acme.users["manager"]
        )

        assert sorted(names(updated)) == ["support", "user"]
        assert await stored_roles(session_factory, updated.id) == ["support", "user"]

    async def test_assign_is_idempotent(self, binding, acme):
        updated = await binding.assign_role(
            acme.users["alice"].uid, acme.roles["user"].id, acme.users["manager"]
        )

        assert names(updated) == ["user"]

    async def test_cannot_grant_own_or_higher_role(self, binding, acme):
        with pytest.raises(UnauthorizedActionError):
            await binding.assign_role(
                acme.users["alice"].uid, acme.roles["manager"].id, acme.users["manager"]
            )
        with pytest.raises(UnauthorizedActionError):
            await binding.assign_role(
                acme.users["alice"].uid, acme.roles["admin"].id, acme.users["manager"]
            )

    async def test_assign_unknown_role(self, binding, acme):
        with pytest.raises(RoleNotFoundError):
            await binding.assign_role(acme.users["alice"].uid, uuid4(), acme.users["manager"])

    async def test_remove_role(self, binding, acme, make_role, make_user):
        support = await make_role("support", 5)
        target = await make_user(acme.roles["user"], support)

        updated = await binding.remove_role(target.uid, support.id, acme.users["manager"])

        assert names(updated) == ["user"]

    async def test_remove_last_role(self, binding, acme):
        with pytest.raises(LastRoleError):
            await binding.remove_role(
                acme.users["alice"].uid, acme.roles["user"].id, acme.users["manager"]
            )

    async def test_remove_unheld_role_is_noop(self, binding, acme, make_role):
        support = await make_role("support", 5)

        updated = await binding.remove_role(acme.users["alice"].uid, support.id, acme.users["root"])

        assert names(updated) == ["user"]


class TestManagedUser:
    async def test_admin_reads_lower_user(self, binding, acme):
        user = await binding.get_managed_user(acme.users["alice"].uid, acme.users["manager"])

        assert user.id == acme.users["alice"].id

    async def test_lower_user_cannot_read_admin(self, binding, acme):
        with pytest.raises(UnauthorizedActionError):
            await binding.get_managed_user(acme.users["manager"].uid, acme.users["alice"])

    async def test_other_provider(self, binding, acme, make_role, make_user):
        globex_admin = await make_user(
            await make_role("admin", 0, provider="globex", reserved=True), provider="globex"
        )

        with pytest.raises(UnauthorizedActionError):
            await binding.get_managed_user(acme.users["alice"].uid, globex_admin)
