"""Integration tests for the invitation API."""

import pytest

from tenant_roles.config import settings
from tenant_roles.core.notifications import get_notifier


pytestmark = pytest.mark.integration

INVITATIONS = "/api/v1/admin/invitations"


class CollectingNotifier:
    def __init__(self) -> None:
        self.invited: list[tuple[str, str]] = []

    async def user_approved(self, user) -> None:
        pass

    async def invitation(self, inviter_name, invitation) -> None:
        self.invited.append((inviter_name, invitation.email))

    async def password_reset(self, user) -> None:
        pass


@pytest.fixture
def notifier(app) -> CollectingNotifier:
    collector = CollectingNotifier()
    app.dependency_overrides[get_notifier] = lambda: collector
    return collector


class TestInvitationEndpoints:
    async def test_disabled(self, client, acme, as_actor, notifier):
        response = await client.post(
            INVITATIONS,
            json={"emails": ["ada@acme.io"]},
            headers=as_actor(acme.users["manager"]),
        )

        assert response.status_code == 403
        assert response.json()["type"].endswith("/invitations_disabled")
        assert notifier.invited == []

    async def test_comma_separated(self, client, acme, as_actor, notifier, monkeypatch):
        monkeypatch.setattr(settings, "registration_method", "invite")

        response = await client.post(
            INVITATIONS,
            json={"emails": "ada@acme.io, grace@acme.io"},
            headers=as_actor(acme.users["manager"]),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert [item["email"] for item in body["items"]] == ["ada@acme.io", "grace@acme.io"]
        assert "invite_token" not in body["items"][0]
        assert notifier.invited == [
            ("Morgan Manager", "ada@acme.io"),
            ("Morgan Manager", "grace@acme.io"),
        ]

    async def test_invalid_email(self, client, acme, as_actor, monkeypatch):
        monkeypatch.setattr(settings, "registration_method", "invite")

        response = await client.post(
            INVITATIONS,
            json={"emails": "not-an-email"},
            headers=as_actor(acme.users["manager"]),
        )

        assert response.status_code == 422

    async def test_requires_can_manage_users(self, client, acme, as_actor, monkeypatch):
        monkeypatch.setattr(settings, "registration_method", "invite")

        response = await client.post(
            INVITATIONS,
            json={"emails": ["ada@acme.io"]},
            headers=as_actor(acme.users["alice"]),
        )

        assert response.status_code == 403
