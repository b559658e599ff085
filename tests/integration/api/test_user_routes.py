"""Integration tests for the user administration API."""

import pytest

from tenant_roles.core.notifications import get_notifier


pytestmark = pytest.mark.integration

USERS = "/api/v1/admin/users"


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    async def user_approved(self, user) -> None:
        if self.fail:
            raise ConnectionError("mailer down")
        self.sent.append(("user_approved", user.uid))

    async def invitation(self, inviter_name, invitation) -> None:
        self.sent.append(("invitation", invitation.email))

    async def password_reset(self, user) -> None:
        if self.fail:
            raise ConnectionError("mailer down")
        self.sent.append(("password_reset", user.uid))


@pytest.fixture
def notifier(app) -> RecordingNotifier:
    recorder = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recorder
    return recorder


@pytest.fixture
def broken_notifier(app) -> RecordingNotifier:
    recorder = RecordingNotifier(fail=True)
    app.dependency_overrides[get_notifier] = lambda: recorder
    return recorder


class TestUserEndpoints:
    async def test_requires_can_manage_users(self, client, acme, as_actor):
        response = await client.get(
            f"{USERS}/{acme.users['pat'].uid}", headers=as_actor(acme.users["alice"])
        )

        assert response.status_code == 403
        assert response.json()["required_permission"] == "can_manage_users"

    async def test_get_user(self, client, acme, as_actor):
        response = await client.get(
            f"{USERS}/{acme.users['pat'].uid}", headers=as_actor(acme.users["manager"])
        )

        assert response.status_code == 200
        body = response.json()
        assert body["uid"] == acme.users["pat"].uid
        assert [role["name"] for role in body["roles"]] == ["user", "pending"]

    async def test_get_higher_user(self, client, acme, as_actor):
        response = await client.get(
            f"{USERS}/{acme.users['root'].uid}", headers=as_actor(acme.users["manager"])
        )

        assert response.status_code == 403
        assert response.json()["type"].endswith("/unauthorized")

    async def test_get_unknown_user(self, client, acme, as_actor):
        response = await client.get(f"{USERS}/u-missing", headers=as_actor(acme.users["root"]))

        assert response.status_code == 404
        assert response.json()["type"].endswith("/user_not_found")

    async def test_ban_and_unban(self, client, acme, as_actor):
        headers = as_actor(acme.users["manager"])
        uid = acme.users["alice"].uid

        response = await client.post(f"{USERS}/{uid}/ban", headers=headers)
        assert response.status_code == 200
        assert [role["name"] for role in response.json()["roles"]] == ["denied"]

        response = await client.post(f"{USERS}/{uid}/unban", headers=headers)
        assert response.status_code == 200
        assert [role["name"] for role in response.json()["roles"]] == ["user"]

    async def test_approve_notifies(self, client, acme, as_actor, notifier):
        uid = acme.users["pat"].uid

        response = await client.post(
            f"{USERS}/{uid}/approve", headers=as_actor(acme.users["manager"])
        )

        assert response.status_code == 200
        assert [role["name"] for role in response.json()["roles"]] == ["user"]
        assert notifier.sent == [("user_approved", uid)]

    async def test_approve_survives_notifier_failure(
        self, client, acme, as_actor, broken_notifier
    ):
        headers = as_actor(acme.users["manager"])
        uid = acme.users["pat"].uid

        response = await client.post(f"{USERS}/{uid}/approve", headers=headers)
        assert response.status_code == 200

        response = await client.get(f"{USERS}/{uid}", headers=headers)
        assert [role["name"] for role in response.json()["roles"]] == ["user"]

    async def test_reset_password(self, client, acme, as_actor, notifier):
        uid = acme.users["alice"].uid

        headers = as_actor(acme.users["manager"])
        response = await client.post(f"{USERS}/{uid}/reset", headers=headers)

        assert response.status_code == 202
        assert response.json() == {"uid": uid, "queued": True}
        assert notifier.sent == [("password_reset", uid)]

    async def test_reset_password_not_queued(self, client, acme, as_actor, broken_notifier):
        uid = acme.users["alice"].uid

        headers = as_actor(acme.users["manager"])
        response = await client.post(f"{USERS}/{uid}/reset", headers=headers)

        assert response.status_code == 202
        assert response.json()["queued"] is False

    async def test_reset_higher_user(self, client, acme, as_actor, notifier):
        response = await client.post(
            f"{USERS}/{acme.users['root'].uid}/reset", headers=as_actor(acme.users["manager"])
        )

        assert response.status_code == 403
        assert notifier.sent == []

    async def test_assign_and_remove_role(self, client, acme, make_role, as_actor):
        support = await make_role("support", 5)
        headers = as_actor(acme.users["manager"])
        path = f"{USERS}/{acme.users['alice'].uid}/roles/{support.id}"

        response = await client.put(path, headers=headers)
        assert response.status_code == 200
        assert [role["name"] for role in response.json()["roles"]] == ["user", "support"]

        response = await client.delete(path, headers=headers)
        assert response.status_code == 200
        assert [role["name"] for role in response.json()["roles"]] == ["user"]

    async def test_remove_last_role(self, client, acme, as_actor):
        response = await client.delete(
            f"{USERS}/{acme.users['alice'].uid}/roles/{acme.roles['user'].id}",
            headers=as_actor(acme.users["manager"]),
        )

        assert response.status_code == 400
        assert response.json()["type"].endswith("/last_role")
