"""Tests for users and organizations."""

import pytest

from helpdesk_sdk import HelpdeskClient
from helpdesk_sdk.exceptions import FieldError, ValidationError


@pytest.fixture
def acme(client):
    return client.organizations().create(name="Acme", domain_names=["acme.com"])


class TestUsers:
    """Tests for user CRUD and search."""

    def test_create_defaults(self, client):
        user = client.users().create(name="Bob")
        assert user.role == "end-user"
        assert user.active is True
        assert user.verified is False
        assert user.tags == []

    def test_duplicate_email_rejected(self, client, store):
        client.users().create(name="Bob", email="bob@acme.com")
        with pytest.raises(ValidationError) as exc_info:
            client.users().create(name="Robert", email="Bob@Acme.com")
        assert str(exc_info.value) == "Email: has already been taken"
        assert store.count("users") == 1

    def test_invalid_role_rejected(self, client):
        with pytest.raises(ValidationError) as exc_info:
            client.users().create(name="Bob", role="overlord")
        assert exc_info.value.errors == [FieldError(field="role", message="is not included in the list")]

    def test_update_email(self, client):
        bob = client.users().create(name="Bob", email="bob@acme.com")
        client.users().create(name="Carol", email="carol@acme.com")

        bob.email = "BOB@acme.com"
        bob.save()
        assert bob.email == "BOB@acme.com"

        bob.email = "carol@acme.com"
        with pytest.raises(ValidationError):
            bob.save()

    def test_search(self, client):
        client.users().create(name="Bob Smith", email="bob@acme.com")
        client.users().create(name="Carol", email="carol@acme.com", external_id="ext-7")
        client.users().create(name="Bobby Tables", email="tables@example.com")

        assert [u.name for u in client.users().search("bob")] == ["Bob Smith", "Bobby Tables"]
        assert [u.name for u in client.users().search("carol@acme.com")] == ["Carol"]
        assert [u.name for u in client.users().search("EXT-7")] == ["Carol"]
        assert list(client.users().search("acme.com")) == []

    def test_organization_users(self, client, acme):
        inside = client.users().create(name="Bob", organization_id=acme.identity)
        client.users().create(name="Carol")

        assert list(acme.users()) == [inside]
        assert inside.organization.resolve() == acme

    def test_destroy(self, client):
        user = client.users().create(name="Bob")
        user.destroy()
        assert client.users().get(user.identity) is None


class TestOrganizations:
    """Tests for organization CRUD."""

    def test_create(self, acme):
        assert acme.identity == 1
        assert acme.domain_names == ["acme.com"]
        assert acme.shared_tickets is False

    def test_duplicate_name_rejected(self, client, acme):
        with pytest.raises(ValidationError) as exc_info:
            client.organizations().create(name="ACME")
        assert str(exc_info.value) == "Name: has already been taken"

    def test_rename(self, client, acme):
        acme.name = "Acme Corp"
        acme.save()
        assert client.organizations().get(acme.identity).name == "Acme Corp"

    def test_blank_name_rejected_on_update(self, acme):
        acme.name = ""
        with pytest.raises(ValidationError) as exc_info:
            acme.save()
        assert str(exc_info.value) == "Name: cannot be blank"

    def test_listing(self, client, acme):
        client.organizations().create(name="Globex")
        assert [o.name for o in client.organizations()] == ["Acme", "Globex"]

    def test_destroy(self, client, acme):
        acme.destroy()
        assert client.organizations().get(acme.identity) is None


class TestCurrentUser:
    """Tests for Users.current()."""

    def test_mock_default_agent(self, client):
        user = client.users().current()
        assert user.email == "agent@mock.helpdesk.test"
        assert user.name == "agent"
        assert user.role == "admin"

    def test_same_user_on_every_call(self, client):
        assert client.users().current() == client.users().current()
        assert client.users().all().count == 1

    def test_username_picks_user(self, store):
        client = HelpdeskClient(mock=True, store=store, username="me@acme.com")
        assert client.users().current().email == "me@acme.com"

    def test_existing_user_reused(self, store):
        client = HelpdeskClient(mock=True, store=store, username="Me@Acme.com")
        me = client.users().create(name="Me", email="me@acme.com")
        assert client.users().current() == me
