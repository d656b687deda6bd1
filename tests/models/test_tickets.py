"""Tests for tickets and their simulated business rules."""

import pytest

from helpdesk_sdk.exceptions import (
    FieldError,
    MissingIdentityError,
    NotFound,
    ValidationError,
)
from helpdesk_sdk.models import Ticket, User


@pytest.fixture
def acme(client):
    return client.organizations().create(name="Acme")


@pytest.fixture
def bob(client, acme):
    return client.users().create(name="Bob", email="bob@acme.com", organization_id=acme.identity)


class TestCreateTicket:
    """Tests for ticket creation."""

    def test_create_defaults(self, client):
        ticket = client.tickets().create(subject="Printer", description="On fire")

        assert ticket.identity == 1
        assert ticket.status == "new"
        assert ticket.tags == []
        assert ticket.collaborator_ids == []
        assert ticket.custom_fields == []
        assert ticket.via == {"channel": "api"}
        assert ticket.url == "https://mock.helpdesk.test/api/v2/tickets/1.json"

    def test_blank_description_rejected(self, client, store):
        """The simulated service should reject a missing description."""
        with pytest.raises(ValidationError) as exc_info:
            client.create_ticket({"ticket": {"subject": "Printer"}})

        assert str(exc_info.value) == "Description: cannot be blank"
        assert store.count("tickets") == 0

    def test_invalid_status_rejected(self, client):
        with pytest.raises(ValidationError) as exc_info:
            client.tickets().create(subject="s", description="d", status="exploded")
        assert exc_info.value.errors == [
            FieldError(field="status", message="is not included in the list")
        ]

    def test_unknown_attributes_dropped(self, client, store):
        client.create_ticket({"ticket": {"subject": "s", "description": "d", "colour": "red"}})
        assert "colour" not in store.fetch("tickets", 1)

    def test_requester_mapping_creates_user(self, client):
        """A nested requester should be created as a user."""
        ticket = client.tickets().create(
            subject="s",
            description="d",
            requester={"name": "Alice", "email": "alice@example.com"},
        )

        requester = ticket.requester.resolve()
        assert isinstance(requester, User)
        assert requester.name == "Alice"
        assert requester.email == "alice@example.com"

    def test_requester_mapping_reuses_user_by_email(self, client, bob):
        ticket = client.tickets().create(
            subject="s", description="d", requester={"email": "BOB@acme.com"}
        )
        assert ticket.requester_id == bob.identity
        assert [user.identity for user in client.users().search("bob@acme.com")] == [bob.identity]

    def test_requester_without_name_rejected(self, client, store):
        """A new requester needs a name; nothing should be written on failure."""
        with pytest.raises(ValidationError) as exc_info:
            client.tickets().create(
                subject="s", description="d", requester={"email": "nobody@example.com"}
            )

        assert str(exc_info.value) == "Requester Name: is too short (minimum one character)"
        assert store.count("users") == 0
        assert store.count("tickets") == 0

    def test_organization_defaults_to_requester_organization(self, client, acme, bob):
        ticket = client.tickets().create(subject="s", description="d", requester=bob)
        assert ticket.organization_id == acme.identity
        assert ticket.organization.resolve() == acme

    def test_explicit_organization_kept(self, client, bob):
        other = client.organizations().create(name="Other")
        ticket = client.tickets().create(
            subject="s", description="d", requester=bob, organization_id=other.identity
        )
        assert ticket.organization_id == other.identity

    def test_requester_without_identity_rejected(self, client):
        with pytest.raises(MissingIdentityError):
            client.tickets().new(subject="s", description="d", requester=User(name="new"))

    def test_custom_fields_filled_per_ticket_field(self, client):
        """Each ticket field gets an entry; values for unknown fields are dropped."""
        size = client.ticket_fields().create(type="text", title="Size")
        colour = client.ticket_fields().create(type="text", title="Colour")

        ticket = client.tickets().create(
            subject="s",
            description="d",
            custom_fields=[{"id": size.identity, "value": "XL"}, {"id": 999, "value": "?"}],
        )

        assert ticket.custom_fields == [
            {"id": size.identity, "value": "XL"},
            {"id": colour.identity, "value": None},
        ]

    def test_collaborators(self, client, bob):
        """Collaborators may be users or new-user mappings."""
        ticket = client.tickets().new(subject="s", description="d")
        ticket.collaborators = [bob, {"name": "Carol", "email": "carol@example.com"}]

        ticket.save()

        assert len(ticket.collaborator_ids) == 2
        assert ticket.collaborator_ids[0] == bob.identity
        assert [user.name for user in ticket.collaborators] == ["Bob", "Carol"]

    def test_collaborator_mapping_without_email_skipped(self, client):
        ticket = client.tickets().new(subject="s", description="d")
        ticket.collaborators = {"name": "Anonymous"}
        ticket.save()
        assert ticket.collaborator_ids == []


class TestUpdateTicket:
    """Tests for ticket updates."""

    def test_update_status(self, client, store):
        ticket = client.tickets().create(subject="s", description="d")
        ticket.status = "solved"

        ticket.save()

        assert store.fetch("tickets", ticket.identity)["status"] == "solved"
        assert ticket.subject == "s"

    def test_update_invalid_priority(self, client, store):
        ticket = client.tickets().create(subject="s", description="d")
        ticket.priority = "whenever"

        with pytest.raises(ValidationError):
            ticket.save()

        assert "priority" not in store.fetch("tickets", ticket.identity)
        assert ticket.dirty == frozenset({"priority"})

    def test_add_collaborator(self, client, bob):
        ticket = client.tickets().create(subject="s", description="d")
        ticket.collaborators = [bob]
        ticket.save()
        assert ticket.collaborator_ids == [bob.identity]

    def test_update_missing_ticket(self, client):
        ticket = Ticket.load(client, {"id": 42, "subject": "s"})
        ticket.subject = "t"
        with pytest.raises(NotFound):
            ticket.save()


class TestTicketAssociations:
    """Tests for ticket references and scoped listings."""

    def test_organization_scope(self, client, acme, bob):
        """An organization's tickets should contain only its tickets."""
        other = client.organizations().create(name="Other")
        mine = client.tickets().create(subject="mine", description="d", requester=bob)
        client.tickets().create(subject="theirs", description="d", organization_id=other.identity)

        tickets = list(acme.tickets())

        assert tickets == [mine]
        assert all(ticket.organization_id == acme.identity for ticket in tickets)

    def test_requested_tickets(self, client, bob):
        client.tickets().create(subject="a", description="d", requester=bob)
        client.tickets().create(subject="b", description="d")

        assert [ticket.subject for ticket in bob.requested_tickets()] == ["a"]

    def test_resolve_looks_up_fresh_record(self, client, bob):
        """Resolving should reflect changes made elsewhere."""
        ticket = client.tickets().create(subject="s", description="d", requester=bob)
        renamed = client.users().get(bob.identity)
        renamed.name = "Robert"
        renamed.save()

        assert ticket.requester.resolve().name == "Robert"

    def test_dangling_reference_resolves_to_none(self, client, bob):
        ticket = client.tickets().create(subject="s", description="d", requester=bob)
        bob.destroy()

        assert ticket.requester_id == bob.identity
        assert ticket.requester.resolve() is None

    def test_unset_reference_resolves_to_none(self, client):
        ticket = client.tickets().create(subject="s", description="d")
        assert ticket.assignee.resolve() is None

    def test_assign_model_sets_foreign_key(self, client, bob):
        ticket = client.tickets().create(subject="s", description="d")
        ticket.assignee = bob
        assert ticket.assignee_id == bob.identity
        assert ticket.dirty == frozenset({"assignee_id"})

    def test_destroy_removes_ticket(self, client):
        ticket = client.tickets().create(subject="s", description="d")
        ticket.destroy()
        assert client.tickets().get(ticket.identity) is None
        assert list(client.tickets()) == []


class TestCurrentUserDefaults:
    """Tests for requester and submitter defaults."""

    def test_requester_and_submitter_default_to_current_user(self, client):
        ticket = client.tickets().create(subject="s", description="d")
        current = client.users().current()

        assert ticket.requester.resolve() == current
        assert ticket.submitter.resolve() == current

    def test_explicit_requester_keeps_current_submitter(self, client, bob):
        ticket = client.tickets().create(subject="s", description="d", requester=bob)

        assert ticket.requester_id == bob.identity
        assert ticket.submitter.resolve() == client.users().current()


class TestTicketListings:
    """Tests for scoped ticket listings."""

    def test_both_scopes_count_matches_records(self, client, acme, bob):
        """A listing scoped twice should report only the records it loaded."""
        other = client.organizations().create(name="Other")
        client.tickets().create(subject="a", description="d", requester=bob)
        client.tickets().create(
            subject="b", description="d", requester=bob, organization_id=other.identity
        )

        tickets = client.tickets(organization_id=other.identity, requester_id=bob.identity).all()

        assert [ticket.subject for ticket in tickets] == ["b"]
        assert tickets.count == 1
        assert tickets.next_page is None

