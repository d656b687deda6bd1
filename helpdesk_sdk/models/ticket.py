"""Tickets and their mock business rules.

On create the simulated service:

- rejects a blank description,
- creates (or reuses, by email) the user described by a nested ``requester``,
- defaults requester and submitter to the authenticated user,
- defaults the organization to the requester's organization,
- resolves ``collaborators`` to user identities, creating users as needed,
- fills ``custom_fields`` with one entry per ticket field,
- records the description as the first comment.

An update carrying a ``comment`` records it in a new audit.
"""

from collections.abc import Mapping
from typing import Any

from helpdesk_sdk._internal.association import BelongsTo
from helpdesk_sdk._internal.attributes import AttributeType as T
from helpdesk_sdk._internal.attributes import Schema, attribute, identity
from helpdesk_sdk._internal.collection import Collection
from helpdesk_sdk._internal.mock.store import MockStore, Record
from helpdesk_sdk._internal.model import Model
from helpdesk_sdk._internal.request import (
    CreateRequest,
    DestroyRequest,
    GetRequest,
    ListRequest,
    Response,
    UpdateRequest,
)
from helpdesk_sdk.exceptions import FieldError, NotFound
from helpdesk_sdk.models.ticket_comment import (
    TicketAudits,
    TicketComment,
    TicketComments,
    record_comment,
)
from helpdesk_sdk.models.user import User, find_user_by_email

STATUSES = ("new", "open", "pending", "hold", "solved", "closed")
PRIORITIES = ("urgent", "high", "normal", "low")
TYPES = ("problem", "incident", "question", "task")


class RequesterReference(BelongsTo):
    """``requester`` also accepts a ``{name, email}`` mapping for a new user."""

    def __set__(self, instance: "Ticket", value: Any) -> None:
        if isinstance(value, Mapping):
            object.__setattr__(instance, "_requester", dict(value))
            return
        object.__setattr__(instance, "_requester", None)
        super().__set__(instance, value)


class Ticket(Model):
    schema = Schema(
        identity("id"),
        attribute("url", T.STRING, read_only=True),
        attribute("external_id", T.STRING),
        attribute("type", T.STRING),
        attribute("subject", T.STRING, required=True),
        attribute("description", T.STRING, required=True),
        attribute("priority", T.STRING),
        attribute("status", T.STRING),
        attribute("recipient", T.STRING),
        attribute("requester_id", T.INTEGER),
        attribute("submitter_id", T.INTEGER),
        attribute("assignee_id", T.INTEGER),
        attribute("organization_id", T.INTEGER),
        attribute("group_id", T.INTEGER),
        attribute("collaborator_ids", T.ARRAY),
        attribute("tags", T.ARRAY),
        attribute("custom_fields", T.ARRAY),
        attribute("due_at", T.TIME),
        attribute("has_incidents", T.BOOLEAN),
        attribute("problem_id", T.INTEGER),
        attribute("forum_topic_id", T.INTEGER),
        attribute("ticket_form_id", T.INTEGER),
        attribute("brand_id", T.INTEGER),
        attribute("via"),
        attribute("satisfaction_rating"),
        attribute("created_at", T.TIME, read_only=True),
        attribute("updated_at", T.TIME, read_only=True),
    )
    collection = "tickets"
    model_root = "ticket"
    create_request = "create_ticket"
    update_request = "update_ticket"
    destroy_request = "destroy_ticket"

    requester = RequesterReference("requester_id", "users")
    submitter = BelongsTo("submitter_id", "users")
    assignee = BelongsTo("assignee_id", "users")
    organization = BelongsTo("organization_id", "organizations")
    group = BelongsTo("group_id", "groups")

    def __init__(self, client=None, **attributes: Any) -> None:
        object.__setattr__(self, "_requester", None)
        object.__setattr__(self, "_collaborators", None)
        super().__init__(client, **attributes)

    @property
    def collaborators(self) -> list[User]:
        """Users CC'd on the ticket. Identities that no longer resolve are skipped."""
        users = self.related("users")
        found = (users.get(user_id) for user_id in self.collaborator_ids or [])
        return [user for user in found if user is not None]

    @collaborators.setter
    def collaborators(self, value: Any) -> None:
        if not isinstance(value, (list, tuple)):
            value = [value]
        pending = []
        for collaborator in value:
            if isinstance(collaborator, Mapping):
                pending.append(dict(collaborator))
            else:
                pending.append(Ticket.requester.identity_of(collaborator))
        object.__setattr__(self, "_collaborators", pending)

    def create_attributes(self) -> dict[str, Any]:
        attrs = super().create_attributes()
        if self._requester is not None:
            attrs["requester"] = self._requester
        if self._collaborators is not None:
            attrs["collaborators"] = self._collaborators
        return attrs

    def update_attributes(self) -> dict[str, Any]:
        attrs = super().update_attributes()
        if self._collaborators is not None:
            attrs["collaborators"] = self._collaborators
        return attrs

    def save(self) -> "Ticket":
        super().save()
        object.__setattr__(self, "_requester", None)
        object.__setattr__(self, "_collaborators", None)
        return self

    def comment(self, text: str, *, public: bool = True, **options: Any) -> TicketComment:
        """Add a comment to the ticket.

        Args:
            text: Comment body.
            public: Whether end-users can see the comment.
            **options: Further comment fields, e.g. ``author_id``.

        Returns:
            The new comment, taken from the audit the update produced.

        Raises:
            MissingIdentityError: If the ticket was never saved.
        """
        self.requires("identity")
        comment = {**options, "body": text, "public": public}
        response = self.client.request(
            self.update_request, {self.model_root: {"id": self.identity, "comment": comment}}
        )
        self.merge(response.body.get(self.model_root) or {})

        audit = response.body["audit"]
        event = audit["events"][0]
        return TicketComment.load(
            self.client, {"ticket_id": self.identity, "audit_id": audit.get("id"), **event}
        )

    def comments(self) -> TicketComments:
        self.requires("identity")
        return self.related("ticket_comments", ticket_id=self.identity).all()

    def audits(self) -> TicketAudits:
        self.requires("identity")
        return self.related("ticket_audits", ticket_id=self.identity).all()


class Tickets(Collection[Ticket]):
    model = Ticket
    collection_root = "tickets"
    list_request = "get_tickets"
    model_request = "get_ticket"
    scopes = ("organization_id", "requester_id")

    def _list(self, params: dict[str, Any]) -> Response:
        if "organization_id" in params and "requester_id" in params:
            return self._narrow("get_requested_tickets", params)
        if "organization_id" in params:
            return self.client.request("get_organization_tickets", params)
        if "requester_id" in params:
            return self.client.request("get_requested_tickets", params)
        return super()._list(params)


# =============================================================================
# Requests
# =============================================================================

ACCEPTED = tuple(attr.name for attr in Ticket.schema if not attr.read_only) + (
    "requester",
    "collaborators",
    "comment",
)


class TicketRequestMixin:
    """Mock helpers shared by ticket create and update."""

    def user_for(self, store: MockStore, details: Mapping[str, Any]) -> Any:
        """Identity of the user with ``details['email']``, created if missing."""
        email = details.get("email")
        if email:
            existing = find_user_by_email(store, email)
            if existing is not None:
                return existing["id"]
        user = {"name": details.get("name") or email, "email": email}
        response = self.delegate("create_user", {"user": user}, store)  # type: ignore[attr-defined]
        return response.body["user"]["id"]

    def collaborator_ids(self, store: MockStore, collaborators: list[Any]) -> list[Any]:
        ids: list[Any] = []
        for collaborator in collaborators:
            if isinstance(collaborator, Mapping):
                if not collaborator.get("email"):
                    continue
                user_id = self.user_for(store, collaborator)
            else:
                user_id = collaborator
            if user_id is not None and user_id not in ids:
                ids.append(user_id)
        return ids

    def current_user_id(self, store: MockStore) -> Any:
        """Identity of the authenticated user."""
        response = self.delegate("get_current_user", {}, store)  # type: ignore[attr-defined]
        return response.body["user"]["id"]

    def comment_errors(self, attrs: dict[str, Any]) -> list[FieldError]:
        comment = attrs.get("comment")
        if comment is not None and not (isinstance(comment, Mapping) and comment.get("body")):
            return [FieldError(field="comment", message="cannot be blank")]
        return []

    def enum_errors(self, attrs: dict[str, Any]) -> list[FieldError]:
        errors = []
        for field, allowed in (("status", STATUSES), ("priority", PRIORITIES), ("type", TYPES)):
            if attrs.get(field) is not None and attrs[field] not in allowed:
                errors.append(FieldError(field=field, message="is not included in the list"))
        return errors


class CreateTicket(TicketRequestMixin, CreateRequest):
    name = "create_ticket"
    resource = "tickets"
    root = "ticket"
    path_template = "/tickets.json"
    accepted = ACCEPTED
    required = ("description",)

    def errors(self, store: MockStore, attrs: dict[str, Any]) -> list[FieldError]:
        errors = super().errors(store, attrs)
        requester = attrs.get("requester")
        if isinstance(requester, Mapping):
            email = requester.get("email")
            if not (email and find_user_by_email(store, email)) and not requester.get("name"):
                errors.append(
                    FieldError(field="requester_name", message="is too short (minimum one character)")
                )
        return errors + self.enum_errors(attrs) + self.comment_errors(attrs)

    def defaults(self, store: MockStore, identity: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        return {
            "status": "new",
            "tags": [],
            "collaborator_ids": [],
            "has_incidents": False,
            "via": {"channel": "api"},
        }

    def custom_fields(self, store: MockStore, given: list[Any] | None) -> list[dict[str, Any]]:
        """One entry per ticket field; values for unknown fields are dropped."""
        values = {
            str(field.get("id")): field.get("value")
            for field in given or []
            if isinstance(field, Mapping)
        }
        return [
            {"id": field["id"], "value": values.get(str(field["id"]))}
            for field in store.select("ticket_fields")
        ]

    def build(self, store: MockStore, attrs: dict[str, Any]) -> dict[str, Any]:
        record = dict(attrs)
        requester = record.pop("requester", None)
        collaborators = record.pop("collaborators", None)
        record.pop("comment", None)

        if isinstance(requester, Mapping):
            record["requester_id"] = self.user_for(store, requester)
        if record.get("requester_id") is None or record.get("submitter_id") is None:
            current = self.current_user_id(store)
            for field in ("requester_id", "submitter_id"):
                if record.get(field) is None:
                    record[field] = current
        if collaborators is not None:
            record["collaborator_ids"] = self.collaborator_ids(
                store, list(record.get("collaborator_ids") or []) + list(collaborators)
            )

        if record.get("organization_id") is None and record.get("requester_id") is not None:
            try:
                owner = store.fetch("users", record["requester_id"])
            except NotFound:
                owner = {}
            record["organization_id"] = owner.get("organization_id")

        record["custom_fields"] = self.custom_fields(store, record.get("custom_fields"))
        return record

    def mock(self, store: MockStore) -> Response:
        response = super().mock(store)
        ticket = response.body[self.root]
        comment = self.attributes().get("comment") or {"body": ticket.get("description")}
        record_comment(store, ticket["id"], ticket.get("submitter_id"), comment)
        return response


class GetTicket(GetRequest):
    name = "get_ticket"
    resource = "tickets"
    root = "ticket"
    path_template = "/tickets/{id}.json"


class UpdateTicket(TicketRequestMixin, UpdateRequest):
    name = "update_ticket"
    resource = "tickets"
    root = "ticket"
    path_template = "/tickets/{id}.json"
    accepted = ACCEPTED

    def errors(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> list[FieldError]:
        return self.enum_errors(attrs) + self.comment_errors(attrs)

    def build(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> dict[str, Any]:
        record = dict(attrs)
        record.pop("requester", None)
        record.pop("comment", None)
        collaborators = record.pop("collaborators", None)
        if collaborators is not None:
            existing = record.get("collaborator_ids", current.get("collaborator_ids")) or []
            record["collaborator_ids"] = self.collaborator_ids(
                store, list(existing) + list(collaborators)
            )
        return record

    def mock(self, store: MockStore) -> Response:
        response = super().mock(store)
        comment = self.attributes().get("comment")
        if comment is not None:
            author = comment.get("author_id") or self.current_user_id(store)
            response.body["audit"] = record_comment(store, self.identity(), author, comment)
        return response


class DestroyTicket(DestroyRequest):
    name = "destroy_ticket"
    resource = "tickets"
    root = "ticket"
    path_template = "/tickets/{id}.json"


class GetTickets(ListRequest):
    name = "get_tickets"
    resource = "tickets"
    root = "ticket"
    collection_root = "tickets"
    path_template = "/tickets.json"


class GetOrganizationTickets(ListRequest):
    name = "get_organization_tickets"
    resource = "tickets"
    root = "ticket"
    collection_root = "tickets"
    path_template = "/organizations/{organization_id}/tickets.json"

    def filter(self, store: MockStore):
        organization_id = str(self.params["organization_id"])
        return lambda r: str(r.get("organization_id")) == organization_id


class GetRequestedTickets(ListRequest):
    name = "get_requested_tickets"
    resource = "tickets"
    root = "ticket"
    collection_root = "tickets"
    path_template = "/users/{requester_id}/tickets/requested.json"

    def filter(self, store: MockStore):
        requester_id = str(self.params["requester_id"])
        return lambda r: str(r.get("requester_id")) == requester_id
