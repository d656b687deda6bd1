"""Ticket comments and the audits that record them.

Comments are never created directly: updating a ticket with a ``comment``
produces an audit whose events hold the new comment.
"""

from collections.abc import Mapping
from html import escape
from typing import Any

from helpdesk_sdk._internal.association import BelongsTo
from helpdesk_sdk._internal.attributes import AttributeType as T
from helpdesk_sdk._internal.attributes import Schema, attribute, identity
from helpdesk_sdk._internal.collection import Collection
from helpdesk_sdk._internal.mock.store import MockStore, Record
from helpdesk_sdk._internal.model import Model
from helpdesk_sdk._internal.request import GetRequest, ListRequest, Response
from helpdesk_sdk.exceptions import NotFound, RequiredAttributeError


class TicketComment(Model):
    schema = Schema(
        identity("id"),
        attribute("type", T.STRING, read_only=True),
        attribute("body", T.STRING),
        attribute("html_body", T.STRING, read_only=True),
        attribute("public", T.BOOLEAN),
        attribute("author_id", T.INTEGER, read_only=True),
        attribute("attachments", T.ARRAY, read_only=True),
        attribute("ticket_id", T.INTEGER, read_only=True),
        attribute("audit_id", T.INTEGER, read_only=True),
        attribute("via", read_only=True),
        attribute("created_at", T.TIME, read_only=True),
    )
    collection = "ticket_comments"
    model_root = "comment"

    author = BelongsTo("author_id", "users")
    ticket = BelongsTo("ticket_id", "tickets")

    def audit(self) -> "TicketAudit | None":
        """The audit this comment was recorded in."""
        self.requires("ticket_id")
        return self.related("ticket_audits", ticket_id=self.ticket_id).get(self.audit_id)


class TicketAudit(Model):
    schema = Schema(
        identity("id"),
        attribute("ticket_id", T.INTEGER, read_only=True),
        attribute("author_id", T.INTEGER, read_only=True),
        attribute("metadata", read_only=True),
        attribute("via", read_only=True),
        attribute("events", T.ARRAY, read_only=True),
        attribute("created_at", T.TIME, read_only=True),
    )
    collection = "ticket_audits"
    model_root = "audit"

    author = BelongsTo("author_id", "users")
    ticket = BelongsTo("ticket_id", "tickets")

    def comments(self) -> list[TicketComment]:
        """Comment events of this audit."""
        return [
            TicketComment.load(
                self._client,
                {"ticket_id": self.ticket_id, "audit_id": self.identity, **event},
            )
            for event in self.events or []
            if isinstance(event, Mapping) and event.get("type") == "Comment"
        ]


class _TicketScoped:
    """Listings nested under one ticket need its ``ticket_id``."""

    def _list(self, params: dict[str, Any]) -> Response:
        if params.get("ticket_id") is None:
            raise RequiredAttributeError(["ticket_id"])
        return super()._list(params)  # type: ignore[misc]


class TicketComments(_TicketScoped, Collection[TicketComment]):
    model = TicketComment
    collection_root = "comments"
    list_request = "get_ticket_comments"
    model_request = "get_ticket_comments"
    scopes = ("ticket_id",)

    def get(self, identity: Any) -> TicketComment | None:
        """The comment with ``identity`` among the ticket's comments.

        The service has no single-comment endpoint, so the listing is searched.
        """
        if identity is None:
            return None
        wanted = str(identity)
        return next((comment for comment in self if str(comment.identity) == wanted), None)


class TicketAudits(_TicketScoped, Collection[TicketAudit]):
    model = TicketAudit
    collection_root = "audits"
    list_request = "get_ticket_audits"
    model_request = "get_ticket_audit"
    scopes = ("ticket_id",)


# =============================================================================
# Requests
# =============================================================================


def record_comment(
    store: MockStore, ticket_id: Any, author_id: Any, comment: Mapping[str, Any]
) -> Record:
    """Store a comment on ``ticket_id`` and the audit holding it; return the audit."""
    body = str(comment.get("body") or "")
    audit_id = store.serial_id("ticket_audits")
    comment_id = store.insert(
        "ticket_comments",
        {
            "type": "Comment",
            "body": body,
            "html_body": f"<div class=\"zd-comment\"><p>{escape(body)}</p></div>",
            "public": bool(comment.get("public", True)),
            "author_id": author_id,
            "attachments": [],
            "ticket_id": ticket_id,
            "audit_id": audit_id,
            "via": {"channel": "api"},
        },
    )
    event = store.fetch("ticket_comments", comment_id)
    store.insert(
        "ticket_audits",
        {
            "ticket_id": ticket_id,
            "author_id": author_id,
            "metadata": {},
            "via": {"channel": "api"},
            "events": [event],
        },
        identity=audit_id,
    )
    return store.fetch("ticket_audits", audit_id)


def _on_ticket(ticket_id: Any):
    ticket_id = str(ticket_id)
    return lambda r: str(r.get("ticket_id")) == ticket_id


class GetTicketComments(ListRequest):
    name = "get_ticket_comments"
    resource = "ticket_comments"
    root = "comment"
    collection_root = "comments"
    path_template = "/tickets/{ticket_id}/comments.json"

    def mock(self, store: MockStore) -> Response:
        store.fetch("tickets", self.params["ticket_id"])
        return super().mock(store)

    def filter(self, store: MockStore):
        return _on_ticket(self.params["ticket_id"])


class GetTicketAudits(ListRequest):
    name = "get_ticket_audits"
    resource = "ticket_audits"
    root = "audit"
    collection_root = "audits"
    path_template = "/tickets/{ticket_id}/audits.json"

    def mock(self, store: MockStore) -> Response:
        store.fetch("tickets", self.params["ticket_id"])
        return super().mock(store)

    def filter(self, store: MockStore):
        return _on_ticket(self.params["ticket_id"])


class GetTicketAudit(GetRequest):
    name = "get_ticket_audit"
    resource = "ticket_audits"
    root = "audit"
    path_template = "/tickets/{ticket_id}/audits/{id}.json"

    def mock(self, store: MockStore) -> Response:
        audit = store.fetch(self.resource, self.identity())
        if str(audit.get("ticket_id")) != str(self.params.get("ticket_id")):
            raise NotFound(f"audit {self.identity()} is not on ticket {self.params.get('ticket_id')}")
        return self.response({self.root: audit})
