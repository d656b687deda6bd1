"""Custom ticket fields."""

from typing import Any

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
    UpdateRequest,
)
from helpdesk_sdk.exceptions import FieldError

FIELD_TYPES = (
    "text",
    "textarea",
    "checkbox",
    "date",
    "integer",
    "decimal",
    "regexp",
    "tagger",
    "multiselect",
)

ACCEPTED = (
    "type",
    "title",
    "description",
    "position",
    "active",
    "required",
    "collapsed_for_agents",
    "regexp_for_validation",
    "title_in_portal",
    "visible_in_portal",
    "editable_in_portal",
    "required_in_portal",
    "tag",
    "custom_field_options",
    "agent_description",
)


class TicketField(Model):
    schema = Schema(
        identity("id"),
        attribute("url", T.STRING, read_only=True),
        attribute("type", T.STRING, required=True),
        attribute("title", T.STRING, required=True),
        attribute("description", T.STRING),
        attribute("position", T.INTEGER),
        attribute("active", T.BOOLEAN),
        attribute("required", T.BOOLEAN),
        attribute("collapsed_for_agents", T.BOOLEAN),
        attribute("regexp_for_validation", T.STRING),
        attribute("title_in_portal", T.STRING),
        attribute("visible_in_portal", T.BOOLEAN),
        attribute("editable_in_portal", T.BOOLEAN),
        attribute("required_in_portal", T.BOOLEAN),
        attribute("tag", T.STRING),
        attribute("custom_field_options", T.ARRAY),
        attribute("agent_description", T.STRING),
        attribute("removable", T.BOOLEAN, read_only=True),
        attribute("created_at", T.TIME, read_only=True),
        attribute("updated_at", T.TIME, read_only=True),
    )
    collection = "ticket_fields"
    model_root = "ticket_field"
    create_request = "create_ticket_field"
    update_request = "update_ticket_field"
    destroy_request = "destroy_ticket_field"


class TicketFields(Collection[TicketField]):
    model = TicketField
    collection_root = "ticket_fields"
    list_request = "get_ticket_fields"
    model_request = "get_ticket_field"


def _type_errors(attrs: dict[str, Any]) -> list[FieldError]:
    if attrs.get("type") not in (None, "") and attrs["type"] not in FIELD_TYPES:
        return [FieldError(field="type", message="is not included in the list")]
    return []


class CreateTicketField(CreateRequest):
    name = "create_ticket_field"
    resource = "ticket_fields"
    root = "ticket_field"
    path_template = "/ticket_fields.json"
    accepted = ACCEPTED
    required = ("type", "title")

    def errors(self, store: MockStore, attrs: dict[str, Any]) -> list[FieldError]:
        return super().errors(store, attrs) + _type_errors(attrs)

    def defaults(self, store: MockStore, identity: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        return {
            "active": True,
            "collapsed_for_agents": False,
            "description": attrs.get("title"),
            "editable_in_portal": False,
            "position": 9999,
            "regexp_for_validation": "",
            "removable": True,
            "required": False,
            "required_in_portal": False,
            "tag": "",
            "title_in_portal": attrs.get("title"),
            "visible_in_portal": False,
            "agent_description": "",
        }


class GetTicketField(GetRequest):
    name = "get_ticket_field"
    resource = "ticket_fields"
    root = "ticket_field"
    path_template = "/ticket_fields/{id}.json"


class UpdateTicketField(UpdateRequest):
    name = "update_ticket_field"
    resource = "ticket_fields"
    root = "ticket_field"
    path_template = "/ticket_fields/{id}.json"
    accepted = ACCEPTED

    def errors(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> list[FieldError]:
        errors = _type_errors(attrs)
        if "title" in attrs and not attrs["title"]:
            errors.append(FieldError(field="title", message="cannot be blank"))
        return errors


class DestroyTicketField(DestroyRequest):
    name = "destroy_ticket_field"
    resource = "ticket_fields"
    root = "ticket_field"
    path_template = "/ticket_fields/{id}.json"


class GetTicketFields(ListRequest):
    name = "get_ticket_fields"
    resource = "ticket_fields"
    root = "ticket_field"
    collection_root = "ticket_fields"
    path_template = "/ticket_fields.json"
