"""Organizations group end-users and their tickets."""

from typing import TYPE_CHECKING, Any

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

if TYPE_CHECKING:
    from helpdesk_sdk.models.membership import Memberships
    from helpdesk_sdk.models.ticket import Tickets
    from helpdesk_sdk.models.user import Users


class Organization(Model):
    schema = Schema(
        identity("id"),
        attribute("url", T.STRING, read_only=True),
        attribute("name", T.STRING, required=True),
        attribute("details", T.STRING),
        attribute("notes", T.STRING),
        attribute("external_id", T.STRING),
        attribute("domain_names", T.ARRAY),
        attribute("group_id", T.INTEGER),
        attribute("shared_tickets", T.BOOLEAN),
        attribute("shared_comments", T.BOOLEAN),
        attribute("tags", T.ARRAY),
        attribute("created_at", T.TIME, read_only=True),
        attribute("updated_at", T.TIME, read_only=True),
    )
    collection = "organizations"
    model_root = "organization"
    create_request = "create_organization"
    update_request = "update_organization"
    destroy_request = "destroy_organization"

    def tickets(self) -> "Tickets":
        self.requires("identity")
        return self.related("tickets", organization_id=self.identity)

    def users(self) -> "Users":
        self.requires("identity")
        return self.related("users", organization_id=self.identity)

    def memberships(self) -> "Memberships":
        self.requires("identity")
        return self.related("memberships", organization_id=self.identity)


class Organizations(Collection[Organization]):
    model = Organization
    collection_root = "organizations"
    list_request = "get_organizations"
    model_request = "get_organization"


def _name_taken(store: MockStore, name: Any, exclude: Any = None) -> bool:
    name = str(name).lower()
    return bool(
        store.select(
            "organizations",
            lambda r: str(r.get("name")).lower() == name and r["id"] != exclude,
        )
    )


class CreateOrganization(CreateRequest):
    name = "create_organization"
    resource = "organizations"
    root = "organization"
    path_template = "/organizations.json"
    required = ("name",)

    def errors(self, store: MockStore, attrs: dict[str, Any]) -> list[FieldError]:
        errors = super().errors(store, attrs)
        if attrs.get("name") and _name_taken(store, attrs["name"]):
            errors.append(FieldError(field="name", message="has already been taken"))
        return errors

    def defaults(self, store: MockStore, identity: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        return {
            "domain_names": [],
            "shared_tickets": False,
            "shared_comments": False,
            "tags": [],
        }


class GetOrganization(GetRequest):
    name = "get_organization"
    resource = "organizations"
    root = "organization"
    path_template = "/organizations/{id}.json"


class UpdateOrganization(UpdateRequest):
    name = "update_organization"
    resource = "organizations"
    root = "organization"
    path_template = "/organizations/{id}.json"

    def errors(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> list[FieldError]:
        if "name" not in attrs:
            return []
        if not attrs["name"]:
            return [FieldError(field="name", message="cannot be blank")]
        if _name_taken(store, attrs["name"], exclude=current["id"]):
            return [FieldError(field="name", message="has already been taken")]
        return []


class DestroyOrganization(DestroyRequest):
    name = "destroy_organization"
    resource = "organizations"
    root = "organization"
    path_template = "/organizations/{id}.json"


class GetOrganizations(ListRequest):
    name = "get_organizations"
    resource = "organizations"
    root = "organization"
    collection_root = "organizations"
    path_template = "/organizations.json"
