"""Organization memberships link users to organizations."""

from typing import Any

from helpdesk_sdk._internal.association import BelongsTo
from helpdesk_sdk._internal.attributes import AttributeType as T
from helpdesk_sdk._internal.attributes import Schema, attribute, identity
from helpdesk_sdk._internal.collection import Collection
from helpdesk_sdk._internal.mock.store import MockStore
from helpdesk_sdk._internal.model import Model
from helpdesk_sdk._internal.request import (
    CreateRequest,
    DestroyRequest,
    GetRequest,
    ListRequest,
    Request,
    Response,
)
from helpdesk_sdk.exceptions import FieldError, NotFound, RequiredAttributeError


class Membership(Model):
    schema = Schema(
        identity("id"),
        attribute("url", T.STRING, read_only=True),
        attribute("user_id", T.INTEGER, required=True),
        attribute("organization_id", T.INTEGER, required=True),
        attribute("default", T.BOOLEAN, read_only=True),
        attribute("organization_name", T.STRING, read_only=True),
        attribute("created_at", T.TIME, read_only=True),
        attribute("updated_at", T.TIME, read_only=True),
    )
    collection = "memberships"
    model_root = "organization_membership"
    create_request = "create_membership"
    destroy_request = "destroy_membership"

    user = BelongsTo("user_id", "users")
    organization = BelongsTo("organization_id", "organizations")

    def make_default(self) -> "Membership":
        """Make this the user's default membership."""
        self.requires("identity", "user_id")
        self.client.request(
            "mark_membership_default",
            {self.model_root: {"id": self.identity, "user_id": self.user_id}},
        )
        self._values["default"] = True
        return self


class Memberships(Collection[Membership]):
    """Memberships of one user and/or one organization.

    Listing needs a ``user_id`` or ``organization_id`` scope. When both are
    given the result is the single membership linking the two, if any.
    """

    model = Membership
    collection_root = "organization_memberships"
    list_request = "get_user_memberships"
    model_request = "get_membership"
    scopes = ("user_id", "organization_id")

    def _list(self, params: dict[str, Any]) -> Response:
        if "user_id" in params and "organization_id" in params:
            return self._narrow("get_user_memberships", params)
        if "user_id" in params:
            return self.client.request("get_user_memberships", params)
        if "organization_id" in params:
            return self.client.request("get_organization_memberships", params)
        raise RequiredAttributeError(
            ["user_id", "organization_id"], "user_id or organization_id is required"
        )


class CreateMembership(CreateRequest):
    name = "create_membership"
    resource = "memberships"
    root = "organization_membership"
    path_template = "/organization_memberships.json"
    record_path = "/organization_memberships/{id}.json"
    accepted = ("user_id", "organization_id")

    def errors(self, store: MockStore, attrs: dict[str, Any]) -> list[FieldError]:
        errors = []
        for field, resource in (("user", "users"), ("organization", "organizations")):
            try:
                store.fetch(resource, attrs.get(f"{field}_id"))
            except NotFound:
                errors.append(FieldError(field=field, message="cannot be blank"))
        if errors:
            return errors

        user_id, organization_id = str(attrs["user_id"]), str(attrs["organization_id"])
        duplicates = store.select(
            self.resource,
            lambda r: str(r["user_id"]) == user_id and str(r["organization_id"]) == organization_id,
        )
        if duplicates:
            errors.append(FieldError(field="user", message="has already been taken"))
        return errors

    def build(self, store: MockStore, attrs: dict[str, Any]) -> dict[str, Any]:
        user = store.fetch("users", attrs["user_id"])
        organization = store.fetch("organizations", attrs["organization_id"])
        first = not store.select(self.resource, lambda r: str(r["user_id"]) == str(user["id"]))

        if first and user.get("organization_id") is None:
            store.update("users", user["id"], {"organization_id": organization["id"]})

        return {
            "user_id": user["id"],
            "organization_id": organization["id"],
            "organization_name": organization.get("name"),
            "default": first,
        }


class GetMembership(GetRequest):
    name = "get_membership"
    resource = "memberships"
    root = "organization_membership"
    path_template = "/organization_memberships/{id}.json"


class DestroyMembership(DestroyRequest):
    name = "destroy_membership"
    resource = "memberships"
    root = "organization_membership"
    path_template = "/organization_memberships/{id}.json"


class MarkMembershipDefault(Request):
    name = "mark_membership_default"
    method = "PUT"

    def membership(self) -> dict[str, Any]:
        return self.params["organization_membership"]

    def path(self) -> str:
        membership = self.membership()
        return (
            f"/users/{membership['user_id']}/organization_memberships/"
            f"{membership['id']}/make_default.json"
        )

    def mock(self, store: MockStore) -> Response:
        target = store.fetch("memberships", self.membership()["id"])
        user_id = str(target["user_id"])
        siblings = store.select("memberships", lambda r: str(r["user_id"]) == user_id)

        for membership in siblings:
            store.update("memberships", membership["id"], {"default": membership["id"] == target["id"]})
        store.update("users", target["user_id"], {"organization_id": target["organization_id"]})

        records = store.select("memberships", lambda r: str(r["user_id"]) == user_id)
        return self.response({"organization_memberships": records})


class GetUserMemberships(ListRequest):
    name = "get_user_memberships"
    resource = "memberships"
    root = "organization_membership"
    collection_root = "organization_memberships"
    path_template = "/users/{user_id}/organization_memberships.json"

    def filter(self, store: MockStore):
        user_id = str(self.params["user_id"])
        return lambda r: str(r.get("user_id")) == user_id


class GetOrganizationMemberships(ListRequest):
    name = "get_organization_memberships"
    resource = "memberships"
    root = "organization_membership"
    collection_root = "organization_memberships"
    path_template = "/organizations/{organization_id}/organization_memberships.json"

    def filter(self, store: MockStore):
        organization_id = str(self.params["organization_id"])
        return lambda r: str(r.get("organization_id")) == organization_id
