"""Agent groups. Destroyed groups are kept and marked ``deleted``."""

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
    Response,
    UpdateRequest,
)
from helpdesk_sdk.exceptions import FieldError, NotFound


class Group(Model):
    schema = Schema(
        identity("id"),
        attribute("url", T.STRING, read_only=True),
        attribute("name", T.STRING, required=True),
        attribute("description", T.STRING),
        attribute("default", T.BOOLEAN),
        attribute("deleted", T.BOOLEAN, read_only=True),
        attribute("created_at", T.TIME, read_only=True),
        attribute("updated_at", T.TIME, read_only=True),
    )
    collection = "groups"
    model_root = "group"
    create_request = "create_group"
    update_request = "update_group"
    destroy_request = "destroy_group"


class Groups(Collection[Group]):
    model = Group
    collection_root = "groups"
    list_request = "get_groups"
    model_request = "get_group"


class CreateGroup(CreateRequest):
    name = "create_group"
    resource = "groups"
    root = "group"
    path_template = "/groups.json"
    required = ("name",)

    def defaults(self, store: MockStore, identity: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        return {"default": False, "deleted": False, "description": ""}


class GetGroup(GetRequest):
    name = "get_group"
    resource = "groups"
    root = "group"
    path_template = "/groups/{id}.json"


class UpdateGroup(UpdateRequest):
    name = "update_group"
    resource = "groups"
    root = "group"
    path_template = "/groups/{id}.json"

    def errors(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> list[FieldError]:
        if current.get("deleted"):
            raise NotFound(f"group {current['id']} was deleted")
        if "name" in attrs and not attrs["name"]:
            return [FieldError(field="name", message="cannot be blank")]
        return []

    def build(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in attrs.items() if key != "deleted"}


class DestroyGroup(DestroyRequest):
    name = "destroy_group"
    resource = "groups"
    root = "group"
    path_template = "/groups/{id}.json"

    def mock(self, store: MockStore) -> Response:
        record = store.update(self.resource, self.identity(), {"deleted": True})
        return self.response({self.root: record})


class GetGroups(ListRequest):
    name = "get_groups"
    resource = "groups"
    root = "group"
    collection_root = "groups"
    path_template = "/groups.json"

    def filter(self, store: MockStore):
        return lambda r: not r.get("deleted")
