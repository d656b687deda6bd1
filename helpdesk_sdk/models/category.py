"""Help Center categories."""

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


class Category(Model):
    schema = Schema(
        identity("id"),
        attribute("url", T.STRING, read_only=True),
        attribute("html_url", T.STRING, read_only=True),
        attribute("name", T.STRING, required=True),
        attribute("description", T.STRING),
        attribute("locale", T.STRING, required=True),
        attribute("source_locale", T.STRING, read_only=True),
        attribute("outdated", T.BOOLEAN, read_only=True),
        attribute("position", T.INTEGER),
        attribute("translation_ids", T.ARRAY, read_only=True),
        attribute("created_at", T.TIME, read_only=True),
        attribute("updated_at", T.TIME, read_only=True),
    )
    collection = "help_center_categories"
    model_root = "category"
    create_request = "create_help_center_category"
    update_request = "update_help_center_category"
    destroy_request = "destroy_help_center_category"


class Categories(Collection[Category]):
    model = Category
    collection_root = "categories"
    list_request = "get_help_center_categories"
    model_request = "get_help_center_category"


class CreateCategory(CreateRequest):
    name = "create_help_center_category"
    resource = "help_center_categories"
    root = "category"
    path_template = "/help_center/categories.json"
    record_path = "/help_center/categories/{id}.json"
    required = ("name", "locale")

    def defaults(self, store: MockStore, identity: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        # Help Center pages live on the account host, outside /api/v2.
        host = store.base_url.removesuffix("/api/v2")
        return {
            "description": "",
            "html_url": f"{host}/hc/{attrs.get('locale')}/categories/{identity}",
            "outdated": False,
            "position": 0,
            "source_locale": attrs.get("locale"),
            "translation_ids": [],
        }


class GetCategory(GetRequest):
    name = "get_help_center_category"
    resource = "help_center_categories"
    root = "category"
    path_template = "/help_center/categories/{id}.json"


class UpdateCategory(UpdateRequest):
    name = "update_help_center_category"
    resource = "help_center_categories"
    root = "category"
    path_template = "/help_center/categories/{id}.json"

    def errors(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> list[FieldError]:
        return [
            FieldError(field=field, message="cannot be blank")
            for field in ("name", "locale")
            if field in attrs and not attrs[field]
        ]


class DestroyCategory(DestroyRequest):
    name = "destroy_help_center_category"
    resource = "help_center_categories"
    root = "category"
    path_template = "/help_center/categories/{id}.json"


class GetCategories(ListRequest):
    name = "get_help_center_categories"
    resource = "help_center_categories"
    root = "category"
    collection_root = "categories"
    path_template = "/help_center/categories.json"
