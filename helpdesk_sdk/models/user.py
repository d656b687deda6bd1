"""Users: end-users, agents and admins."""

from typing import TYPE_CHECKING, Any

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
    Request,
    Response,
    UpdateRequest,
    paging_parameters,
)
from helpdesk_sdk.exceptions import FieldError

if TYPE_CHECKING:
    from helpdesk_sdk.models.membership import Memberships
    from helpdesk_sdk.models.ticket import Tickets

ROLES = ("end-user", "agent", "admin")

DEFAULT_AGENT_EMAIL = "agent@mock.helpdesk.test"


class User(Model):
    schema = Schema(
        identity("id"),
        attribute("url", T.STRING, read_only=True),
        attribute("name", T.STRING, required=True),
        attribute("email", T.STRING),
        attribute("role", T.STRING),
        attribute("organization_id", T.INTEGER),
        attribute("phone", T.STRING),
        attribute("external_id", T.STRING),
        attribute("time_zone", T.STRING),
        attribute("active", T.BOOLEAN, read_only=True),
        attribute("verified", T.BOOLEAN),
        attribute("suspended", T.BOOLEAN),
        attribute("tags", T.ARRAY),
        attribute("created_at", T.TIME, read_only=True),
        attribute("updated_at", T.TIME, read_only=True),
    )
    collection = "users"
    model_root = "user"
    create_request = "create_user"
    update_request = "update_user"
    destroy_request = "destroy_user"

    organization = BelongsTo("organization_id", "organizations")

    def requested_tickets(self) -> "Tickets":
        """Tickets this user requested."""
        self.requires("identity")
        return self.related("tickets", requester_id=self.identity)

    def memberships(self) -> "Memberships":
        self.requires("identity")
        return self.related("memberships", user_id=self.identity)


class Users(Collection[User]):
    model = User
    collection_root = "users"
    list_request = "get_users"
    model_request = "get_user"
    scopes = ("organization_id",)

    def _list(self, params: dict[str, Any]) -> Response:
        if params.get("query"):
            return self.client.request("search_users", params)
        if "organization_id" in params:
            return self.client.request("get_organization_users", params)
        return super()._list(params)

    def search(self, query: str, **params: Any) -> "Users":
        """Users whose email or external id equals ``query``, or whose name contains it."""
        return self.all(query=query, **params)

    def current(self) -> User:
        """The authenticated API user."""
        response = self.client.request("get_current_user")
        return self.model.load(self.client, response.body["user"])  # type: ignore[return-value]


def find_user_by_email(store: MockStore, email: Any) -> Record | None:
    """First stored user whose email matches ``email`` case-insensitively."""
    if not email:
        return None
    email = str(email).lower()
    matches = store.select("users", lambda r: str(r.get("email") or "").lower() == email)
    return matches[0] if matches else None


def _email_taken(store: MockStore, email: Any, exclude: Any = None) -> bool:
    if not email:
        return False
    email = str(email).lower()
    return bool(
        store.select(
            "users",
            lambda r: str(r.get("email") or "").lower() == email and r["id"] != exclude,
        )
    )


class CreateUser(CreateRequest):
    name = "create_user"
    resource = "users"
    root = "user"
    path_template = "/users.json"

    def errors(self, store: MockStore, attrs: dict[str, Any]) -> list[FieldError]:
        errors = []
        if not attrs.get("name"):
            errors.append(FieldError(field="name", message="is too short (minimum one character)"))
        if _email_taken(store, attrs.get("email")):
            errors.append(FieldError(field="email", message="has already been taken"))
        if attrs.get("role", "end-user") not in ROLES:
            errors.append(FieldError(field="role", message="is not included in the list"))
        return errors

    def defaults(self, store: MockStore, identity: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        return {
            "active": True,
            "role": "end-user",
            "verified": False,
            "suspended": False,
            "tags": [],
        }


class GetUser(GetRequest):
    name = "get_user"
    resource = "users"
    root = "user"
    path_template = "/users/{id}.json"


class UpdateUser(UpdateRequest):
    name = "update_user"
    resource = "users"
    root = "user"
    path_template = "/users/{id}.json"

    def errors(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> list[FieldError]:
        errors = []
        if "name" in attrs and not attrs["name"]:
            errors.append(FieldError(field="name", message="is too short (minimum one character)"))
        if _email_taken(store, attrs.get("email"), exclude=current["id"]):
            errors.append(FieldError(field="email", message="has already been taken"))
        return errors


class DestroyUser(DestroyRequest):
    name = "destroy_user"
    resource = "users"
    root = "user"
    path_template = "/users/{id}.json"


class GetUsers(ListRequest):
    name = "get_users"
    resource = "users"
    root = "user"
    collection_root = "users"
    path_template = "/users.json"


class GetOrganizationUsers(ListRequest):
    name = "get_organization_users"
    resource = "users"
    root = "user"
    collection_root = "users"
    path_template = "/organizations/{organization_id}/users.json"

    def filter(self, store: MockStore):
        organization_id = str(self.params["organization_id"])
        return lambda r: str(r.get("organization_id")) == organization_id


class SearchUsers(ListRequest):
    name = "search_users"
    resource = "users"
    root = "user"
    collection_root = "users"
    path_template = "/users/search.json"

    def query(self) -> dict[str, Any]:
        return {"query": self.params["query"], **paging_parameters(self.params)}

    def filter(self, store: MockStore):
        term = str(self.params["query"]).lower()

        def matches(record: Record) -> bool:
            exact = (str(record.get(key) or "").lower() for key in ("email", "external_id"))
            return term in exact or term in str(record.get("name") or "").lower()

        return matches


class GetCurrentUser(Request):
    """The user the client authenticates as.

    The simulated service maps the client's username to a user, creating an
    admin with that email on first use.
    """

    name = "get_current_user"

    def path(self) -> str:
        return "/users/me.json"

    def mock(self, store: MockStore) -> Response:
        email = self.client.username or DEFAULT_AGENT_EMAIL
        user = find_user_by_email(store, email)
        if user is None:
            user = self.delegate(
                "create_user",
                {"user": {"name": email.split("@")[0], "email": email, "role": "admin", "verified": True}},
                store,
            ).body["user"]
        return self.response({"user": user})
