"""Requests, the response envelope and the Real/Mock execution strategies.

A request is one named API operation: an HTTP method, a path built from its
params and an optional JSON body. The client executes it through exactly one
strategy chosen at construction time:

    RealStrategy - sends the request over HTTP with httpx.
    MockStrategy - calls ``request.mock(store)`` against the in-process store.

Both return a ``Response`` or raise one of the ``RemoteError`` subclasses.
"""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Protocol

import httpx
from pydantic import BaseModel, Field

from helpdesk_sdk._internal.mock.store import MockStore, Record
from helpdesk_sdk.exceptions import FieldError, NotFound, RemoteError, ValidationError

if TYPE_CHECKING:
    from helpdesk_sdk.client import HelpdeskClient

PAGING_KEYS = ("page", "per_page")

REGISTRY: dict[str, type["Request"]] = {}


class Response(BaseModel):
    """Uniform response envelope returned by both strategies."""

    status: int
    body: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)


def paging_parameters(params: Mapping[str, Any]) -> dict[str, Any]:
    """Extract the ``page``/``per_page`` query parameters from ``params``."""
    return {key: params[key] for key in PAGING_KEYS if params.get(key) is not None}


def parse_field_errors(body: Any) -> list[FieldError]:
    """Parse the ``details`` mapping of a 422 error body into field errors."""
    errors: list[FieldError] = []
    details = body.get("details") if isinstance(body, dict) else None
    if not isinstance(details, dict):
        return errors

    for field, items in details.items():
        for item in items if isinstance(items, list) else [items]:
            message = item.get("description", "") if isinstance(item, dict) else str(item)
            prefix = str(FieldError(field=field, message="")).rstrip()
            if message.startswith(prefix):
                message = message[len(prefix) :].strip()
            errors.append(FieldError(field=field, message=message))
    return errors


def error_body(errors: list[FieldError]) -> dict[str, Any]:
    """Render field errors the way the service reports them."""
    details: dict[str, list[dict[str, str]]] = {}
    for error in errors:
        details.setdefault(error.field, []).append(
            {"description": str(error), "error": "InvalidValue"}
        )
    return {
        "error": "RecordInvalid",
        "description": "Record validation errors",
        "details": details,
    }


class Request:
    """A single named API operation.

    Subclasses that set ``name`` are registered and become callable through
    ``HelpdeskClient.request(name, params)``.
    """

    name: ClassVar[str | None] = None
    method: ClassVar[str] = "GET"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__dict__.get("name"):
            REGISTRY[cls.name] = cls  # type: ignore[index]

    def __init__(self, client: "HelpdeskClient", params: Mapping[str, Any] | None = None) -> None:
        self.client = client
        self.params: dict[str, Any] = dict(params or {})

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.method} {self.name}>"

    def path(self) -> str:
        raise NotImplementedError

    def query(self) -> dict[str, Any] | None:
        return None

    def body(self) -> dict[str, Any] | None:
        return None

    def mock(self, store: MockStore) -> Response:
        raise NotImplementedError(f"{self.name} has no mock implementation")

    # =========================================================================
    # Mock helpers
    # =========================================================================

    def response(self, body: dict[str, Any] | None = None, status: int = 200) -> Response:
        return Response(
            status=status,
            body=body or {},
            headers={"Content-Type": "application/json; charset=utf-8"},
        )

    def validate(self, errors: list[FieldError]) -> None:
        """Raise ``ValidationError`` if ``errors`` is non-empty."""
        if errors:
            raise ValidationError(errors, body=error_body(errors))

    def delegate(self, name: str, params: Mapping[str, Any], store: MockStore) -> Response:
        """Run another request's mock against the same store."""
        return REGISTRY[name](self.client, params).mock(store)


class ResourceRequest(Request):
    """Base for requests that target one resource type.

    ``resource`` is the store type and URL segment (e.g. "tickets"), ``root``
    the JSON envelope key (e.g. "ticket") and ``path_template`` the API path,
    formatted with the request params and the enveloped resource params.
    """

    resource: ClassVar[str]
    root: ClassVar[str]
    path_template: ClassVar[str]
    record_path: ClassVar[str | None] = None
    accepted: ClassVar[tuple[str, ...] | None] = None

    def resource_params(self) -> dict[str, Any]:
        value = self.params.get(self.root)
        return dict(value) if isinstance(value, Mapping) else {}

    def identity(self) -> Any:
        return self.resource_params().get("id", self.params.get("id"))

    def attributes(self) -> dict[str, Any]:
        """Resource params minus identity, restricted to ``accepted`` if set."""
        attrs = {key: value for key, value in self.resource_params().items() if key != "id"}
        if self.accepted is not None:
            attrs = {key: value for key, value in attrs.items() if key in self.accepted}
        return attrs

    def path(self) -> str:
        return self.path_template.format(**{**self.params, **self.resource_params()})

    def record_url(self, store: MockStore, identity: Any) -> str:
        template = self.record_path or f"/{self.resource}/{{id}}.json"
        return store.url_for(template.format(id=identity))


class CreateRequest(ResourceRequest):
    """POST a new record. The mock validates, fills defaults and inserts."""

    method = "POST"
    required: ClassVar[tuple[str, ...]] = ()

    def body(self) -> dict[str, Any]:
        return {self.root: self.attributes()}

    def errors(self, store: MockStore, attrs: dict[str, Any]) -> list[FieldError]:
        return [
            FieldError(field=name, message="cannot be blank")
            for name in self.required
            if attrs.get(name) in (None, "")
        ]

    def defaults(self, store: MockStore, identity: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        return {}

    def build(self, store: MockStore, attrs: dict[str, Any]) -> dict[str, Any]:
        """Final hook before insert; may write related records."""
        return attrs

    def mock(self, store: MockStore) -> Response:
        attrs = self.attributes()
        self.validate(self.errors(store, attrs))

        identity = store.serial_id(self.resource)
        record = {
            **self.defaults(store, identity, attrs),
            "url": self.record_url(store, identity),
            **self.build(store, attrs),
        }
        store.insert(self.resource, record, identity=identity)
        return self.response({self.root: store.fetch(self.resource, identity)}, status=201)


class GetRequest(ResourceRequest):
    """GET one record by identity."""

    def mock(self, store: MockStore) -> Response:
        return self.response({self.root: store.fetch(self.resource, self.identity())})


class UpdateRequest(ResourceRequest):
    """PUT changed attributes of an existing record."""

    method = "PUT"

    def body(self) -> dict[str, Any]:
        return {self.root: self.attributes()}

    def errors(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> list[FieldError]:
        return []

    def build(self, store: MockStore, current: Record, attrs: dict[str, Any]) -> dict[str, Any]:
        return attrs

    def mock(self, store: MockStore) -> Response:
        identity = self.identity()
        current = store.fetch(self.resource, identity)
        attrs = self.attributes()
        self.validate(self.errors(store, current, attrs))
        record = store.update(self.resource, identity, self.build(store, current, attrs))
        return self.response({self.root: record})


class DestroyRequest(ResourceRequest):
    """DELETE a record. The stock mock removes it from the store."""

    method = "DELETE"

    def mock(self, store: MockStore) -> Response:
        store.delete(self.resource, self.identity())
        return self.response(status=204)


class ListRequest(ResourceRequest):
    """GET one page of a (possibly scoped) listing."""

    collection_root: ClassVar[str]

    def query(self) -> dict[str, Any]:
        return paging_parameters(self.params)

    def filter(self, store: MockStore) -> Callable[[Record], bool] | None:
        return None

    def mock(self, store: MockStore) -> Response:
        page = store.page(self.resource, self.params, filter=self.filter(store), path=self.path())
        return self.response(
            {
                self.collection_root: page.records,
                "count": page.count,
                "next_page": page.next_page,
                "previous_page": page.previous_page,
            }
        )


# =============================================================================
# Strategies
# =============================================================================


class Strategy(Protocol):
    """Executes a request and returns the response envelope."""

    def execute(self, request: Request) -> Response: ...

    def close(self) -> None: ...


def _parse_body(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {"error": response.text}
    return data if isinstance(data, dict) else {"data": data}


def error_for(name: str | None, status_code: int, body: dict[str, Any]) -> RemoteError:
    """Map a non-2xx status to the matching error type."""
    if status_code == 404:
        return NotFound(f"{name} failed: not found", body=body)
    if status_code == 422:
        return ValidationError(parse_field_errors(body), body=body)
    return RemoteError(f"{name} failed with status {status_code}", status_code=status_code, body=body)


class RealStrategy:
    """Sends each request as one HTTP call. No retries."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @property
    def http(self) -> httpx.Client:
        return self._http

    def execute(self, request: Request) -> Response:
        try:
            response = self._http.request(
                request.method,
                request.path(),
                params=request.query(),
                json=request.body(),
            )
        except httpx.HTTPError as e:
            raise RemoteError(f"{request.name} failed: {e}") from e

        body = _parse_body(response)
        if not response.is_success:
            raise error_for(request.name, response.status_code, body)
        return Response(status=response.status_code, body=body, headers=dict(response.headers))

    def close(self) -> None:
        self._http.close()


class MockStrategy:
    """Runs each request's ``mock`` against a shared ``MockStore``."""

    def __init__(self, store: MockStore) -> None:
        self._store = store

    @property
    def store(self) -> MockStore:
        return self._store

    def execute(self, request: Request) -> Response:
        return request.mock(self._store)

    def close(self) -> None:
        pass
