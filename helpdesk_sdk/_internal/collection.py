"""Typed, scoped and lazily paged sets of resource models."""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

import httpx

from helpdesk_sdk._internal.attributes import AttributeType, coerce
from helpdesk_sdk._internal.model import Model
from helpdesk_sdk._internal.request import PAGING_KEYS, Response
from helpdesk_sdk.exceptions import NotFound

if TYPE_CHECKING:
    from typing import Self

    from helpdesk_sdk.client import HelpdeskClient

M = TypeVar("M", bound=Model)

CURSOR_FIELDS = ("count", "next_page", "previous_page")


def cursor_params(url: str) -> dict[str, Any]:
    """Paging parameters encoded in a ``next_page``/``previous_page`` URL."""
    query = httpx.URL(url).params
    params = {key: coerce(AttributeType.INTEGER, query[key]) for key in PAGING_KEYS if key in query}
    return {key: value for key, value in params.items() if value is not None}


class Collection(Generic[M]):
    """A set of models backed by a list request.

    Scope values are fixed at construction and applied to every fetch; they
    override caller-supplied parameters of the same name.

    Class configuration:
        model: The model class of the elements.
        collection_root: JSON key holding the records of a list response.
        list_request: Registered name of the list request.
        model_request: Registered name of the single-record request.
        scopes: Scope names accepted by the constructor.
    """

    model: ClassVar[type[Model]]
    collection_root: ClassVar[str]
    list_request: ClassVar[str]
    model_request: ClassVar[str]
    scopes: ClassVar[tuple[str, ...]] = ()

    def __init__(self, client: "HelpdeskClient", **scope: Any) -> None:
        unknown = sorted(set(scope) - set(self.scopes))
        if unknown:
            raise TypeError(f"{type(self).__name__} cannot be scoped by {', '.join(unknown)}")

        self.client = client
        self.scope = {key: value for key, value in scope.items() if value is not None}
        self.records: list[M] = []
        self.count: int | None = None
        self.next_page: str | None = None
        self.previous_page: str | None = None
        self._params: dict[str, Any] = {}
        self._loaded = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} scope={self.scope} loaded={len(self.records)} count={self.count}>"

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> M:
        return self.records[index]

    def __iter__(self) -> Iterator[M]:
        """Yield every record, fetching further pages as they are consumed.

        Each new iteration starts again from the first loaded record.
        """
        if not self._loaded:
            self.all()

        index = 0
        while True:
            while index < len(self.records):
                yield self.records[index]
                index += 1
            if not self.next_page or not self._advance():
                return

    def _list(self, params: dict[str, Any]) -> Response:
        return self.client.request(self.list_request, params)

    def _fetch(self, params: dict[str, Any]) -> Response:
        """One page of the listing; a listing that does not exist is an empty page."""
        try:
            return self._list(params)
        except NotFound:
            return Response(status=404, body={self.collection_root: [], "count": 0}, headers={})

    def _narrow(self, name: str, params: dict[str, Any]) -> Response:
        """Every record of listing ``name`` that lies inside the full scope.

        Used when no single request honours all scope values: the wider
        listing is walked to its end and filtered, so ``count`` matches the
        records returned and no cursor is left behind. Paging parameters are
        ignored.
        """
        query = {key: value for key, value in params.items() if key not in PAGING_KEYS}
        records: list[dict[str, Any]] = []
        while True:
            response = self.client.request(name, query)
            page = response.body.get(self.collection_root) or []
            records.extend(
                record for record in page if self._in_scope(self.model.load(None, record))
            )
            cursor = cursor_params(response.body.get("next_page") or "")
            if not cursor or all(query.get(key) == value for key, value in cursor.items()):
                break
            query = {**query, **cursor}
        return Response(
            status=response.status,
            body={self.collection_root: records, "count": len(records)},
            headers=response.headers,
        )

    def _apply(self, response: Response) -> list[M]:
        loaded = self.load(response.body.get(self.collection_root) or [])
        for field in CURSOR_FIELDS:
            setattr(self, field, response.body.get(field))
        return loaded

    def _advance(self) -> bool:
        """Fetch the page behind ``next_page``; False if the cursor did not move."""
        cursor = self.next_page or ""
        self._apply(self._fetch({**self._params, **cursor_params(cursor), **self.scope}))
        return self.next_page != cursor

    def _in_scope(self, model: Model) -> bool:
        values = model.attributes()
        return all(
            values.get(key) is None or values[key] == coerce(self.model.schema[key].type, value)
            for key, value in self.scope.items()
            if key in self.model.schema
        )

    def _build(self, record: dict[str, Any]) -> Model:
        model = self.model.load(self.client, record)
        values = model.attributes()
        missing = {
            key: value
            for key, value in self.scope.items()
            if key in self.model.schema and values.get(key) is None
        }
        return model.merge(missing) if missing else model

    def load(self, records: list[dict[str, Any]]) -> list[M]:
        """Append models built from raw ``records`` and return them.

        Records contradicting a scope value are skipped; scope values the
        records leave out are filled in.
        """
        models = (self._build(record) for record in records)
        loaded = [model for model in models if self._in_scope(model)]
        self.records.extend(loaded)  # type: ignore[arg-type]
        self._loaded = True
        return loaded  # type: ignore[return-value]

    def all(self, **params: Any) -> "Self":
        """Replace the loaded records with one page matching ``params`` and the scope."""
        self._params = {**params, **self.scope}
        self.records = []
        self._apply(self._fetch(self._params))
        return self

    def pages(self, **params: Any) -> Iterator[list[M]]:
        """Yield the records page by page, starting from a fresh ``all``."""
        self.all(**params)
        yield list(self.records)
        while self.next_page:
            start = len(self.records)
            if not self._advance():
                return
            yield self.records[start:]

    def get(self, identity: Any) -> M | None:
        """Fetch one record by identity; ``None`` if it does not exist.

        Scope values are passed along for resources nested under another.
        """
        if identity is None:
            return None
        root = self.model.model_root
        try:
            response = self.client.request(self.model_request, {root: {"id": identity}, **self.scope})
        except NotFound:
            return None

        record = response.body.get(root)
        if not record:
            return None
        return self.model.load(self.client, record)  # type: ignore[return-value]

    def new(self, **attributes: Any) -> M:
        """A new unsaved model, with scope values taking precedence."""
        scoped = {key: value for key, value in self.scope.items() if key in self.model.schema}
        return self.model(self.client, **{**attributes, **scoped})  # type: ignore[return-value]

    def create(self, **attributes: Any) -> M:
        """Build, save and return a new model."""
        model = self.new(**attributes)
        model.save()
        return model
