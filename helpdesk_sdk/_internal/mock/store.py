"""Process-local simulated database backing the mock strategy."""

import copy
import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel

from helpdesk_sdk._internal.attributes import AttributeType, coerce
from helpdesk_sdk.exceptions import NotFound

DEFAULT_BASE_URL = "https://mock.helpdesk.test/api/v2"
DEFAULT_PER_PAGE = 100
MAX_PER_PAGE = 100
ID_FIELD = "id"

Record = dict[str, Any]
Predicate = Callable[[Record], bool]


def _number(raw: Any, default: int) -> int:
    """Lenient integer paging parameter; blank, zero or garbage gives ``default``."""
    return coerce(AttributeType.INTEGER, raw) or default


class MockPage(BaseModel):
    """One page of records selected from the store."""

    records: list[dict[str, Any]]
    count: int
    next_page: str | None = None
    previous_page: str | None = None


class MockStore:
    """Simulated database: resource type -> identity -> record.

    Every primitive runs under a single lock, so operations are linearizable
    within one process. Records handed out are deep copies; the only way to
    change stored data is through ``insert``, ``update`` and ``delete``.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        clock: Callable[[], datetime] | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize an empty store.

        Args:
            base_url: Prefix for generated record and paging URLs.
            clock: Returns the current time; defaults to ``datetime.now(UTC)``.
            debug: Enable debug logging to stderr.
        """
        self._base_url = base_url.rstrip("/")
        self._clock = clock or (lambda: datetime.now(UTC))
        self._debug = debug
        self._lock = threading.Lock()
        self._data: dict[str, dict[Any, Record]] = {}
        self._serials: dict[str, int] = {}

    @property
    def base_url(self) -> str:
        return self._base_url

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            import sys

            print(f"[helpdesk-sdk:mock] {message}", file=sys.stderr)

    @staticmethod
    def _key(identity: Any) -> Any:
        if isinstance(identity, str) and identity.isdigit():
            return int(identity)
        return identity

    def _table(self, type: str) -> dict[Any, Record]:
        return self._data.setdefault(type, {})

    def _next_id(self, type: str) -> int:
        self._serials[type] = self._serials.get(type, 0) + 1
        return self._serials[type]

    def _not_found(self, type: str, identity: Any) -> NotFound:
        return NotFound(
            f"{type} {identity} not found",
            body={"error": "RecordNotFound", "description": "Not found"},
        )

    def timestamp(self) -> str:
        """Current time as an ISO-8601 UTC string."""
        return self._clock().isoformat(timespec="seconds").replace("+00:00", "Z")

    def url_for(self, path: str, **query: Any) -> str:
        """Absolute API URL for ``path`` with optional query parameters."""
        url = httpx.URL(self._base_url + path)
        if query:
            url = url.copy_merge_params(query)
        return str(url)

    # =========================================================================
    # Primitives
    # =========================================================================

    def serial_id(self, type: str) -> int:
        """Reserve the next identity for ``type``. Identities are never reused."""
        with self._lock:
            return self._next_id(type)

    def insert(self, type: str, record: Mapping[str, Any], identity: Any = None) -> Any:
        """Store a new record and return its identity.

        Args:
            type: Resource type name, e.g. "tickets".
            record: Field bag without identity.
            identity: A value previously reserved with ``serial_id``.

        Returns:
            The identity of the stored record.
        """
        with self._lock:
            table = self._table(type)
            if identity is None:
                identity = self._next_id(type)
            else:
                identity = self._key(identity)
                if identity in table:
                    raise ValueError(f"{type} {identity} already exists")

            now = self.timestamp()
            stored = copy.deepcopy(dict(record))
            stored[ID_FIELD] = identity
            stored["created_at"] = now
            stored["updated_at"] = now
            table[identity] = stored

        self._log_debug(f"insert {type} {identity}")
        return identity

    def fetch(self, type: str, identity: Any) -> Record:
        """Return a copy of the record.

        Raises:
            NotFound: If no record of ``type`` has ``identity``.
        """
        with self._lock:
            record = self._table(type).get(self._key(identity))
            if record is None:
                raise self._not_found(type, identity)
            return copy.deepcopy(record)

    def update(self, type: str, identity: Any, partial: Mapping[str, Any]) -> Record:
        """Merge ``partial`` into the record and bump ``updated_at``.

        The merged record replaces the stored one in a single step, so a
        failure never leaves a half-applied update behind.

        Raises:
            NotFound: If no record of ``type`` has ``identity``.
        """
        with self._lock:
            table = self._table(type)
            key = self._key(identity)
            current = table.get(key)
            if current is None:
                raise self._not_found(type, identity)

            merged = copy.deepcopy(current)
            merged.update(
                {k: copy.deepcopy(v) for k, v in partial.items() if k != ID_FIELD}
            )
            merged["updated_at"] = self.timestamp()
            table[key] = merged

        self._log_debug(f"update {type} {identity}")
        return copy.deepcopy(merged)

    def delete(self, type: str, identity: Any) -> Record:
        """Remove the record and return it.

        Raises:
            NotFound: If no record of ``type`` has ``identity``.
        """
        with self._lock:
            record = self._table(type).pop(self._key(identity), None)
            if record is None:
                raise self._not_found(type, identity)

        self._log_debug(f"delete {type} {identity}")
        return record

    def select(self, type: str, predicate: Predicate | None = None) -> list[Record]:
        """Copies of all records of ``type`` matching ``predicate``, in identity order."""
        with self._lock:
            table = self._table(type)
            ordered = sorted(table, key=lambda key: (isinstance(key, str), key))
            snapshot = copy.deepcopy([table[key] for key in ordered])

        # Predicates run outside the lock so they may consult the store.
        if predicate is None:
            return snapshot
        return [record for record in snapshot if predicate(record)]

    def page(
        self,
        type: str,
        params: Mapping[str, Any] | None = None,
        filter: Predicate | None = None,
        path: str | None = None,
    ) -> MockPage:
        """Select one page of records.

        Args:
            type: Resource type name.
            params: Paging parameters, ``page`` (1-based) and ``per_page``.
            filter: Optional predicate applied before slicing.
            path: API path used for the cursor URLs; defaults to ``/{type}.json``.

        Returns:
            The page with ``count`` (total after filtering) and cursor URLs.
            An empty selection is a valid zero-count page.
        """
        params = params or {}
        page_number = max(_number(params.get("page"), 1), 1)
        per_page = min(max(_number(params.get("per_page"), DEFAULT_PER_PAGE), 1), MAX_PER_PAGE)
        path = path or f"/{type}.json"

        records = self.select(type, filter)
        total = len(records)
        start = per_page * (page_number - 1)

        next_page = None
        if start + per_page < total:
            next_page = self.url_for(path, page=page_number + 1, per_page=per_page)
        previous_page = None
        if page_number > 1:
            previous_page = self.url_for(path, page=page_number - 1, per_page=per_page)

        return MockPage(
            records=records[start : start + per_page],
            count=total,
            next_page=next_page,
            previous_page=previous_page,
        )

    def count(self, type: str) -> int:
        """Number of stored records of ``type``."""
        with self._lock:
            return len(self._table(type))

    def reset(self) -> None:
        """Drop all records and identity counters."""
        with self._lock:
            self._data.clear()
            self._serials.clear()
        self._log_debug("reset")
