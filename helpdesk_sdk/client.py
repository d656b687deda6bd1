"""User-facing client for the Helpdesk API.

The client binds exactly one execution strategy at construction time:

    from helpdesk_sdk import HelpdeskClient

    # Real service
    client = HelpdeskClient(
        url="https://acme.zendesk.com/api/v2",
        username="agent@acme.com",
        token="api-token",
    )

    # In-process simulation, e.g. for tests
    client = HelpdeskClient(mock=True)

    ticket = client.tickets().create(subject="Printer on fire", description="Help")
    for ticket in client.organizations().get(7).tickets():
        ...
"""

import os
from typing import Any

import httpx

from helpdesk_sdk._internal.http import create_http_client
from helpdesk_sdk._internal.mock.store import DEFAULT_BASE_URL, MockStore
from helpdesk_sdk._internal.redaction import redact_payload
from helpdesk_sdk._internal.request import (
    REGISTRY,
    MockStrategy,
    RealStrategy,
    Response,
    Strategy,
)
from helpdesk_sdk.exceptions import HelpdeskConfigError, HelpdeskError
from helpdesk_sdk.models import (
    Categories,
    Groups,
    Memberships,
    Organizations,
    TicketAudits,
    TicketComments,
    TicketFields,
    Tickets,
    Users,
)

DEFAULT_TIMEOUT_MS = 30000


class HelpdeskClient:
    """Composition root: one strategy, one method per request, one accessor per collection.

    Every registered request is also reachable as a method named after it,
    e.g. ``client.create_ticket({"ticket": {...}})``.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        username: str | None = None,
        token: str | None = None,
        mock: bool = False,
        store: MockStore | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        debug: bool = False,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: API base URL, e.g. ``https://acme.zendesk.com/api/v2``.
            username: API user e-mail, used for token authentication.
            token: API token.
            mock: Execute requests against an in-process ``MockStore``.
            store: Store to use when mocking; a fresh one is created if omitted.
            timeout_ms: Request timeout in milliseconds (real strategy only).
            debug: Enable debug logging to stderr.
            http_client: Preconfigured httpx client for the real strategy.

        Raises:
            HelpdeskConfigError: If the real strategy is selected without a URL
                or without credentials.
        """
        self._url = url
        self._username = username
        self._debug = debug
        self._store: MockStore | None = None
        self._strategy: Strategy

        if mock:
            self._store = store or MockStore(base_url=url or DEFAULT_BASE_URL, debug=debug)
            self._strategy = MockStrategy(self._store)
            return

        if not url:
            raise HelpdeskConfigError("url is required unless mocking")
        if http_client is None:
            if not (username and token):
                raise HelpdeskConfigError("username and token are required unless mocking")
            http_client = create_http_client(
                base_url=url,
                auth=(f"{username}/token", token),
                timeout=timeout_ms / 1000,
            )
        self._strategy = RealStrategy(http_client)

    @classmethod
    def from_env(cls) -> "HelpdeskClient":
        """Create a client from environment variables.

        Environment variables:
            HELPDESK_URL: The API base URL.
            HELPDESK_USERNAME: The API user e-mail.
            HELPDESK_TOKEN: The API token.
            HELPDESK_MOCK: Set to "1" to use the in-process simulation.
            HELPDESK_DEBUG: Set to "1" to enable debug logging.
            HELPDESK_TIMEOUT_MS: Request timeout in milliseconds.

        Returns:
            A configured HelpdeskClient.

        Raises:
            HelpdeskConfigError: If not mocking and URL or credentials are missing.
            ValueError: If HELPDESK_TIMEOUT_MS is not an integer.
        """
        return cls(
            url=os.environ.get("HELPDESK_URL"),
            username=os.environ.get("HELPDESK_USERNAME"),
            token=os.environ.get("HELPDESK_TOKEN"),
            mock=os.environ.get("HELPDESK_MOCK", "") == "1",
            timeout_ms=int(os.environ.get("HELPDESK_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))),
            debug=os.environ.get("HELPDESK_DEBUG", "") == "1",
        )

    def __enter__(self) -> "HelpdeskClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("_") and name in REGISTRY:
            return lambda params=None: self.request(name, params)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    @property
    def mocking(self) -> bool:
        """Check if requests run against the in-process simulation."""
        return self._store is not None

    @property
    def username(self) -> str | None:
        return self._username

    @property
    def store(self) -> MockStore | None:
        return self._store

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            import sys

            print(f"[helpdesk-sdk] {message}", file=sys.stderr)

    def request(self, name: str | None, params: dict[str, Any] | None = None) -> Response:
        """Execute the registered request ``name`` through the bound strategy.

        Args:
            name: Registered request name, e.g. "create_ticket".
            params: Request parameters, usually ``{root: {...attributes}}``.

        Returns:
            The response envelope.

        Raises:
            HelpdeskConfigError: If no request is registered under ``name``.
            RemoteError: If the request failed (see its subclasses).
        """
        request_cls = REGISTRY.get(name) if name else None
        if request_cls is None:
            raise HelpdeskConfigError(f"unknown request: {name}")

        request = request_cls(self, params)
        self._log_debug(f"{request.method} {name} {redact_payload(request.params)}")
        try:
            response = self._strategy.execute(request)
        except HelpdeskError as e:
            self._log_debug(f"{name} failed: {e}")
            raise
        self._log_debug(f"{name} -> {response.status}")
        return response

    def reset(self) -> None:
        """Clear the simulated data. Only valid when mocking."""
        if self._store is None:
            raise HelpdeskConfigError("reset is only available when mocking")
        self._store.reset()

    def close(self) -> None:
        self._strategy.close()

    # =========================================================================
    # Collections
    # =========================================================================

    def users(self, **scope: Any) -> Users:
        return Users(self, **scope)

    def organizations(self) -> Organizations:
        return Organizations(self)

    def tickets(self, **scope: Any) -> Tickets:
        return Tickets(self, **scope)

    def groups(self) -> Groups:
        return Groups(self)

    def memberships(self, **scope: Any) -> Memberships:
        return Memberships(self, **scope)

    def ticket_comments(self, **scope: Any) -> TicketComments:
        return TicketComments(self, **scope)

    def ticket_audits(self, **scope: Any) -> TicketAudits:
        return TicketAudits(self, **scope)

    def ticket_fields(self) -> TicketFields:
        return TicketFields(self)

    def help_center_categories(self) -> Categories:
        return Categories(self)
