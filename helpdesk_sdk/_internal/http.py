"""Shared HTTP client configuration."""

import httpx

from helpdesk_sdk._version import __version__

DEFAULT_TIMEOUT = 30.0


def create_http_client(
    *,
    base_url: str,
    auth: tuple[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Client:
    """Create configured HTTP client.

    Args:
        base_url: Base URL for all requests, e.g. ``https://acme.zendesk.com/api/v2``.
        auth: Optional basic auth credentials.
        timeout: Request timeout in seconds.

    Returns:
        Configured httpx.Client instance.
    """
    return httpx.Client(
        timeout=timeout,
        base_url=base_url.rstrip("/"),
        auth=auth,
        headers={
            "User-Agent": f"helpdesk-sdk/{__version__}",
            "Accept": "application/json",
        },
    )
