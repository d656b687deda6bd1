"""In-process simulation of the Helpdesk API."""

from helpdesk_sdk._internal.mock.store import MockPage, MockStore

__all__ = ["MockPage", "MockStore"]
