"""Shared fixtures."""

from datetime import UTC, datetime

import pytest

from helpdesk_sdk import HelpdeskClient
from helpdesk_sdk._internal.mock.store import MockStore

FROZEN_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def store() -> MockStore:
    """Fresh store with a frozen clock."""
    return MockStore(clock=lambda: FROZEN_NOW)


@pytest.fixture
def client(store: MockStore) -> HelpdeskClient:
    """Client bound to the mock strategy over ``store``."""
    return HelpdeskClient(mock=True, store=store)
