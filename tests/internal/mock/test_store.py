"""Tests for MockStore."""

import threading
from datetime import UTC, datetime

import pytest

from helpdesk_sdk._internal.mock.store import DEFAULT_BASE_URL, MAX_PER_PAGE, MockStore
from helpdesk_sdk.exceptions import NotFound


class TestIdentities:
    """Tests for identity assignment."""

    def test_serial_ids_start_at_one(self, store):
        assert store.insert("tickets", {"subject": "a"}) == 1
        assert store.insert("tickets", {"subject": "b"}) == 2

    def test_serial_ids_are_per_type(self, store):
        store.insert("tickets", {})
        assert store.insert("users", {}) == 1

    def test_identities_not_reused_after_delete(self, store):
        """Deleting a record must not free its identity."""
        first = store.insert("tickets", {})
        store.delete("tickets", first)
        assert store.insert("tickets", {}) == first + 1

    def test_reserved_identity(self, store):
        identity = store.serial_id("tickets")
        assert store.insert("tickets", {"subject": "a"}, identity=identity) == identity
        assert store.fetch("tickets", identity)["subject"] == "a"

    def test_duplicate_identity_rejected(self, store):
        identity = store.insert("tickets", {})
        with pytest.raises(ValueError):
            store.insert("tickets", {}, identity=identity)

    def test_concurrent_inserts_get_distinct_ids(self, store):
        """Identities should stay unique when inserting from several threads."""
        results: list[int] = []
        lock = threading.Lock()

        def worker():
            for _ in range(50):
                identity = store.insert("tickets", {})
                with lock:
                    results.append(identity)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == list(range(1, 201))
        assert store.count("tickets") == 200


class TestRecords:
    """Tests for fetch, update and delete."""

    def test_insert_sets_timestamps(self, store):
        identity = store.insert("tickets", {"subject": "a"})
        record = store.fetch("tickets", identity)
        assert record["id"] == identity
        assert record["created_at"] == "2024-01-01T12:00:00Z"
        assert record["updated_at"] == "2024-01-01T12:00:00Z"

    def test_fetch_returns_copy(self, store):
        """Mutating a fetched record should not change the store."""
        identity = store.insert("tickets", {"tags": ["a"]})
        store.fetch("tickets", identity)["tags"].append("b")
        assert store.fetch("tickets", identity)["tags"] == ["a"]

    def test_insert_copies_input(self, store):
        record = {"tags": ["a"]}
        identity = store.insert("tickets", record)
        record["tags"].append("b")
        assert store.fetch("tickets", identity)["tags"] == ["a"]

    def test_fetch_string_identity(self, store):
        identity = store.insert("tickets", {})
        assert store.fetch("tickets", str(identity))["id"] == identity

    def test_fetch_missing(self, store):
        with pytest.raises(NotFound) as exc_info:
            store.fetch("tickets", 1)
        assert exc_info.value.body == {"error": "RecordNotFound", "description": "Not found"}

    def test_update_merges_and_bumps_updated_at(self):
        times = iter(
            [
                datetime(2024, 1, 1, tzinfo=UTC),
                datetime(2024, 1, 2, tzinfo=UTC),
            ]
        )
        store = MockStore(clock=lambda: next(times))
        identity = store.insert("tickets", {"subject": "a", "status": "new"})

        record = store.update("tickets", identity, {"status": "open", "id": 99})

        assert record["subject"] == "a"
        assert record["status"] == "open"
        assert record["id"] == identity
        assert record["created_at"] == "2024-01-01T00:00:00Z"
        assert record["updated_at"] == "2024-01-02T00:00:00Z"

    def test_update_missing(self, store):
        with pytest.raises(NotFound):
            store.update("tickets", 1, {"status": "open"})

    def test_failed_update_leaves_record_untouched(self, store):
        """A partial that cannot be copied should not half-apply."""
        identity = store.insert("tickets", {"subject": "a", "status": "new"})

        with pytest.raises(TypeError):
            store.update("tickets", identity, {"status": "open", "lock": threading.Lock()})

        assert store.fetch("tickets", identity)["status"] == "new"

    def test_delete(self, store):
        identity = store.insert("tickets", {"subject": "a"})
        assert store.delete("tickets", identity)["subject"] == "a"
        with pytest.raises(NotFound):
            store.fetch("tickets", identity)
        with pytest.raises(NotFound):
            store.delete("tickets", identity)

    def test_select(self, store):
        for status in ("new", "open", "new"):
            store.insert("tickets", {"status": status})
        assert len(store.select("tickets")) == 3
        assert [r["id"] for r in store.select("tickets", lambda r: r["status"] == "new")] == [1, 3]
        assert store.select("users") == []

    def test_reset(self, store):
        store.insert("tickets", {})
        store.reset()
        assert store.count("tickets") == 0
        assert store.insert("tickets", {}) == 1


class TestPage:
    """Tests for MockStore.page()."""

    def test_defaults(self, store):
        for _ in range(3):
            store.insert("tickets", {})
        page = store.page("tickets")
        assert [r["id"] for r in page.records] == [1, 2, 3]
        assert page.count == 3
        assert page.next_page is None
        assert page.previous_page is None

    def test_cursor_urls(self, store):
        for _ in range(5):
            store.insert("tickets", {})
        page = store.page("tickets", {"page": 2, "per_page": 2})
        assert [r["id"] for r in page.records] == [3, 4]
        assert page.next_page == f"{DEFAULT_BASE_URL}/tickets.json?page=3&per_page=2"
        assert page.previous_page == f"{DEFAULT_BASE_URL}/tickets.json?page=1&per_page=2"

    def test_custom_path(self, store):
        for _ in range(3):
            store.insert("tickets", {})
        page = store.page("tickets", {"per_page": 1}, path="/organizations/1/tickets.json")
        assert page.next_page.startswith(f"{DEFAULT_BASE_URL}/organizations/1/tickets.json?")

    def test_filter_applies_before_slicing(self, store):
        for n in range(6):
            store.insert("tickets", {"even": n % 2 == 0})
        page = store.page("tickets", {"per_page": 2}, filter=lambda r: r["even"])
        assert page.count == 3
        assert [r["id"] for r in page.records] == [1, 3]
        assert page.next_page is not None

    def test_per_page_clamped(self, store):
        for _ in range(MAX_PER_PAGE + 5):
            store.insert("tickets", {})
        assert len(store.page("tickets", {"per_page": 1000}).records) == MAX_PER_PAGE
        assert len(store.page("tickets", {"per_page": 0}).records) == MAX_PER_PAGE
        assert len(store.page("tickets", {"per_page": -3}).records) == 1

    def test_string_parameters(self, store):
        for _ in range(3):
            store.insert("tickets", {})
        page = store.page("tickets", {"page": "2", "per_page": "2"})
        assert [r["id"] for r in page.records] == [3]

    def test_garbage_parameters_fall_back_to_defaults(self, store):
        """Non-numeric paging values should not raise."""
        for _ in range(3):
            store.insert("tickets", {})
        page = store.page("tickets", {"page": "x", "per_page": "ten"})
        assert [r["id"] for r in page.records] == [1, 2, 3]
        assert page.previous_page is None
        assert page.next_page is None

    def test_empty(self, store):
        page = store.page("tickets", {"page": 1})
        assert page.records == []
        assert page.count == 0
        assert page.next_page is None


class TestUrls:
    """Tests for generated URLs."""

    def test_custom_base_url(self):
        store = MockStore(base_url="https://acme.zendesk.com/api/v2/")
        assert store.url_for("/tickets/1.json") == "https://acme.zendesk.com/api/v2/tickets/1.json"

    def test_query(self, store):
        assert store.url_for("/users/search.json", query="bob") == (
            f"{DEFAULT_BASE_URL}/users/search.json?query=bob"
        )
