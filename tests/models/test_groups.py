"""Tests for groups and soft deletion."""

import pytest

from helpdesk_sdk.exceptions import NotFound, ResourceDestroyedError, ValidationError


class TestGroups:
    """Tests for group CRUD."""

    def test_create_defaults(self, client):
        group = client.groups().create(name="Support")
        assert group.default is False
        assert group.deleted is False
        assert group.description == ""

    def test_blank_name_rejected_on_update(self, client):
        group = client.groups().create(name="Support")
        group.name = ""
        with pytest.raises(ValidationError) as exc_info:
            group.save()
        assert str(exc_info.value) == "Name: cannot be blank"

    def test_destroy_is_soft(self, client, store):
        """Destroyed groups stay fetchable with deleted set."""
        group = client.groups().create(name="Support")

        group.destroy()

        assert group.deleted is True
        fetched = client.groups().get(group.identity)
        assert fetched is not None
        assert fetched.deleted is True
        assert fetched.destroyed
        assert store.count("groups") == 1

    def test_listing_excludes_deleted(self, client):
        keep = client.groups().create(name="Keep")
        client.groups().create(name="Drop").destroy()

        groups = client.groups().all()

        assert list(groups) == [keep]
        assert groups.count == 1

    def test_deleted_group_cannot_be_saved(self, client):
        group = client.groups().create(name="Support")
        group.destroy()
        group.description = "back again"
        with pytest.raises(ResourceDestroyedError):
            group.save()

    def test_deleted_group_cannot_be_updated_remotely(self, client):
        group = client.groups().create(name="Support")
        client.groups().get(group.identity).destroy()
        group.name = "Renamed"
        with pytest.raises(NotFound):
            group.save()
