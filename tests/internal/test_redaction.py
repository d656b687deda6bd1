"""Tests for redaction logic."""

from helpdesk_sdk._internal.redaction import REDACTED_VALUE, redact_payload


class TestRedactPayload:
    """Tests for redact_payload function."""

    def test_redacts_password_in_user_body(self):
        """Should redact a password inside an enveloped user body."""
        payload = {"user": {"name": "Alice", "email": "a@example.com", "password": "hunter2"}}
        result = redact_payload(payload)
        assert result["user"]["password"] == REDACTED_VALUE
        assert result["user"]["name"] == "Alice"
        assert result["user"]["email"] == "a@example.com"

    def test_redacts_in_lists(self):
        """Should redact sensitive keys in objects inside lists."""
        payload = {
            "users": [
                {"name": "Alice", "token": "t1"},
                {"name": "Bob", "token": "t2"},
            ]
        }
        result = redact_payload(payload)
        assert result["users"][0]["token"] == REDACTED_VALUE
        assert result["users"][1]["token"] == REDACTED_VALUE
        assert result["users"][1]["name"] == "Bob"

    def test_case_insensitive_redaction(self):
        """Should match sensitive keys regardless of case."""
        result = redact_payload({"Authorization": "Basic abc", "API_KEY": "k"})
        assert result["Authorization"] == REDACTED_VALUE
        assert result["API_KEY"] == REDACTED_VALUE

    def test_does_not_mutate_original(self):
        """Should never mutate the original payload."""
        payload = {"ticket": {"subject": "s", "secret": "x"}}
        redact_payload(payload)
        assert payload["ticket"]["secret"] == "x"

    def test_non_dict_values_pass_through(self):
        """Should return scalars unchanged."""
        assert redact_payload("plain") == "plain"
        assert redact_payload(None) is None
        assert redact_payload([1, 2]) == [1, 2]
