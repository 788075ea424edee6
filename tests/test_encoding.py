"""Tests for secret reference wire encoding."""

import json

from appconfig_guard import encode_for_storage
from appconfig_guard import normalize_retrieved_value
from appconfig_guard.encoding import KEY_VAULT_CONTENT_TYPE
from appconfig_guard.encoding import TEXT_CONTENT_TYPE
from appconfig_guard.encoding import detect_content_type

URI = "https://kv.vault.azure.net/secrets/db-password"
MARKER = f"@Microsoft.KeyVault(SecretUri={URI})"


class TestEncodeForStorage:
    """Test encode_for_storage function."""

    def test_regular_value_unchanged(self):
        """Test regular values pass through as text."""
        assert encode_for_storage("db.internal") == ("db.internal", TEXT_CONTENT_TYPE)

    def test_marker_encoded_as_uri_document(self):
        """Test the marker form becomes a compact uri document."""
        value, content_type = encode_for_storage(MARKER)
        assert value == '{"uri":"https://kv.vault.azure.net/secrets/db-password"}'
        assert content_type == KEY_VAULT_CONTENT_TYPE

    def test_bare_uri_encoded_as_uri_document(self):
        """Test a bare vault URI becomes a uri document."""
        value, _ = encode_for_storage(URI)
        assert json.loads(value) == {"uri": URI}

    def test_non_vault_url_is_text(self):
        """Test other URLs are plain text."""
        assert detect_content_type("https://example.com/x") == TEXT_CONTENT_TYPE


class TestNormalizeRetrievedValue:
    """Test normalize_retrieved_value function."""

    def test_uri_document(self):
        """Test the stored JSON form maps back to the marker form."""
        assert normalize_retrieved_value(json.dumps({"uri": URI})) == MARKER

    def test_bare_uri(self):
        """Test legacy bare URIs map to the marker form."""
        assert normalize_retrieved_value(URI) == MARKER

    def test_marker_unchanged(self):
        """Test values already in marker form are kept."""
        assert normalize_retrieved_value(MARKER) == MARKER

    def test_marker_with_whitespace_canonicalized(self):
        """Test spacing around the SecretUri parameter is dropped."""
        assert normalize_retrieved_value(f"@Microsoft.KeyVault( SecretUri = {URI} )") == MARKER

    def test_marker_extra_params_dropped(self):
        """Test parameters other than SecretUri are dropped."""
        assert normalize_retrieved_value(f"@Microsoft.KeyVault(SecretUri={URI}; Extra=x)") == MARKER

    def test_marker_without_secret_uri_unchanged(self):
        """Test markers that cannot be canonicalized are kept."""
        value = "@Microsoft.KeyVault(VaultName=kv)"
        assert normalize_retrieved_value(value) == value

    def test_other_json_unchanged(self):
        """Test JSON documents without a vault uri are kept."""
        value = '{"uri": "https://example.com/x"}'
        assert normalize_retrieved_value(value) == value
        assert normalize_retrieved_value('{"limits": {"cpu": 2}}') == '{"limits": {"cpu": 2}}'

    def test_invalid_json_unchanged(self):
        """Test brace-shaped non-JSON is kept."""
        assert normalize_retrieved_value("{oops}") == "{oops}"

    def test_encode_then_normalize(self):
        """Test a written reference reads back in its local form."""
        stored, _ = encode_for_storage(MARKER)
        assert normalize_retrieved_value(stored) == MARKER
