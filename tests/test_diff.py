"""Tests for the diff engine and its formatters."""

import json

import pytest
from appconfig_guard import Change
from appconfig_guard import ChangeKind
from appconfig_guard import ChangeSummary
from appconfig_guard import RemoteItem
from appconfig_guard import compute_diff
from appconfig_guard import encode_for_storage
from appconfig_guard import format_console
from appconfig_guard import format_json
from appconfig_guard import has_changes
from appconfig_guard import summarize

URI = "https://kv.vault.azure.net/secrets/api-key"


class TestComputeDiff:
    """Test compute_diff function."""

    def test_add_and_delete_sorted(self):
        """Test strict mode emits deletions and sorts by key."""
        local = {"x": "1", "y": "2"}
        remote = [RemoteItem(key="x", value="1"), RemoteItem(key="z", value="9")]

        changes = compute_diff(local, remote, strict=True)

        assert [(c.kind, c.key) for c in changes] == [(ChangeKind.ADD, "y"), (ChangeKind.DELETE, "z")]
        assert changes[0].new_value == "2"
        assert changes[1].old_value == "9"

    def test_non_strict_keeps_remote_only_keys(self):
        """Test remote-only keys are untouched without strict mode."""
        changes = compute_diff({}, [RemoteItem(key="z", value="9")], strict=False)
        assert changes == []

    def test_strict_deletes_exactly_once(self):
        """Test one remote-only key gives exactly one deletion."""
        changes = compute_diff({}, [RemoteItem(key="z", value="9")], strict=True)
        assert [c.kind for c in changes] == [ChangeKind.DELETE]

    def test_update_carries_remote_metadata(self):
        """Test updates record old/new values with the remote label and tags."""
        remote = [RemoteItem(key="db.port", value="5432", label="prod", tags={"team": "core"})]
        changes = compute_diff({"db.port": "6432"}, remote)

        assert changes == [
            Change(
                kind=ChangeKind.UPDATE,
                key="db.port",
                old_value="5432",
                new_value="6432",
                label="prod",
                tags={"team": "core"},
            )
        ]

    def test_equal_values_produce_nothing(self):
        """Test identical configuration has no changes."""
        remote = [RemoteItem(key="a", value="1"), RemoteItem(key="b", value="2")]
        assert compute_diff({"a": "1", "b": "2"}, remote, strict=True) == []

    def test_adds_use_label(self):
        """Test new keys are tagged with the sync label."""
        changes = compute_diff({"a": "1"}, [], label="staging")
        assert changes[0].label == "staging"

    def test_secret_encoding_differences_ignored(self):
        """Test a reference echoed back as a uri document is not a change."""
        local = {"api.key": f"@Microsoft.KeyVault(SecretUri={URI})"}
        remote = [RemoteItem(key="api.key", value=json.dumps({"uri": URI}))]
        assert compute_diff(local, remote) == []

    def test_bare_uri_locally_matches_stored_document(self):
        """Test bare URIs compare equal to their stored form."""
        local = {"api.key": URI}
        remote = [RemoteItem(key="api.key", value=json.dumps({"uri": URI}))]
        assert compute_diff(local, remote) == []

    @pytest.mark.parametrize(
        "local_value",
        [
            f"@Microsoft.KeyVault(SecretUri={URI})",
            f"@Microsoft.KeyVault( SecretUri = {URI} )",
            f"@Microsoft.KeyVault(SecretUri={URI}/v1)",
            f"@Microsoft.KeyVault(SecretUri={URI}/v1; Extra=x)",
            URI,
        ],
    )
    def test_reference_matches_its_own_stored_form(self, local_value):
        """Test every accepted reference shape equals what writing it stores."""
        stored, _ = encode_for_storage(local_value)
        remote = [RemoteItem(key="api.key", value=stored)]
        assert compute_diff({"api.key": local_value}, remote) == []

    def test_deterministic(self):
        """Test repeated runs give identical output."""
        local = {f"k{i}": str(i) for i in range(20)}
        remote = [RemoteItem(key=f"k{i}", value="old") for i in range(10, 30)]
        first = compute_diff(local, remote, strict=True)
        second = compute_diff(dict(reversed(list(local.items()))), list(reversed(remote)), strict=True)

        assert first == second
        assert [c.key for c in first] == sorted(c.key for c in first)


class TestSummary:
    """Test summarize and has_changes."""

    def test_counts(self):
        """Test counts per kind and total."""
        changes = [
            Change(kind=ChangeKind.ADD, key="a", new_value="1"),
            Change(kind=ChangeKind.ADD, key="b", new_value="1"),
            Change(kind=ChangeKind.UPDATE, key="c", old_value="1", new_value="2"),
            Change(kind=ChangeKind.DELETE, key="d", old_value="1"),
        ]
        assert summarize(changes) == ChangeSummary(added=2, updated=1, deleted=1, total=4)
        assert has_changes(changes)

    def test_empty(self):
        """Test no changes."""
        assert summarize([]) == ChangeSummary()
        assert not has_changes([])


class TestFormatters:
    """Test console and JSON output."""

    def test_json_output(self):
        """Test the JSON report omits empty fields."""
        changes = [
            Change(kind=ChangeKind.ADD, key="a", new_value="1"),
            Change(kind=ChangeKind.DELETE, key="b", old_value="2", label="prod"),
        ]
        document = json.loads(format_json(changes))

        assert document["changes"] == [
            {"type": "add", "key": "a", "new_value": "1"},
            {"type": "delete", "key": "b", "old_value": "2", "label": "prod"},
        ]
        assert document["summary"] == {"added": 1, "updated": 0, "deleted": 1, "total": 2}

    def test_console_no_changes(self):
        """Test the up-to-date message."""
        assert "No changes detected" in format_console([])

    def test_console_lists_changes(self):
        """Test keys, values and summary appear in the report."""
        changes = [
            Change(kind=ChangeKind.UPDATE, key="db.port", old_value="5432", new_value="6432"),
            Change(kind=ChangeKind.DELETE, key="legacy", old_value="x"),
        ]
        output = format_console(changes)

        assert "UPDATE db.port" in output
        assert '"6432"' in output
        assert '"5432"' in output
        assert "DELETE legacy" in output
        assert "1 updated" in output
        assert "2 total changes" in output
        assert "\x1b[" not in output

    def test_console_truncates_long_values(self):
        """Test long values are shortened."""
        output = format_console([Change(kind=ChangeKind.ADD, key="blob", new_value="v" * 200)])
        assert "(200 chars total)" in output
