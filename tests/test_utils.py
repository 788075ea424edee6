"""Tests for utility functions."""

from appconfig_guard.utils import deep_merge
from appconfig_guard.utils import is_list_index
from appconfig_guard.utils import join_path
from appconfig_guard.utils import truncate_value


class TestDeepMerge:
    """Test deep_merge function."""

    def test_empty_dicts(self):
        """Test merging empty dictionaries."""
        assert deep_merge({}, {}) == {}

    def test_overlay_wins(self):
        """Test overlay takes precedence for simple values."""
        base = {"sync": {"label": "dev", "strict": False}}
        overlay = {"sync": {"strict": True}}
        assert deep_merge(base, overlay) == {"sync": {"label": "dev", "strict": True}}

    def test_dict_replaces_non_dict(self):
        """Test non-dict in overlay replaces dict in base."""
        assert deep_merge({"sync": {"label": "dev"}}, {"sync": None}) == {"sync": None}

    def test_original_not_modified(self):
        """Test that original dicts are not modified."""
        base = {"sync": {"label": "dev"}}
        overlay = {"sync": {"output": "json"}}
        result = deep_merge(base, overlay)

        assert result == {"sync": {"label": "dev", "output": "json"}}
        assert base == {"sync": {"label": "dev"}}
        assert overlay == {"sync": {"output": "json"}}


class TestPathHelpers:
    """Test path segment helpers."""

    def test_join_path_without_prefix(self):
        """Test joining onto an empty prefix returns the segment."""
        assert join_path("", "database") == "database"

    def test_join_path_with_prefix(self):
        """Test segments are joined with a dot."""
        assert join_path("database", "port") == "database.port"

    def test_is_list_index(self):
        """Test only non-negative ASCII integers are indices."""
        assert is_list_index("0")
        assert is_list_index("42")
        assert not is_list_index("-1")
        assert not is_list_index("port")
        assert not is_list_index("")
        assert not is_list_index("²")


class TestTruncateValue:
    """Test truncate_value function."""

    def test_short_value_unchanged(self):
        """Test values within the limit are returned as-is."""
        assert truncate_value("short") == "short"

    def test_long_value_truncated(self):
        """Test long values are cut and report their length."""
        value = "x" * 100
        result = truncate_value(value)
        assert result.startswith("x" * 77 + "...")
        assert result.endswith("(100 chars total)")
