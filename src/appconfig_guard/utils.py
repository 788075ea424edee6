"""Utility functions for appconfig-guard."""

from typing import Any

PATH_SEPARATOR = "."


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries with overlay precedence.

    Nested dictionaries are merged recursively; any other overlay value
    replaces the base value outright.

    Args:
        base: Base dictionary
        overlay: Overlay dictionary (takes precedence)

    Returns:
        New merged dictionary (base and overlay are not modified)

    Examples:
        >>> deep_merge({"sync": {"label": "dev", "strict": False}}, {"sync": {"strict": True}})
        {'sync': {'label': 'dev', 'strict': True}}

        >>> deep_merge({}, {"sync": {}})
        {'sync': {}}
    """
    result = base.copy()

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def join_path(prefix: str, segment: str) -> str:
    """Append a segment to a dotted path."""
    if not prefix:
        return segment
    return f"{prefix}{PATH_SEPARATOR}{segment}"


def is_list_index(segment: str) -> bool:
    """Return True when a path segment is a non-negative integer index.

    >>> is_list_index("0"), is_list_index("12"), is_list_index("-1"), is_list_index("port")
    (True, True, False, False)
    """
    return segment.isascii() and segment.isdigit()


def truncate_value(value: str, max_len: int = 80) -> str:
    """Shorten long values for display, keeping the total length visible."""
    if len(value) <= max_len:
        return value
    return f"{value[: max_len - 3]}... ({len(value)} chars total)"
