"""Flatten/unflatten between nested documents and dotted key/value maps.

Flatten walks a JSON-like tree and renders every leaf to a string under a
dotted path (``database.port``, ``features.0``). Unflatten rebuilds the tree
from such a map. Scalars come back as strings: the store is string-typed, so
``True`` and ``"true"`` flatten identically and only JSON object/array shaped
strings are parsed back into structures.
"""

import json
import logging
import math
from typing import Any

from .classifier import validate_configuration
from .exceptions import StructuralError
from .exceptions import TypeConflictError
from .models import ValidationIssue
from .utils import PATH_SEPARATOR
from .utils import is_list_index
from .utils import join_path

logger = logging.getLogger(__name__)

ConfigTree = bool | int | float | str | list["ConfigTree"] | dict[str, "ConfigTree"] | None


def flatten(data: ConfigTree) -> dict[str, str]:
    """Flatten a nested document into dotted key/value pairs.

    Args:
        data: Parsed document (object or array at the root)

    Returns:
        Mapping of dotted path -> string value

    Raises:
        StructuralError: Root is a bare scalar, a leaf cannot be rendered, or
            two branches produce the same path

    Examples:
        >>> flatten({"a": {"b": 1}, "tags": ["x", "y"]})
        {'a.b': '1', 'tags.0': 'x', 'tags.1': 'y'}

        >>> flatten({})
        {}
    """
    if data is None:
        return {}
    if not isinstance(data, dict | list):
        raise StructuralError(f"document root must be an object or array, got {type(data).__name__}")

    result: dict[str, str] = {}
    _flatten_into(data, "", result)
    return result


def flatten_and_validate(data: ConfigTree) -> tuple[dict[str, str], list[ValidationIssue]]:
    """Flatten a document and validate every value.

    Structural problems raise; value problems are collected so the caller can
    still inspect the rest of the configuration.

    Returns:
        Tuple of (flat mapping, validation issues)
    """
    flat = flatten(data)
    issues = validate_configuration(flat)
    for issue in issues:
        logger.warning(f"Configuration validation warning: {issue}")
    return flat, issues


def unflatten(flat: dict[str, str]) -> dict[str, Any] | list[Any]:
    """Rebuild a nested document from dotted key/value pairs.

    Segments that are non-negative integers address list elements; missing
    lower indices are filled with None. Values shaped like JSON objects or
    arrays are parsed; every other value stays a string.

    Args:
        flat: Mapping of dotted path -> string value

    Returns:
        Nested dict (or list when every top-level segment is an index)

    Raises:
        TypeConflictError: A node would have to be both a list and an object,
            or both a leaf and a container (a parsed JSON value counts as a leaf)

    Examples:
        >>> unflatten({"a.b": "1"})
        {'a': {'b': '1'}}

        >>> unflatten({"servers.1": "b", "servers.0": "a"})
        {'servers': ['a', 'b']}
    """
    root: dict[str, Any] | list[Any] | None = None
    parsed_leaves: set[int] = set()

    for path, value in flat.items():
        segments = path.split(PATH_SEPARATOR)
        root = _ensure_container(root, segments[0], "")
        node = root

        for depth, segment in enumerate(segments[:-1]):
            where = PATH_SEPARATOR.join(segments[: depth + 1])
            existing = _get_child(node, segment)
            if id(existing) in parsed_leaves:
                raise TypeConflictError(where, "value collides with an existing entry")
            child = _ensure_container(existing, segments[depth + 1], where)
            _set_child(node, segment, child)
            node = child

        if _get_child(node, segments[-1]) is not None:
            raise TypeConflictError(path, "value collides with an existing entry")
        leaf = parse_leaf(value)
        if isinstance(leaf, dict | list):
            parsed_leaves.add(id(leaf))
        _set_child(node, segments[-1], leaf)

    return root if root is not None else {}


def parse_leaf(value: str) -> Any:
    """Parse a flattened value back into a tree leaf.

    Only JSON object/array shaped strings are parsed; invalid JSON and every
    other value stay strings.
    """
    if (value.startswith("{") and value.endswith("}")) or (value.startswith("[") and value.endswith("]")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def render_scalar(value: bool | int | float | str, path: str) -> str:
    """Render a scalar leaf in its canonical string form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise StructuralError(f"cannot render non-finite number at {path}: {value}")
        return repr(value)
    return value


# ===== Private Helpers =====


def _flatten_into(value: Any, prefix: str, result: dict[str, str]) -> None:
    if value is None:
        return

    if isinstance(value, dict):
        for key, child in value.items():
            _flatten_into(child, join_path(prefix, str(key)), result)
    elif isinstance(value, list):
        for index, child in enumerate(value):
            _flatten_into(child, join_path(prefix, str(index)), result)
    elif isinstance(value, bool | int | float | str):
        _store(result, prefix, render_scalar(value, prefix))
    else:
        _store(result, prefix, _render_opaque(value, prefix))


def _render_opaque(value: Any, path: str) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise StructuralError(f"failed to render value at {path}: {e}") from e


def _store(result: dict[str, str], path: str, rendered: str) -> None:
    if path in result:
        raise StructuralError(f"duplicate key after flattening: {path}")
    result[path] = rendered


def _ensure_container(existing: Any, next_segment: str, where: str) -> dict[str, Any] | list[Any]:
    wants_list = is_list_index(next_segment)
    if existing is None:
        return [] if wants_list else {}
    if wants_list and isinstance(existing, list):
        return existing
    if not wants_list and isinstance(existing, dict):
        return existing

    expected = "list" if wants_list else "object"
    raise TypeConflictError(where or "<root>", f"expected {expected}, found {type(existing).__name__}")


def _get_child(node: dict[str, Any] | list[Any], segment: str) -> Any:
    if isinstance(node, list):
        index = int(segment)
        return node[index] if index < len(node) else None
    return node.get(segment)


def _set_child(node: dict[str, Any] | list[Any], segment: str, value: Any) -> None:
    if isinstance(node, list):
        index = int(segment)
        while len(node) <= index:
            node.append(None)
        node[index] = value
    else:
        node[segment] = value
