"""Remote configuration store interface.

The sync workflows only need three capabilities from a store: list its
items, upsert one, and delete one. Network access, authentication and
pagination belong to the concrete adapter.
"""

import logging
from collections.abc import Callable
from typing import Protocol
from typing import runtime_checkable

from .models import RemoteItem
from .models import StoreOperation

logger = logging.getLogger(__name__)


@runtime_checkable
class ConfigStore(Protocol):
    """Capabilities the sync engine requires from a key-value store."""

    def fetch(self, label_filter: str | None = None) -> list[RemoteItem]:
        """Return every item, optionally restricted to one label."""
        ...

    def write(
        self,
        key: str,
        value: str,
        label: str | None = None,
        tags: dict[str, str] | None = None,
        content_type: str | None = None,
    ) -> None:
        """Create or replace an item."""
        ...

    def delete(self, key: str, label: str | None = None) -> None:
        """Remove an item."""
        ...


class InMemoryStore:
    """Dict-backed ConfigStore keyed by (key, label).

    Useful for dry runs and tests. ``fail_hook`` is called with every
    operation before it is applied; raising from it simulates a store error.

    Args:
        items: Initial contents
        fail_hook: Optional callable invoked before each write/delete
    """

    def __init__(
        self,
        items: list[RemoteItem] | None = None,
        fail_hook: Callable[[StoreOperation], None] | None = None,
    ):
        self._items: dict[tuple[str, str | None], RemoteItem] = {}
        self.fail_hook = fail_hook
        self.calls: list[StoreOperation] = []
        for item in items or []:
            self._items[(item.key, item.label)] = item

    def fetch(self, label_filter: str | None = None) -> list[RemoteItem]:
        items = [
            item for (_, label), item in self._items.items() if label_filter is None or label == label_filter
        ]
        return sorted(items, key=lambda item: (item.key, item.label or ""))

    def write(
        self,
        key: str,
        value: str,
        label: str | None = None,
        tags: dict[str, str] | None = None,
        content_type: str | None = None,
    ) -> None:
        operation = StoreOperation("write", key, value, label, tags, content_type)
        self._record(operation)
        self._items[(key, label)] = RemoteItem(
            key=key,
            value=value,
            label=label,
            tags=dict(tags) if tags else None,
            content_type=content_type,
        )
        logger.debug(f"Stored '{key}' (label={label!r})")

    def delete(self, key: str, label: str | None = None) -> None:
        self._record(StoreOperation("delete", key, label=label))
        self._items.pop((key, label), None)
        logger.debug(f"Deleted '{key}' (label={label!r})")

    def get(self, key: str, label: str | None = None) -> RemoteItem | None:
        """Look up a single item."""
        return self._items.get((key, label))

    def _record(self, operation: StoreOperation) -> None:
        self.calls.append(operation)
        if self.fail_hook:
            self.fail_hook(operation)
