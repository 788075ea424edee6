"""Sync workflows between a local JSON document and a configuration store."""

import logging
import threading
from pathlib import Path
from typing import Any

from .classifier import validate_configuration
from .diff import compute_diff
from .diff import format_console
from .diff import format_json
from .diff import summarize
from .documents import load_document
from .documents import write_document
from .encoding import normalize_retrieved_value
from .models import SyncOptions
from .models import SyncPlan
from .reconcile import Reconciler
from .store import ConfigStore
from .transform import flatten_and_validate
from .transform import unflatten

logger = logging.getLogger(__name__)


class SyncManager:
    """Plans and applies synchronization against a configuration store.

    The store is injected; options are passed explicitly instead of being
    read from process-wide state.

    Args:
        store: Remote configuration store
        options: Sync options (default: non-strict, no label)
    """

    def __init__(self, store: ConfigStore, options: SyncOptions | None = None):
        self.store = store
        self.options = options or SyncOptions()

    # ===== Upload direction =====

    def plan(self, document: Path | dict[str, Any] | list[Any]) -> SyncPlan:
        """Compare a local document with the store.

        Args:
            document: Path to a JSON file, or an already parsed document

        Returns:
            SyncPlan with sorted changes, summary, and validation issues
        """
        data = load_document(document) if isinstance(document, Path) else document
        local, issues = flatten_and_validate(data)

        remote = self.store.fetch(self.options.label)
        changes = compute_diff(local, remote, strict=self.options.strict, label=self.options.label)
        summary = summarize(changes)

        logger.info(
            f"Planned {summary.total} change(s): {summary.added} added, "
            f"{summary.updated} updated, {summary.deleted} deleted"
        )
        return SyncPlan(changes=changes, summary=summary, issues=issues)

    def apply(self, plan: SyncPlan, cancel: threading.Event | None = None) -> int:
        """Apply a plan to the store.

        Returns:
            Number of store calls made
        """
        if not plan.changes:
            logger.info("No changes to apply")
            return 0

        reconciler = Reconciler(self.store, self.options.retry)
        return reconciler.apply(plan.changes, strict=self.options.strict, cancel=cancel)

    def render(self, plan: SyncPlan, color: bool = False) -> str:
        """Render a plan in the configured output format."""
        if self.options.output == "json":
            return format_json(plan.changes)
        return format_console(plan.changes, color=color)

    # ===== Download direction =====

    def download(self, output: Path | None = None) -> dict[str, Any] | list[Any]:
        """Fetch the store contents and rebuild a structured document.

        Args:
            output: Optional path to write the document to as indented JSON

        Returns:
            The rebuilt document
        """
        items = self.store.fetch(self.options.label)
        logger.info(f"Fetched {len(items)} configuration item(s)")

        flat = {item.key: normalize_retrieved_value(item.value) for item in items}
        for issue in validate_configuration(flat):
            logger.warning(f"Configuration validation warning: {issue}")

        document = unflatten(flat)
        if output is not None:
            write_document(output, document)
        return document
