"""Three-way diff between a flattened local document and the remote store."""

import io
import json
import logging
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .encoding import normalize_retrieved_value
from .models import Change
from .models import ChangeKind
from .models import ChangeSummary
from .models import RemoteItem
from .utils import truncate_value

logger = logging.getLogger(__name__)

_STYLES = {
    ChangeKind.ADD: ("+", "ADD", "green"),
    ChangeKind.UPDATE: ("~", "UPDATE", "yellow"),
    ChangeKind.DELETE: ("-", "DELETE", "red"),
}


def compute_diff(
    local: dict[str, str],
    remote: Iterable[RemoteItem],
    strict: bool = False,
    label: str | None = None,
) -> list[Change]:
    """Compare local configuration with the remote store.

    Values are compared after normalizing secret references on both sides,
    so a Key Vault reference echoed back as ``{"uri": ...}`` matches its
    ``@Microsoft.KeyVault(...)`` form.

    Args:
        local: Flattened local configuration
        remote: Items currently held by the store
        strict: Schedule remote-only keys for deletion
        label: Label attached to newly added keys

    Returns:
        Changes sorted by key
    """
    remote_by_key = {item.key: item for item in remote}
    changes = []

    for key, local_value in local.items():
        item = remote_by_key.pop(key, None)
        if item is None:
            changes.append(Change(kind=ChangeKind.ADD, key=key, new_value=local_value, label=label))
            continue

        remote_value = normalize_retrieved_value(item.value)
        if normalize_retrieved_value(local_value) != remote_value:
            changes.append(
                Change(
                    kind=ChangeKind.UPDATE,
                    key=key,
                    old_value=remote_value,
                    new_value=local_value,
                    label=item.label,
                    tags=item.tags,
                )
            )

    if strict:
        for item in remote_by_key.values():
            changes.append(
                Change(
                    kind=ChangeKind.DELETE,
                    key=item.key,
                    old_value=normalize_retrieved_value(item.value),
                    label=item.label,
                    tags=item.tags,
                )
            )
    elif remote_by_key:
        logger.debug(f"Leaving {len(remote_by_key)} remote-only key(s) untouched (strict mode off)")

    changes.sort(key=lambda change: change.key)
    return changes


def summarize(changes: Iterable[Change]) -> ChangeSummary:
    """Count changes by kind."""
    counts = {kind: 0 for kind in ChangeKind}
    total = 0
    for change in changes:
        counts[change.kind] += 1
        total += 1
    return ChangeSummary(
        added=counts[ChangeKind.ADD],
        updated=counts[ChangeKind.UPDATE],
        deleted=counts[ChangeKind.DELETE],
        total=total,
    )


def has_changes(changes: list[Change]) -> bool:
    return len(changes) > 0


def format_json(changes: list[Change]) -> str:
    """Render changes and their summary as indented JSON."""
    summary = summarize(changes)
    document = {
        "changes": [change.to_dict() for change in changes],
        "summary": {
            "added": summary.added,
            "updated": summary.updated,
            "deleted": summary.deleted,
            "total": summary.total,
        },
    }
    return json.dumps(document, indent=2)


def format_console(changes: list[Change], color: bool = False, width: int = 100) -> str:
    """Render a human-readable change report.

    Args:
        changes: Changes to render
        color: Emit ANSI styling
        width: Width of the separator rules

    Returns:
        Report text
    """
    console = Console(
        file=io.StringIO(), record=True, force_terminal=color, no_color=not color, width=width, soft_wrap=True
    )

    if not changes:
        console.print(Text("No changes detected. Your configuration is up to date!", style="bold green"))
        return console.export_text(styles=color)

    console.print(Text("Configuration Changes", style="bold cyan"))
    console.rule(style="bright_black")

    for change in changes:
        symbol, name, style = _STYLES[change.kind]
        header = Text.assemble((f"{symbol} {name} ", f"bold {style}"), (change.key, "bold blue"))
        console.print(header)
        if change.new_value is not None:
            console.print(Text.assemble(("   New value: ", "cyan"), f'"{truncate_value(change.new_value)}"'))
        if change.old_value is not None:
            console.print(Text.assemble(("   Old value: ", "bright_black"), f'"{truncate_value(change.old_value)}"'))

    summary = summarize(changes)
    console.rule(style="bright_black")
    console.print(Text("Summary", style="bold cyan"))
    if summary.added:
        console.print(Text(f"   {summary.added} added", style="green"))
    if summary.updated:
        console.print(Text(f"   {summary.updated} updated", style="yellow"))
    if summary.deleted:
        console.print(Text(f"   {summary.deleted} deleted", style="red"))
    console.print(Text(f"   {summary.total} total changes", style="bold magenta"))

    return console.export_text(styles=color)
