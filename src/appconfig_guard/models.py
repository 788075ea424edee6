"""Data models for appconfig-guard."""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from typing import Any


class Scope(Enum):
    """Settings scope enumeration.

    Determines which settings file to target for write operations.
    """

    USER = "user"
    PROJECT = "project"
    LOCAL = "local"


class ValueKind(Enum):
    """Classification of a flattened configuration value."""

    REGULAR = "regular"
    FEATURE_FLAG = "feature_flag"
    SECRET_REFERENCE = "keyvault"


class ChangeKind(Enum):
    """Kind of change the diff engine can produce."""

    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ConfigPaths:
    """Paths to the three settings scopes.

    Attributes:
        user: Path to user-global settings file (required)
        project: Path to project settings file (optional)
        local: Path to local (machine-specific) settings file (optional)
    """

    user: Path
    project: Path | None = None
    local: Path | None = None


@dataclass(frozen=True)
class FeatureFlag:
    """A boolean configuration entry identified by its key name."""

    enabled: bool
    description: str


@dataclass(frozen=True)
class SecretReference:
    """Pointer to a secret stored in a Key Vault."""

    vault_url: str
    secret_name: str
    secret_version: str = ""

    @property
    def secret_uri(self) -> str:
        uri = f"{self.vault_url}/secrets/{self.secret_name}"
        if self.secret_version:
            uri = f"{uri}/{self.secret_version}"
        return uri


@dataclass(frozen=True)
class ClassifiedValue:
    """A flattened value tagged with its kind.

    Exactly one of ``feature_flag`` / ``secret`` is set for the special
    kinds; both are None for regular values.
    """

    kind: ValueKind
    original: str
    feature_flag: FeatureFlag | None = None
    secret: SecretReference | None = None


@dataclass(frozen=True)
class ValidationIssue:
    """A per-key validation warning collected over a whole configuration."""

    key: str
    value: str
    message: str
    kind: str

    def __str__(self) -> str:
        return f"[{self.kind}] {self.key}: {self.message}"


@dataclass(frozen=True)
class RemoteItem:
    """A key-value entry as held by the remote store."""

    key: str
    value: str
    label: str | None = None
    tags: dict[str, str] | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class Change:
    """A single add/update/delete produced by the diff engine."""

    kind: ChangeKind
    key: str
    old_value: str | None = None
    new_value: str | None = None
    label: str | None = None
    tags: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output, omitting empty fields."""
        data: dict[str, Any] = {"type": self.kind.value, "key": self.key}
        if self.old_value:
            data["old_value"] = self.old_value
        if self.new_value:
            data["new_value"] = self.new_value
        if self.label:
            data["label"] = self.label
        if self.tags:
            data["tags"] = dict(self.tags)
        return data


@dataclass(frozen=True)
class ChangeSummary:
    """Counts of changes by kind."""

    added: int = 0
    updated: int = 0
    deleted: int = 0
    total: int = 0


@dataclass(frozen=True)
class StoreOperation:
    """One store call derived from a Change."""

    operation: str
    key: str
    value: str | None = None
    label: str | None = None
    tags: dict[str, str] | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget for individual store calls.

    Attributes:
        max_retries: Additional attempts after the first one
        base_delay: Seconds; the wait before retry ``n`` is ``n * base_delay``
    """

    max_retries: int = 3
    base_delay: float = 1.0

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after the given (1-based) failed attempt."""
        return attempt * self.base_delay


@dataclass(frozen=True)
class SyncOptions:
    """Options passed explicitly into every sync workflow.

    Attributes:
        label: Label used to filter remote items and to tag new keys
        strict: Delete remote keys that are absent from the local document
        output: Report format, ``console`` or ``json``
        retry: Retry policy for store calls
    """

    label: str | None = None
    strict: bool = False
    output: str = "console"
    retry: RetryPolicy = field(default_factory=RetryPolicy)


@dataclass(frozen=True)
class SyncPlan:
    """Result of comparing a local document with the remote store."""

    changes: list[Change]
    summary: ChangeSummary
    issues: list[ValidationIssue] = field(default_factory=list)
