"""appconfig-guard: Safely synchronize local JSON configuration with a key-value store.

This library provides the mechanism for previewing and applying configuration
changes against a remote key-value configuration store (Azure App
Configuration style):

- Flatten nested JSON documents to dotted keys, and rebuild them
- Classify values as feature flags or Key Vault secret references
- Diff local configuration against the store (add/update/delete)
- Apply changes with per-call retry and cancellation

Applications inject the store (any ConfigStore implementation) and the sync
options. Settings can be read from user/project/local YAML files.

Public API:
    SyncManager: Plan, apply, and download workflows
    SettingsManager: Three-scope YAML settings producing SyncOptions
    flatten, unflatten, flatten_and_validate: Document transform
    classify_value, validate_configuration: Value classification
    compute_diff, summarize: Diff engine
    Reconciler: Apply changes with retry
    InMemoryStore, ConfigStore: Store adapter and protocol

Example:
    ```python
    from pathlib import Path
    from appconfig_guard import InMemoryStore, SyncManager, SyncOptions

    manager = SyncManager(InMemoryStore(), SyncOptions(label="production", strict=True))

    plan = manager.plan(Path("config.json"))
    print(manager.render(plan))

    manager.apply(plan)
    ```
"""

from .classifier import classify_value
from .classifier import validate_configuration
from .diff import compute_diff
from .diff import format_console
from .diff import format_json
from .diff import has_changes
from .diff import summarize
from .encoding import encode_for_storage
from .encoding import normalize_retrieved_value
from .exceptions import ClassificationError
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigValidationError
from .exceptions import FeatureFlagError
from .exceptions import ReconciliationCancelledError
from .exceptions import RetryExhaustedError
from .exceptions import StoreError
from .exceptions import StructuralError
from .exceptions import TypeConflictError
from .exceptions import VaultReferenceError
from .manager import SyncManager
from .models import Change
from .models import ChangeKind
from .models import ChangeSummary
from .models import ClassifiedValue
from .models import ConfigPaths
from .models import FeatureFlag
from .models import RemoteItem
from .models import RetryPolicy
from .models import Scope
from .models import SecretReference
from .models import SyncOptions
from .models import SyncPlan
from .models import ValidationIssue
from .models import ValueKind
from .reconcile import Reconciler
from .settings import SettingsManager
from .store import ConfigStore
from .store import InMemoryStore
from .transform import flatten
from .transform import flatten_and_validate
from .transform import unflatten
from .utils import deep_merge

__version__ = "0.1.0"

__all__ = [
    "SyncManager",
    "SettingsManager",
    "ConfigPaths",
    "Scope",
    "SyncOptions",
    "RetryPolicy",
    "SyncPlan",
    "flatten",
    "unflatten",
    "flatten_and_validate",
    "classify_value",
    "validate_configuration",
    "compute_diff",
    "summarize",
    "has_changes",
    "format_console",
    "format_json",
    "encode_for_storage",
    "normalize_retrieved_value",
    "Reconciler",
    "ConfigStore",
    "InMemoryStore",
    "deep_merge",
    "Change",
    "ChangeKind",
    "ChangeSummary",
    "ClassifiedValue",
    "FeatureFlag",
    "SecretReference",
    "RemoteItem",
    "ValidationIssue",
    "ValueKind",
    "ConfigError",
    "ConfigFileError",
    "ConfigValidationError",
    "StructuralError",
    "TypeConflictError",
    "ClassificationError",
    "VaultReferenceError",
    "FeatureFlagError",
    "StoreError",
    "RetryExhaustedError",
    "ReconciliationCancelledError",
]
