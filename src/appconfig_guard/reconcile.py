"""Apply diff changes to a configuration store."""

import logging
import threading
from collections.abc import Callable

from .encoding import encode_for_storage
from .exceptions import ConfigValidationError
from .exceptions import ReconciliationCancelledError
from .exceptions import RetryExhaustedError
from .models import Change
from .models import ChangeKind
from .models import RetryPolicy
from .models import StoreOperation
from .store import ConfigStore

logger = logging.getLogger(__name__)


def to_operations(changes: list[Change]) -> list[StoreOperation]:
    """Translate changes into store calls, one per change, preserving order.

    Added and updated values are re-encoded for the store; secret references
    become ``{"uri": ...}`` documents with the Key Vault content type.
    """
    operations = []
    for change in changes:
        if change.kind is ChangeKind.DELETE:
            operations.append(StoreOperation("delete", change.key, change.old_value, change.label, change.tags))
            continue

        value, content_type = encode_for_storage(change.new_value or "")
        operations.append(
            StoreOperation(change.kind.value, change.key, value, change.label, change.tags, content_type)
        )
    return operations


def validate_changes(changes: list[Change]) -> None:
    """Reject change lists the store cannot accept.

    Raises:
        ConfigValidationError: A change has an empty key
    """
    for change in changes:
        if not change.key:
            raise ConfigValidationError("empty key found in changes")


class Reconciler:
    """Applies changes to a store, retrying each call with linear backoff.

    Calls run sequentially in the order given. There is no multi-key
    transaction: when a call finally fails, earlier calls stay applied.

    Args:
        store: Target ConfigStore
        policy: Retry policy (default: 3 retries, 1 second base delay)
    """

    def __init__(self, store: ConfigStore, policy: RetryPolicy | None = None):
        self.store = store
        self.policy = policy or RetryPolicy()

    def apply(self, changes: list[Change], strict: bool = False, cancel: threading.Event | None = None) -> int:
        """Apply changes to the store.

        Args:
            changes: Changes as produced by compute_diff
            strict: Informational only; deletions were already filtered by the diff
            cancel: Event that aborts the run when set

        Returns:
            Number of store calls that succeeded

        Raises:
            ConfigValidationError: Change list is invalid
            RetryExhaustedError: A call failed after every retry
            ReconciliationCancelledError: ``cancel`` was set
        """
        if not changes:
            return 0

        validate_changes(changes)
        cancel = cancel or threading.Event()
        operations = to_operations(changes)
        logger.info(f"Applying {len(operations)} change(s) (strict={strict})")

        for operation in operations:
            self._call_with_retry(operation, cancel)

        logger.info(f"Applied {len(operations)} change(s)")
        return len(operations)

    def _call_with_retry(self, operation: StoreOperation, cancel: threading.Event) -> None:
        call = self._bind(operation)
        attempts = self.policy.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            if cancel.is_set():
                raise ReconciliationCancelledError(f"cancelled before applying '{operation.key}'")

            try:
                call()
                logger.debug(f"{operation.operation} '{operation.key}' succeeded on attempt {attempt}")
                return
            except Exception as e:
                last_error = e

            if attempt == attempts:
                break

            delay = self.policy.delay_for(attempt)
            logger.warning(
                f"Attempt {attempt} to {operation.operation} '{operation.key}' failed, "
                f"retrying in {delay:.1f}s: {last_error}"
            )
            if cancel.wait(delay):
                raise ReconciliationCancelledError(
                    f"cancelled while waiting to retry '{operation.key}'"
                ) from last_error

        raise RetryExhaustedError(operation.key, attempts, last_error) from last_error

    def _bind(self, operation: StoreOperation) -> Callable[[], None]:
        if operation.operation == "delete":
            return lambda: self.store.delete(operation.key, operation.label)
        return lambda: self.store.write(
            operation.key,
            operation.value or "",
            label=operation.label,
            tags=operation.tags,
            content_type=operation.content_type,
        )
