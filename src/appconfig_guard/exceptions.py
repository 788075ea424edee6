"""Exceptions for appconfig-guard."""


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Error reading or writing a configuration document or settings file."""

    pass


class ConfigValidationError(ConfigError):
    """Error validating settings or a change list."""

    pass


class StructuralError(ConfigError):
    """A document cannot be flattened or a flat mapping cannot be rebuilt."""

    pass


class TypeConflictError(StructuralError):
    """A path requires one node to be two different kinds of container."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"type conflict at key {path}: {message}")


class ClassificationError(ConfigError):
    """A value claims a special format but fails to validate as one."""

    def __init__(self, key: str, value: str, message: str):
        self.key = key
        self.value = value
        self.message = message
        super().__init__(f"{key}: {message}")


class VaultReferenceError(ClassificationError):
    """Invalid Key Vault secret reference."""

    pass


class FeatureFlagError(ClassificationError):
    """Invalid feature flag value or description."""

    pass


class StoreError(ConfigError):
    """Error talking to the remote configuration store."""

    pass


class RetryExhaustedError(StoreError):
    """A store call kept failing after every retry attempt."""

    def __init__(self, key: str, attempts: int, last_error: Exception):
        self.key = key
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"failed to apply '{key}' after {attempts} attempts: {last_error}")


class ReconciliationCancelledError(ConfigError):
    """Reconciliation was stopped by the caller's cancellation signal."""

    pass
