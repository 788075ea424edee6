"""Classification and validation of flattened configuration values.

A value is one of three kinds:

- secret reference: ``@Microsoft.KeyVault(SecretUri=...)`` or a bare
  ``https://<vault>.vault.azure.net/secrets/...`` URI
- feature flag: a boolean-like value whose key follows a flag naming pattern
- regular: anything else

Once a value looks like a secret reference, or its key looks like a feature
flag, it must fully validate as one. Failures raise a ClassificationError
subclass from ``classify_value``; ``validate_configuration`` collects them
instead so one bad key does not hide the rest.
"""

import logging
import re
from urllib.parse import urlsplit

from .exceptions import FeatureFlagError
from .exceptions import VaultReferenceError
from .models import ClassifiedValue
from .models import FeatureFlag
from .models import SecretReference
from .models import ValidationIssue
from .models import ValueKind

logger = logging.getLogger(__name__)

KEY_VAULT_PREFIX = "@Microsoft.KeyVault("
KEY_VAULT_HOST_MARKER = "vault.azure.net"

FEATURE_FLAG_KEY_PATTERNS = [
    re.compile(pattern)
    for pattern in (
        r"^feature\.",
        r"^flag\.",
        r"\.enabled$",
        r"\.disabled$",
        r"^enable\.",
        r"^disable\.",
        r"\.feature$",
        r"\.flag$",
    )
]

TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

_SECRET_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{1,127}$")


def classify_value(key: str, value: str) -> ClassifiedValue:
    """Classify a single flattened entry.

    Args:
        key: Dotted configuration key
        value: String value

    Returns:
        ClassifiedValue describing the entry

    Raises:
        VaultReferenceError: Value claims to be a secret reference but is invalid
        FeatureFlagError: Key names a feature flag but the value is not boolean-like
    """
    if value.startswith(KEY_VAULT_PREFIX):
        secret = parse_key_vault_reference(key, value)
        return ClassifiedValue(kind=ValueKind.SECRET_REFERENCE, original=value, secret=secret)

    if is_vault_uri(value):
        secret = parse_secret_uri(key, value)
        return ClassifiedValue(kind=ValueKind.SECRET_REFERENCE, original=value, secret=secret)

    if is_feature_flag_key(key):
        flag = parse_feature_flag(key, value)
        return ClassifiedValue(kind=ValueKind.FEATURE_FLAG, original=value, feature_flag=flag)

    return ClassifiedValue(kind=ValueKind.REGULAR, original=value)


def validate_configuration(config: dict[str, str]) -> list[ValidationIssue]:
    """Classify every entry of a flat mapping and collect the failures.

    Args:
        config: Flat key -> value mapping

    Returns:
        Validation issues sorted by key (empty when everything is valid)
    """
    issues = []

    for key in sorted(config):
        value = config[key]
        try:
            classify_value(key, value)
        except VaultReferenceError as e:
            issues.append(ValidationIssue(key=key, value=value, message=e.message, kind="keyvault_error"))
        except FeatureFlagError as e:
            issues.append(ValidationIssue(key=key, value=value, message=e.message, kind="feature_flag_error"))

    if issues:
        logger.debug(f"Validation found {len(issues)} issue(s) in {len(config)} entries")
    return issues


def is_vault_uri(value: str) -> bool:
    """Return True for a bare ``https://`` URI pointing at a Key Vault host."""
    return value.startswith("https://") and KEY_VAULT_HOST_MARKER in value


def is_secret_reference(value: str) -> bool:
    """Return True when a value is shaped like a secret reference (either form)."""
    return (value.startswith(KEY_VAULT_PREFIX) and value.endswith(")")) or is_vault_uri(value)


def parse_key_vault_params(value: str) -> dict[str, str]:
    """Split the ``key=value;key=value`` body of an ``@Microsoft.KeyVault(...)`` value."""
    content = value[len(KEY_VAULT_PREFIX) : -1]
    params = {}
    for param in content.split(";"):
        name, sep, param_value = param.partition("=")
        if sep:
            params[name.strip()] = param_value.strip()
    return params


def parse_key_vault_reference(key: str, value: str) -> SecretReference:
    """Parse ``@Microsoft.KeyVault(SecretUri=...)``.

    Raises:
        VaultReferenceError: Malformed marker, missing SecretUri, or invalid URI
    """
    if not value.endswith(")"):
        raise VaultReferenceError(key, value, "invalid Key Vault reference: missing closing parenthesis")

    secret_uri = parse_key_vault_params(value).get("SecretUri")
    if not secret_uri:
        raise VaultReferenceError(key, value, "invalid Key Vault reference: missing SecretUri")

    return parse_secret_uri(key, secret_uri, original=value)


def parse_secret_uri(key: str, uri: str, original: str | None = None) -> SecretReference:
    """Parse ``https://<vault>.vault.azure.net/secrets/<name>[/<version>]``.

    Args:
        key: Configuration key (for error reporting)
        uri: Secret URI
        original: Full original value when the URI came from a marker

    Raises:
        VaultReferenceError: Host, path, or secret name is invalid
    """
    value = original if original is not None else uri
    try:
        parsed = urlsplit(uri)
        host = parsed.hostname or ""
        if parsed.port is not None:
            host = f"{host}:{parsed.port}"
    except ValueError as e:
        raise VaultReferenceError(key, value, f"invalid Key Vault URI: {e}") from e

    if KEY_VAULT_HOST_MARKER not in host:
        raise VaultReferenceError(key, value, "not a valid Key Vault URI")

    parts = parsed.path.strip("/").split("/")
    if len(parts) not in (2, 3) or parts[0] != "secrets":
        raise VaultReferenceError(key, value, "invalid Key Vault secret path")

    secret_name = parts[1]
    if not _SECRET_NAME_RE.match(secret_name):
        raise VaultReferenceError(key, value, f"invalid secret name: {secret_name}")

    secret_version = parts[2] if len(parts) == 3 else ""
    if len(parts) == 3 and not secret_version:
        raise VaultReferenceError(key, value, "invalid Key Vault secret path")

    return SecretReference(
        vault_url=f"https://{host}",
        secret_name=secret_name,
        secret_version=secret_version,
    )


def is_feature_flag_key(key: str) -> bool:
    """Return True when the key follows a feature flag naming convention."""
    lowered = key.lower()
    return any(pattern.search(lowered) for pattern in FEATURE_FLAG_KEY_PATTERNS)


def parse_feature_flag(key: str, value: str) -> FeatureFlag:
    """Parse a boolean-like feature flag value.

    Raises:
        FeatureFlagError: Value is not in the truthy/falsy sets, or the key
            yields an empty description
    """
    lowered = value.lower()
    if lowered in TRUTHY_VALUES:
        enabled = True
    elif lowered in FALSY_VALUES:
        enabled = False
    else:
        raise FeatureFlagError(key, value, f"invalid feature flag value: {value}")

    description = describe_feature_flag(key)
    if not description.strip():
        raise FeatureFlagError(key, value, "feature flag should have a description")

    return FeatureFlag(enabled=enabled, description=description)


def describe_feature_flag(key: str) -> str:
    """Derive a readable description from a flag key.

    Dots and underscores become spaces. Every letter that follows a space or
    punctuation is upper-cased; the rest of each word is left as-is.

    >>> describe_feature_flag("feature.new_ui")
    'Feature New Ui'
    >>> describe_feature_flag("feature.dark-mode")
    'Feature Dark-Mode'
    >>> describe_feature_flag("checkout.fastPath.enabled")
    'Checkout FastPath Enabled'
    """
    description = key.replace(".", " ").replace("_", " ")
    chars = []
    previous = " "
    for char in description:
        chars.append(char.upper() if _is_word_break(previous) else char)
        previous = char
    return "".join(chars)


def _is_word_break(char: str) -> bool:
    if char.isascii():
        return not (char.isalnum() or char == "_")
    return char.isspace()
