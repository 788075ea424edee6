"""Wire encoding of secret references.

The store holds Key Vault references as a JSON document
``{"uri": "<secret-uri>"}`` with a dedicated content type. Locally they are
written as ``@Microsoft.KeyVault(SecretUri=<uri>)`` or as a bare vault URI.
Values read back from the store are normalized to the marker form so that a
reference does not look changed just because of its encoding.
"""

import json

from .classifier import KEY_VAULT_HOST_MARKER
from .classifier import KEY_VAULT_PREFIX
from .classifier import is_secret_reference
from .classifier import is_vault_uri
from .classifier import parse_key_vault_params

KEY_VAULT_CONTENT_TYPE = "application/vnd.microsoft.appconfig.keyvaultref+json;charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain"


def detect_content_type(value: str) -> str:
    """Return the store content type for a local value."""
    if is_secret_reference(value):
        return KEY_VAULT_CONTENT_TYPE
    return TEXT_CONTENT_TYPE


def encode_for_storage(value: str) -> tuple[str, str]:
    """Convert a local value into what the store should hold.

    Args:
        value: Flattened local value

    Returns:
        Tuple of (stored value, content type)
    """
    content_type = detect_content_type(value)
    if content_type != KEY_VAULT_CONTENT_TYPE:
        return value, content_type

    if value.startswith(KEY_VAULT_PREFIX):
        uri = parse_key_vault_params(value).get("SecretUri", "")
    else:
        uri = value
    return json.dumps({"uri": uri}, separators=(",", ":")), content_type


def normalize_retrieved_value(value: str) -> str:
    """Bring a stored value back to its canonical local form.

    JSON ``{"uri": ...}`` documents, bare vault URIs and markers with extra
    whitespace or parameters all become ``@Microsoft.KeyVault(SecretUri=...)``.
    Everything else is returned as-is.
    """
    if value.startswith("{") and value.endswith("}"):
        try:
            document = json.loads(value)
        except json.JSONDecodeError:
            document = None
        if isinstance(document, dict):
            uri = document.get("uri")
            if isinstance(uri, str) and KEY_VAULT_HOST_MARKER in uri:
                return f"{KEY_VAULT_PREFIX}SecretUri={uri})"

    if value.startswith(KEY_VAULT_PREFIX) and value.endswith(")"):
        uri = parse_key_vault_params(value).get("SecretUri")
        return f"{KEY_VAULT_PREFIX}SecretUri={uri})" if uri else value

    if is_vault_uri(value):
        return f"{KEY_VAULT_PREFIX}SecretUri={value})"

    return value
