"""Reading and writing local JSON configuration documents."""

import json
import logging
from pathlib import Path
from typing import Any

from .exceptions import ConfigFileError
from .exceptions import StructuralError

logger = logging.getLogger(__name__)


def load_document(path: Path) -> Any:
    """Read a UTF-8 JSON document.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed document

    Raises:
        ConfigFileError: File is missing or unreadable
        StructuralError: File is not valid JSON
    """
    if not path.exists():
        raise ConfigFileError(f"configuration file does not exist: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StructuralError(f"Failed to parse JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigFileError(f"Failed to read configuration from {path}: {e}") from e


def write_document(path: Path, data: Any) -> None:
    """Write a document as indented JSON.

    Args:
        path: Destination path (parent directories are created)
        data: Document to serialize

    Raises:
        ConfigFileError: If write fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
    except (OSError, TypeError, ValueError) as e:
        raise ConfigFileError(f"Failed to write configuration to {path}: {e}") from e

    logger.info(f"Wrote configuration to {path}")
