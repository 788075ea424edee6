"""Three-scope settings for sync options.

Settings live in YAML files under a ``sync:`` section, for example::

    sync:
      label: production
      strict: true
      output: json
      max_retries: 5
      base_delay: 0.5

Resolution order (highest to lowest priority): local, project, user.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigFileError
from .exceptions import ConfigValidationError
from .models import ConfigPaths
from .models import RetryPolicy
from .models import Scope
from .models import SyncOptions
from .utils import deep_merge

logger = logging.getLogger(__name__)

SECTION = "sync"
OUTPUT_FORMATS = ("console", "json")

_OPTION_TYPES: dict[str, tuple[type, ...]] = {
    "label": (str,),
    "strict": (bool,),
    "output": (str,),
    "max_retries": (int,),
    "base_delay": (int, float),
}


class SettingsManager:
    """Reads and writes sync options across user/project/local scopes.

    Args:
        paths: Settings file paths for all three scopes
    """

    def __init__(self, paths: ConfigPaths):
        self.paths = paths

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings (lowest priority)
        2. Project settings
        3. Local settings (highest priority)
        """
        merged: dict[str, Any] = {}
        for path in (self.paths.user, self.paths.project, self.paths.local):
            data = self._read_yaml(path)
            if data:
                merged = deep_merge(merged, data)
        return merged

    def load_options(self) -> SyncOptions:
        """Build SyncOptions from the merged ``sync`` section.

        Raises:
            ConfigValidationError: An option has the wrong type or value
        """
        section = self.get_merged_settings().get(SECTION) or {}
        if not isinstance(section, dict):
            raise ConfigValidationError(f"'{SECTION}' settings must be a mapping")

        values = {}
        for name, value in section.items():
            if name not in _OPTION_TYPES:
                logger.warning(f"Ignoring unknown sync setting '{name}'")
                continue
            values[name] = _check_option(name, value)

        retry = RetryPolicy(
            max_retries=values.get("max_retries", RetryPolicy.max_retries),
            base_delay=float(values.get("base_delay", RetryPolicy.base_delay)),
        )
        return SyncOptions(
            label=values.get("label"),
            strict=values.get("strict", False),
            output=values.get("output", "console"),
            retry=retry,
        )

    def set_option(self, name: str, value: Any, scope: Scope = Scope.LOCAL) -> None:
        """Write one sync option to the given scope.

        Raises:
            ConfigValidationError: Unknown option or invalid value
        """
        if name not in _OPTION_TYPES:
            raise ConfigValidationError(f"Unknown sync setting '{name}'")
        _check_option(name, value)

        target_path = self.scope_to_path(scope)
        self._update_yaml(target_path, {SECTION: {name: value}})
        logger.info(f"Set sync.{name} to {value!r} in {scope.value} scope")

    def clear_option(self, name: str, scope: Scope = Scope.LOCAL) -> bool:
        """Remove one sync option from the given scope.

        Returns:
            True if removed, False if not found
        """
        target_path = self.scope_to_path(scope)
        settings = self._read_yaml(target_path)

        if not settings or not isinstance(settings.get(SECTION), dict) or name not in settings[SECTION]:
            return False

        del settings[SECTION][name]
        if not settings[SECTION]:
            del settings[SECTION]

        self._write_yaml(target_path, settings)
        logger.info(f"Cleared sync.{name} from {scope.value} scope")
        return True

    def scope_to_path(self, scope: Scope) -> Path:
        """Get path for a given scope.

        Raises:
            ConfigValidationError: The scope is disabled (no path configured)
        """
        scope_map = {
            Scope.USER: self.paths.user,
            Scope.PROJECT: self.paths.project,
            Scope.LOCAL: self.paths.local,
        }
        path = scope_map[scope]
        if path is None:
            raise ConfigValidationError(f"{scope.value} scope is not configured")
        return path

    # ===== Private Helpers =====

    def _read_yaml(self, path: Path | None) -> dict[str, Any] | None:
        """Read YAML file.

        Returns:
            Dictionary from YAML or None if the file doesn't exist or is unreadable
        """
        if path is None or not path.exists():
            return None

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings in {path}: top level is not a mapping")
            return None
        return data

    def _write_yaml(self, path: Path, data: dict[str, Any]) -> None:
        """Write YAML file.

        Raises:
            ConfigFileError: If write fails
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(path, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigFileError(f"Failed to write settings to {path}: {e}") from e

    def _update_yaml(self, path: Path, updates: dict[str, Any]) -> None:
        existing = self._read_yaml(path) or {}
        self._write_yaml(path, deep_merge(existing, updates))


def _check_option(name: str, value: Any) -> Any:
    expected = _OPTION_TYPES[name]
    # bool is an int subclass; only "strict" accepts it
    if isinstance(value, bool) and bool not in expected:
        raise ConfigValidationError(f"sync.{name} must be {expected[0].__name__}, got bool")
    if not isinstance(value, expected):
        raise ConfigValidationError(f"sync.{name} must be {expected[0].__name__}, got {type(value).__name__}")

    if name == "output" and value not in OUTPUT_FORMATS:
        raise ConfigValidationError(f"sync.output must be one of {', '.join(OUTPUT_FORMATS)}, got '{value}'")
    if name in ("max_retries", "base_delay") and value < 0:
        raise ConfigValidationError(f"sync.{name} must not be negative")
    return value
