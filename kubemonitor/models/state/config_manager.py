"""Settings loading from YAML files, environment and explicit overrides."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from kubemonitor.models.state.app_settings import (
    AppSettings,
    ConfigError,
    ConfigLoadError,
)

logger = logging.getLogger(__name__)


class ConfigManager:
    """Builds ``AppSettings`` from a YAML file plus explicit overrides.

    Precedence, highest first: explicit overrides (CLI flags), YAML file
    values, ``K8S_MONITOR_*`` environment variables, defaults.
    """

    @staticmethod
    def read_yaml(path: Path) -> dict[str, Any]:
        """Read a YAML settings document.

        Args:
            path: File to read.

        Returns:
            Mapping of setting names to values (empty for an empty file).

        Raises:
            ConfigLoadError: If the file cannot be read or is not a mapping.
        """
        try:
            with path.open(encoding="utf-8") as handle:
                content = yaml.safe_load(handle)
        except OSError as exc:
            raise ConfigLoadError(f"cannot read config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigLoadError(f"invalid YAML in {path}: {exc}") from exc

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigLoadError(f"config file {path} must contain a mapping")
        # Accept both snake_case and kebab-case keys
        return {str(key).replace("-", "_"): value for key, value in content.items()}

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        **overrides: Any,
    ) -> AppSettings:
        """Load settings.

        Args:
            path: Optional YAML file; must exist when given.
            **overrides: Explicit values; ``None`` entries are ignored.

        Returns:
            Validated settings.

        Raises:
            ConfigLoadError: If the file is unreadable or values are invalid.
        """
        values: dict[str, Any] = {}
        if path is not None:
            values.update(cls.read_yaml(Path(path)))
            logger.info("Loaded settings from %s", path)
        values.update({key: value for key, value in overrides.items() if value is not None})

        try:
            return AppSettings(**values)
        except ValidationError as exc:
            raise ConfigLoadError(f"invalid settings: {exc}") from exc


__all__ = ["AppSettings", "ConfigError", "ConfigLoadError", "ConfigManager"]
