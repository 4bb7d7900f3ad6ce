"""Loader for secret-sync.yaml configuration files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .config import SyncConfig, merge_with_defaults
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("secret-sync.yaml", "secret-sync.yml")

CONFIG_TEMPLATE = """\
# Platform: vercel, github
platform: {platform}

# Environment mappings: local env file -> remote target
environments:
  development:
    file: .env.local
    target: development
  preview:
    file: .env.staging
    target: preview
  production:
    file: .env.production
    target: production

# Variables to exclude (`*` wildcards supported)
exclude:
  - VERCEL_*
  - CI
  - NODE_ENV

# Variables to include (if non-empty, only these are synced)
include: []
#  - NEXT_PUBLIC_*
#  - SUPABASE_*

options:
  confirm_changes: true
  show_diffs: true
  sort_keys: true
  add_header: true

# Settings for the github platform
# github:
#   repository: owner/repo
"""


class ConfigLoader:
    """Handles discovery and parsing of secret-sync.yaml files."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config loader.

        Args:
            config_path: Path to the config file. If None, looks in the
                current directory and its parents.

        Raises:
            ConfigurationError: If an explicit path does not exist.
        """
        self.config_path = self._find_config_file(config_path)
        self._config: Optional[Dict[str, Any]] = None

    def _find_config_file(
        self, config_path: Optional[Union[str, Path]] = None
    ) -> Optional[Path]:
        if config_path is not None:
            path = Path(config_path)
            if not path.exists():
                raise ConfigurationError(f"Config file not found: {path}")
            return path

        current = Path.cwd()
        for directory in (current, *current.parents):
            for filename in CONFIG_FILENAMES:
                candidate = directory / filename
                if candidate.exists():
                    return candidate
        return None

    def load(self) -> Dict[str, Any]:
        """Load the raw configuration mapping.

        Returns:
            Parsed configuration dictionary, or empty dict if no config file.

        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping.
        """
        if self.config_path is None:
            return {}

        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid config file {self.config_path}: {e}") from e
        except OSError as e:
            logger.warning("Could not read %s: %s; using defaults", self.config_path, e)
            return {}

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Invalid config file {self.config_path}: top level must be a mapping"
            )
        logger.debug("Loaded config from %s", self.config_path)
        self._config = data
        return data

    def resolve(self) -> SyncConfig:
        """Merge the loaded file over the defaults."""
        source = str(self.config_path) if self.config_path else None
        return merge_with_defaults(self.load(), source=source)

    @staticmethod
    def write_template(
        path: Union[str, Path] = CONFIG_FILENAMES[0], platform: str = "vercel"
    ) -> Path:
        """Write a starter config file.

        Raises:
            ConfigurationError: If the file already exists.
        """
        path = Path(path)
        if path.exists():
            raise ConfigurationError(f"Config file already exists: {path}")
        path.write_text(CONFIG_TEMPLATE.format(platform=platform), encoding="utf-8")
        logger.info("Created config file %s", path)
        return path


def load_config(config_path: Optional[Union[str, Path]] = None) -> SyncConfig:
    return ConfigLoader(config_path).resolve()
