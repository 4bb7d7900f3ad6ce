"""Environment file (.env) local source."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.errors import ValidationError
from ..dotenv import read_env_file

logger = logging.getLogger(__name__)


class EnvFileSource:
    """Local snapshot source backed by a KEY=VALUE env file."""

    def __init__(self, path: Union[str, Path], name: Optional[str] = None):
        """Initialize EnvFileSource.

        Args:
            path: Path to the env file.
            name: Optional custom name for this source.
        """
        self.path = Path(path)
        self.name = name or f"env:{self.path.name}"
        self.warnings: List[str] = []

    def exists(self) -> bool:
        return self.path.is_file()

    def load_snapshot(self) -> Dict[str, str]:
        """Read the file into an ordered name -> value mapping.

        Returns:
            Variables in file order.

        Raises:
            ValidationError: If the file is missing, unreadable or contains
                malformed entries.
        """
        if not self.exists():
            raise ValidationError(f"Local file not found: {self.path}")
        try:
            result = read_env_file(self.path)
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Could not read {self.path}: {e}") from e

        self.warnings = list(result.warnings)
        for warning in self.warnings:
            logger.warning("%s: %s", self.path, warning)

        if not result.is_valid:
            raise ValidationError(f"Validation failed for {self.path}", result.issues)

        logger.debug("Loaded %d variables from %s", len(result.values), self.path)
        return result.values
