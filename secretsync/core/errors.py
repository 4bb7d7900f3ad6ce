"""Error types raised by secret-sync operations."""

from __future__ import annotations

from typing import List, Optional


class SecretSyncError(Exception):
    """Base class for errors that abort a sync operation."""


class ConfigurationError(SecretSyncError):
    """Unknown environment, unsupported platform or unreadable config."""


class ValidationError(SecretSyncError):
    """Local env file failed a structural check.

    Attributes:
        issues: Human readable description of every problem found.
    """

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        super().__init__(message)
        self.issues: List[str] = list(issues or [])

    def __str__(self) -> str:
        base = super().__str__()
        if not self.issues:
            return base
        return base + "\n" + "\n".join(f"  - {issue}" for issue in self.issues)


class ProviderUnavailableError(SecretSyncError):
    """The remote platform could not be reached or listed."""
