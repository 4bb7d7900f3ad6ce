from .config import EnvironmentSpec, SyncConfig, SyncOptions
from .errors import (
    ConfigurationError,
    ProviderUnavailableError,
    SecretSyncError,
    ValidationError,
)
from .filters import Filter
from .reconciler import apply, diff
from .types import ApplyReport, ChangeSet, MutationOutcome

__all__ = [
    "ApplyReport",
    "ChangeSet",
    "ConfigurationError",
    "EnvironmentSpec",
    "Filter",
    "MutationOutcome",
    "ProviderUnavailableError",
    "SecretSyncError",
    "SyncConfig",
    "SyncOptions",
    "ValidationError",
    "apply",
    "diff",
]
