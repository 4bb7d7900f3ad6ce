"""Remote provider protocol and shared platform behaviour."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, FrozenSet, List, Optional, Protocol, Tuple

from ..core.errors import ConfigurationError
from ..core.protection import SYSTEM_VARS, protection_set
from ..core.types import MutationOutcome

logger = logging.getLogger(__name__)


class RemoteProvider(Protocol):
    """Protocol every deployment platform integration implements.

    Providers never expose remote values for diffing; only names are
    listed. Mutations report failure through the returned outcome rather
    than by raising.
    """

    name: str

    def init(self) -> None:
        """Check that the platform tooling is available and authenticated.

        Raises:
            ProviderUnavailableError: If the platform cannot be used.
        """
        ...

    def list_keys(self, target: str) -> List[str]:
        """List variable names defined on a remote target.

        Raises:
            ProviderUnavailableError: If the listing fails.
        """
        ...

    def set_value(self, name: str, value: str, target: str) -> MutationOutcome:
        """Create or overwrite a remote variable."""
        ...

    def remove_value(self, name: str, target: str) -> MutationOutcome:
        """Delete a remote variable."""
        ...

    def pull_to_file(self, target: str, destination: Path) -> MutationOutcome:
        """Mirror every remote variable into a local env file."""
        ...

    def protected_patterns(self) -> FrozenSet[str]:
        """Patterns of remote names that must never be removed."""
        ...

    def valid_targets(self) -> Optional[Tuple[str, ...]]:
        """Accepted target names, or None when any name is allowed."""
        ...

    def validate_target(self, target: str) -> None:
        """Reject target names the platform does not know about.

        Raises:
            ConfigurationError: If ``target`` is not a valid target name.
        """
        ...

    def close(self) -> None:
        """Release any connection held by the provider."""
        ...


class BasePlatform:
    """Common pieces of the platform integrations."""

    name = "base"
    #: platform-injected names, merged with SYSTEM_VARS
    system_vars: FrozenSet[str] = frozenset()
    targets: Optional[Tuple[str, ...]] = None

    def __init__(self, **options: Any):
        self.options = options

    def protected_patterns(self) -> FrozenSet[str]:
        return protection_set(SYSTEM_VARS, self.system_vars)

    def valid_targets(self) -> Optional[Tuple[str, ...]]:
        return self.targets

    def validate_target(self, target: str) -> None:
        """Reject targets the platform does not know about.

        Raises:
            ConfigurationError: If ``target`` is not a valid target name.
        """
        valid = self.valid_targets()
        if valid is not None and target not in valid:
            raise ConfigurationError(
                f"Invalid target for {self.name}: {target}. Valid targets: {', '.join(valid)}"
            )

    def close(self) -> None:
        pass

    def log_operation(self, outcome: MutationOutcome, target: str) -> MutationOutcome:
        if outcome.success:
            logger.debug("%s %s in %s", outcome.op, outcome.key, target)
        else:
            logger.debug("%s %s in %s failed: %s", outcome.op, outcome.key, target, outcome.error)
        return outcome
