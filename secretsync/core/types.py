"""Type definitions for the secret-sync reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FilterResult:
    """Outcome of filtering a local snapshot.

    Attributes:
        kept: Variables that take part in the sync, in snapshot order.
        excluded: Names dropped by the filter, in snapshot order.
    """

    kept: Dict[str, str]
    excluded: List[str]


@dataclass(frozen=True)
class ChangeSet:
    """Four-way partition of local and remote names.

    Attributes:
        to_add: Local-only names.
        to_update: Names present both locally and remotely.
        to_remove: Remote-only names that are not protected.
        protected: Remote-only names kept because they are protected.
    """

    to_add: Tuple[str, ...] = ()
    to_update: Tuple[str, ...] = ()
    to_remove: Tuple[str, ...] = ()
    protected: Tuple[str, ...] = ()

    @property
    def total(self) -> int:
        """Number of mutations the change set would perform."""
        return len(self.to_add) + len(self.to_update) + len(self.to_remove)

    @property
    def is_empty(self) -> bool:
        return self.total == 0


@dataclass(frozen=True)
class MutationOutcome:
    """Result of a single remote call.

    Attributes:
        op: Operation name ('add', 'update', 'remove' or 'pull').
        key: Variable name, or the destination file for pulls.
        success: Whether the platform accepted the call.
        error: Error message reported by the platform on failure.
        hint: Optional remediation hint shown next to the failure.
    """

    op: str  # "add" | "update" | "remove" | "pull"
    key: str
    success: bool = True
    error: Optional[str] = None
    hint: Optional[str] = None


@dataclass
class ApplyReport:
    """Per-key outcomes of applying a change set, in call order."""

    target: str
    outcomes: List[MutationOutcome] = field(default_factory=list)

    @property
    def applied(self) -> List[MutationOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[MutationOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class EnvironmentStatus:
    """Sync status of one configured environment.

    Attributes:
        environment: Environment name from the config.
        file: Local env file path.
        target: Remote target identifier.
        changes: Change set, or None when the local file is missing.
        local_count: Number of filtered local variables.
    """

    environment: str
    file: str
    target: str
    changes: Optional[ChangeSet] = None
    local_count: int = 0

    @property
    def missing(self) -> bool:
        return self.changes is None

    @property
    def in_sync(self) -> bool:
        return self.changes is not None and self.changes.is_empty
