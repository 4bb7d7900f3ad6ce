"""secret-sync - reconcile local env files with deployment platform variables.

Computes the add/update/remove operations needed to bring a remote
target in line with a local env file, under include/exclude filters and
a protection policy for platform-owned variables.
"""

__version__ = "1.0.0"

from .core.config import SyncConfig, merge_with_defaults
from .core.filters import Filter, filter_vars, should_exclude
from .core.patterns import matches
from .core.protection import SYSTEM_VARS, is_protected
from .core.reconciler import apply, diff
from .core.syncer import Syncer
from .core.types import ApplyReport, ChangeSet, MutationOutcome

__all__ = [
    "ApplyReport",
    "ChangeSet",
    "Filter",
    "MutationOutcome",
    "SYSTEM_VARS",
    "SyncConfig",
    "Syncer",
    "apply",
    "diff",
    "filter_vars",
    "is_protected",
    "matches",
    "merge_with_defaults",
    "should_exclude",
]
