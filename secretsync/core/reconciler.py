"""Compute and apply the changes that bring a remote target in line with
a local snapshot."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Protocol

from .protection import is_protected
from .types import ApplyReport, ChangeSet, MutationOutcome

logger = logging.getLogger(__name__)


class RemoteMutator(Protocol):
    """The subset of a remote provider the reconciler writes through."""

    def set_value(self, name: str, value: str, target: str) -> MutationOutcome:
        ...

    def remove_value(self, name: str, target: str) -> MutationOutcome:
        ...


def diff(
    filtered_local: Mapping[str, str],
    remote_keys: Iterable[str],
    protected: Iterable[str],
) -> ChangeSet:
    """Partition local and remote names into a change set.

    Updates are decided purely on key presence: the remote side never
    exposes values, so a key present on both sides is always an update
    candidate, even if the value is unchanged.

    Args:
        filtered_local: Local variables after filtering, in desired order.
        remote_keys: Names currently defined on the remote target.
        protected: Protection patterns for remote-only names.

    Returns:
        ChangeSet whose four sequences are pairwise disjoint.
    """
    # dict.fromkeys keeps enumeration order and drops duplicates
    remote: Dict[str, None] = dict.fromkeys(remote_keys)
    patterns = frozenset(protected)

    to_add = tuple(k for k in filtered_local if k not in remote)
    to_update = tuple(k for k in filtered_local if k in remote)
    remote_only = [k for k in remote if k not in filtered_local]

    return ChangeSet(
        to_add=to_add,
        to_update=to_update,
        to_remove=tuple(k for k in remote_only if not is_protected(k, patterns)),
        protected=tuple(k for k in remote_only if is_protected(k, patterns)),
    )


def _attempt(op: str, key: str, call, *args) -> MutationOutcome:
    try:
        outcome = call(*args)
    except Exception as e:  # one failing key must not stop the pass
        logger.warning("%s %s raised: %s", op, key, e)
        return MutationOutcome(op=op, key=key, success=False, error=str(e))
    if outcome.op != op or outcome.key != key:
        # providers report "set" for both adds and updates
        outcome = MutationOutcome(
            op=op, key=key, success=outcome.success, error=outcome.error, hint=outcome.hint
        )
    if outcome.success:
        logger.info("%s %s ok", op, key)
    else:
        logger.warning("%s %s failed: %s", op, key, outcome.error)
    return outcome


def apply(
    changes: ChangeSet,
    filtered_local: Mapping[str, str],
    mutator: RemoteMutator,
    target: str,
) -> ApplyReport:
    """Apply a change set one key at a time.

    Removals run first, then additions, then updates, each in change set
    order. A failure on one key is recorded and the loop moves on; nothing
    is retried.

    Args:
        changes: Change set produced by :func:`diff`.
        filtered_local: Local values for added and updated names.
        mutator: Remote provider performing the calls.
        target: Remote environment identifier.

    Returns:
        ApplyReport with one outcome per attempted call.
    """
    report = ApplyReport(target=target)
    outcomes: List[MutationOutcome] = report.outcomes

    for key in changes.to_remove:
        outcomes.append(_attempt("remove", key, mutator.remove_value, key, target))
    for key in changes.to_add:
        outcomes.append(
            _attempt("add", key, mutator.set_value, key, filtered_local[key], target)
        )
    for key in changes.to_update:
        outcomes.append(
            _attempt("update", key, mutator.set_value, key, filtered_local[key], target)
        )

    logger.debug(
        "applied %d/%d changes to %s", len(report.applied), len(outcomes), target
    )
    return report
