"""Include/exclude filtering of local variables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .patterns import matches_any
from .types import FilterResult


def _as_patterns(value: Any, field: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, Iterable):
        raise TypeError(f"'{field}' must be a list of patterns, got {type(value).__name__}")
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class Filter:
    """Decide which local variables take part in a sync.

    Attributes:
        include: If non-empty, only names matching one of these survive.
        exclude: Names matching any of these are dropped, even when included.
    """

    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()

    @staticmethod
    def from_dict(d: Optional[Mapping[str, Any]]) -> "Filter":
        """Create a Filter from ``include``/``exclude`` lists.

        Args:
            d: Mapping with optional ``include`` and ``exclude`` keys.

        Returns:
            Filter instance; an empty filter when d is None/empty.
        """
        if not d:
            return Filter()
        return Filter(
            include=_as_patterns(d.get("include"), "include"),
            exclude=_as_patterns(d.get("exclude"), "exclude"),
        )


def should_exclude(name: str, flt: Optional[Filter]) -> bool:
    """Check if a variable should be left out of the sync.

    Include rules are evaluated first; among names that pass them, any
    exclude match wins.

    Args:
        name: Variable name.
        flt: Filter to apply (None means keep everything).

    Returns:
        True if the name is excluded, False otherwise.
    """
    if flt is None:
        return False
    if flt.include and not matches_any(name, flt.include):
        return True
    return matches_any(name, flt.exclude)


def filter_vars(snapshot: Mapping[str, str], flt: Optional[Filter]) -> FilterResult:
    """Split a local snapshot into kept and excluded variables.

    Both the kept mapping and the excluded names follow the snapshot's
    own ordering.
    """
    kept: Dict[str, str] = {}
    excluded = []
    for name, value in snapshot.items():
        if should_exclude(name, flt):
            excluded.append(name)
        else:
            kept[name] = value
    return FilterResult(kept=kept, excluded=excluded)
