"""Names that must never be removed from a remote platform."""

from __future__ import annotations

from typing import FrozenSet, Iterable

from .patterns import matches_any

# Shell and runtime variables every platform injects on its own.
SYSTEM_VARS: FrozenSet[str] = frozenset(
    {"CI", "NODE_ENV", "PWD", "HOME", "PATH", "USER", "SHELL"}
)


def protection_set(*platform_patterns: Iterable[str]) -> FrozenSet[str]:
    """Build a protection set from the system defaults plus platform lists."""
    patterns = set(SYSTEM_VARS)
    for group in platform_patterns:
        patterns.update(group)
    return frozenset(patterns)


def is_protected(name: str, protected: Iterable[str]) -> bool:
    """Check if a remote variable is protected from deletion.

    Args:
        name: Remote variable name.
        protected: Exact names or wildcard patterns.

    Returns:
        True if any pattern matches the name.
    """
    return matches_any(name, protected)
