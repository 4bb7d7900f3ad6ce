"""Wildcard matching for variable names."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Pattern


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Pattern[str]:
    # Only `*` is special; every other character is literal.
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile(".*".join(parts), re.DOTALL)


def matches(name: str, pattern: str) -> bool:
    """Check whether ``name`` matches ``pattern``.

    A pattern without ``*`` must equal the name exactly. Each ``*`` matches
    any run of characters (including none) and the pattern is anchored at
    both ends, so ``VERCEL_*`` matches ``VERCEL_URL`` but not
    ``MY_VERCEL_URL``. Matching is case-sensitive.

    Args:
        name: Variable name to test.
        pattern: Exact name or wildcard pattern.

    Returns:
        True if the whole name matches the pattern.
    """
    if "*" not in pattern:
        return name == pattern
    return _compile(pattern).fullmatch(name) is not None


def matches_any(name: str, patterns: Iterable[str]) -> bool:
    """Check whether ``name`` matches at least one of ``patterns``."""
    return any(matches(name, pattern) for pattern in patterns)
