"""Remote platform integrations and the registry used to pick one."""

from __future__ import annotations

from typing import Any, Callable, Dict

from ..core.errors import ConfigurationError
from .base import BasePlatform, RemoteProvider


def _vercel(**options: Any) -> RemoteProvider:
    from .vercel import VercelPlatform

    return VercelPlatform(**options)


def _github(**options: Any) -> RemoteProvider:
    # Lazy import keeps httpx off the vercel code path
    from .github_env import GitHubEnvPlatform

    return GitHubEnvPlatform(**options)


PLATFORMS: Dict[str, Callable[..., RemoteProvider]] = {
    "vercel": _vercel,
    "github": _github,
}

PLANNED_PLATFORMS = ("netlify", "railway")


def get_platform(name: str, **options: Any) -> RemoteProvider:
    """Create the provider registered under ``name``.

    Raises:
        ConfigurationError: If the platform is unknown or not implemented.
    """
    key = (name or "").strip().lower()
    if key in PLANNED_PLATFORMS:
        raise ConfigurationError(f"{name} platform not yet implemented")
    try:
        factory = PLATFORMS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported platform: {name}. Available: {', '.join(PLATFORMS)}"
        ) from None
    return factory(**options)


__all__ = ["BasePlatform", "RemoteProvider", "PLATFORMS", "get_platform"]
