"""Immutable sync configuration and the built-in defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError
from .filters import Filter

DEFAULT_PLATFORM = "vercel"

DEFAULT_ENVIRONMENTS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "development": MappingProxyType({"file": ".env.local", "target": "development"}),
        "preview": MappingProxyType({"file": ".env.staging", "target": "preview"}),
        "production": MappingProxyType({"file": ".env.production", "target": "production"}),
    }
)

DEFAULT_EXCLUDE = (
    "VERCEL_*",
    "CI",
    "NODE_ENV",
    "PWD",
    "HOME",
    "PATH",
    "USER",
    "SHELL",
)

DEFAULT_OPTIONS: Mapping[str, bool] = MappingProxyType(
    {
        "confirm_changes": True,
        "show_diffs": True,
        "sort_keys": True,
        "add_header": True,
    }
)


@dataclass(frozen=True)
class EnvironmentSpec:
    """Where an environment lives locally and remotely.

    Attributes:
        file: Path of the local env file.
        target: Platform-specific environment identifier.
    """

    file: str
    target: str


@dataclass(frozen=True)
class SyncOptions:
    confirm_changes: bool = True
    show_diffs: bool = True
    sort_keys: bool = True
    add_header: bool = True


@dataclass(frozen=True)
class SyncConfig:
    """One resolved configuration per run.

    Attributes:
        platform: Name of the remote platform.
        environments: Environment name to file/target mapping.
        filter: Include/exclude rules applied before diffing.
        options: Behavioural switches.
        platform_options: Per-platform settings keyed by platform name.
        source: Path of the config file this was loaded from, if any.
    """

    platform: str = DEFAULT_PLATFORM
    environments: Mapping[str, EnvironmentSpec] = field(default_factory=dict)
    filter: Filter = field(default_factory=Filter)
    options: SyncOptions = field(default_factory=SyncOptions)
    platform_options: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    source: Optional[str] = None

    def environment(self, name: str) -> EnvironmentSpec:
        """Look up an environment by name.

        Raises:
            ConfigurationError: If the environment is not configured.
        """
        try:
            return self.environments[name]
        except KeyError:
            available = ", ".join(self.environments) or "none"
            raise ConfigurationError(
                f"Unknown environment: {name}. Available: {available}"
            ) from None

    def options_for(self, platform: str) -> Dict[str, Any]:
        return dict(self.platform_options.get(platform, {}))


def _environment_spec(name: str, raw: Any) -> EnvironmentSpec:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Environment '{name}' must be a mapping with file and target")
    try:
        return EnvironmentSpec(file=str(raw["file"]), target=str(raw["target"]))
    except KeyError as e:
        raise ConfigurationError(f"Environment '{name}' is missing '{e.args[0]}'") from None


def merge_with_defaults(
    user_config: Optional[Mapping[str, Any]] = None, source: Optional[str] = None
) -> SyncConfig:
    """Layer a user configuration over the built-in defaults.

    Top-level keys replace their defaults; ``environments`` and ``options``
    are merged key by key so a user file may override a single environment.
    The defaults themselves are never modified.

    Args:
        user_config: Parsed user configuration (e.g. from secret-sync.yaml).
        source: Where the user configuration came from.

    Returns:
        Frozen SyncConfig for this run.
    """
    user = dict(user_config or {})

    environments: Dict[str, Any] = {k: dict(v) for k, v in DEFAULT_ENVIRONMENTS.items()}
    user_envs = user.get("environments") or {}
    if not isinstance(user_envs, Mapping):
        raise ConfigurationError("'environments' must be a mapping")
    for name, raw in user_envs.items():
        if isinstance(raw, Mapping) and name in environments:
            environments[name] = {**environments[name], **raw}
        else:
            environments[name] = raw

    options = dict(DEFAULT_OPTIONS)
    user_options = user.get("options") or {}
    if not isinstance(user_options, Mapping):
        raise ConfigurationError("'options' must be a mapping")
    for key, value in user_options.items():
        if key not in DEFAULT_OPTIONS:
            continue
        if not isinstance(value, bool):
            raise ConfigurationError(f"Option '{key}' must be true or false, got {value!r}")
        options[key] = value

    try:
        flt = Filter.from_dict(
            {
                "include": user.get("include", ()),
                "exclude": user.get("exclude", DEFAULT_EXCLUDE),
            }
        )
    except TypeError as e:
        raise ConfigurationError(str(e)) from e

    platform_options = {
        k: MappingProxyType(dict(v))
        for k, v in user.items()
        if k not in {"platform", "environments", "include", "exclude", "options"}
        and isinstance(v, Mapping)
    }

    return SyncConfig(
        platform=str(user.get("platform") or DEFAULT_PLATFORM),
        environments=MappingProxyType(
            {name: _environment_spec(name, raw) for name, raw in environments.items()}
        ),
        filter=flt,
        options=SyncOptions(**options),
        platform_options=MappingProxyType(platform_options),
        source=source,
    )
