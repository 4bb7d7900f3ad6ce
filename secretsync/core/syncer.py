"""Push, pull, status and diff pipelines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..platforms.base import RemoteProvider
from ..sources.env_file import EnvFileSource
from .config import EnvironmentSpec, SyncConfig
from .errors import ConfigurationError, ValidationError
from .filters import filter_vars
from .reconciler import apply, diff
from .types import ApplyReport, ChangeSet, EnvironmentStatus, MutationOutcome

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[ChangeSet], bool]


@dataclass(frozen=True)
class SyncPlan:
    """Everything computed for one environment before any write happens.

    Attributes:
        environment: Environment name.
        file: Local env file that was read.
        target: Remote target identifier.
        local: Filtered local variables.
        excluded: Local names dropped by the filter.
        changes: Change set against the remote key set.
    """

    environment: str
    file: Path
    target: str
    local: Dict[str, str]
    excluded: List[str]
    changes: ChangeSet


@dataclass(frozen=True)
class PushResult:
    plan: SyncPlan
    report: Optional[ApplyReport] = None
    cancelled: bool = False


class Syncer:
    """Run sync operations for one configuration and one platform.

    Each call is a fresh filter -> diff -> (confirm) -> apply pipeline;
    nothing is carried over between calls.
    """

    def __init__(
        self,
        config: SyncConfig,
        platform: RemoteProvider,
        confirm: Optional[ConfirmFn] = None,
        on_plan: Optional[Callable[[SyncPlan], None]] = None,
    ):
        """Initialize Syncer.

        Args:
            config: Resolved configuration.
            platform: Remote provider to read from and write to.
            confirm: Called with the change set before applying; returning
                False cancels the push.
            on_plan: Called with every computed plan, e.g. to render it.
        """
        self.config = config
        self.platform = platform
        self.confirm = confirm
        self.on_plan = on_plan
        self._ready = False

    def _ensure_ready(self) -> None:
        if not self._ready:
            self.platform.init()
            self._ready = True

    def _resolve(self, environment: str, file: Optional[Union[str, Path]] = None) -> EnvironmentSpec:
        spec = self.config.environment(environment)
        self.platform.validate_target(spec.target)
        if file is not None:
            spec = EnvironmentSpec(file=str(file), target=spec.target)
        return spec

    def _plan(
        self, environment: str, spec: EnvironmentSpec, require_values: bool = False
    ) -> SyncPlan:
        source = EnvFileSource(spec.file)
        snapshot = source.load_snapshot()
        if require_values and not snapshot:
            # an empty file would otherwise plan the removal of everything
            raise ValidationError(f"No variables found in {spec.file}")
        filtered = filter_vars(snapshot, self.config.filter)
        if filtered.excluded:
            logger.info(
                "Excluded %d variables: %s", len(filtered.excluded), ", ".join(filtered.excluded)
            )

        # raises ProviderUnavailableError; no diff against an unknown remote
        remote_keys = self.platform.list_keys(spec.target)
        changes = diff(filtered.kept, remote_keys, self.platform.protected_patterns())
        plan = SyncPlan(
            environment=environment,
            file=source.path,
            target=spec.target,
            local=filtered.kept,
            excluded=filtered.excluded,
            changes=changes,
        )
        if self.on_plan is not None:
            self.on_plan(plan)
        return plan

    def plan(self, environment: str, file: Optional[Union[str, Path]] = None) -> SyncPlan:
        """Compute the change set for an environment without applying it."""
        spec = self._resolve(environment, file)
        self._ensure_ready()
        return self._plan(environment, spec)

    def push(
        self,
        environment: str,
        file: Optional[Union[str, Path]] = None,
        yes: bool = False,
    ) -> PushResult:
        """Push local variables to the remote target.

        Args:
            environment: Configured environment name.
            file: Override for the environment's local file.
            yes: Skip the confirmation step.

        Returns:
            PushResult with the plan and, unless cancelled, the apply report.

        Raises:
            ConfigurationError: Unknown environment or invalid target.
            ValidationError: Local file missing, empty or malformed.
            ProviderUnavailableError: Remote keys could not be listed.
        """
        spec = self._resolve(environment, file)
        self._ensure_ready()
        logger.debug("push %s: %s -> %s", environment, spec.file, spec.target)

        plan = self._plan(environment, spec, require_values=True)

        if plan.changes.is_empty:
            logger.info("%s is already in sync", environment)
            return PushResult(plan=plan, report=ApplyReport(target=spec.target))

        if not yes and self.config.options.confirm_changes:
            if self.confirm is None:
                raise ConfigurationError(
                    "Confirmation required but no confirmation handler is set; pass yes=True"
                )
            if not self.confirm(plan.changes):
                logger.info("push to %s cancelled", environment)
                return PushResult(plan=plan, cancelled=True)

        report = apply(plan.changes, plan.local, self.platform, spec.target)
        return PushResult(plan=plan, report=report)

    def pull(self, environment: str, file: Optional[Union[str, Path]] = None) -> MutationOutcome:
        """Mirror the remote target into the local file; no diffing involved."""
        spec = self._resolve(environment, file)
        self._ensure_ready()
        logger.debug("pull %s: %s -> %s", environment, spec.target, spec.file)
        return self.platform.pull_to_file(spec.target, Path(spec.file))

    def status(self, environment: Optional[str] = None) -> Dict[str, EnvironmentStatus]:
        """Summarize sync state for one or all configured environments."""
        names = [environment] if environment else list(self.config.environments)
        results: Dict[str, EnvironmentStatus] = {}
        for name in names:
            spec = self._resolve(name)
            if not EnvFileSource(spec.file).exists():
                results[name] = EnvironmentStatus(environment=name, file=spec.file, target=spec.target)
                continue
            self._ensure_ready()
            plan = self._plan(name, spec)
            results[name] = EnvironmentStatus(
                environment=name,
                file=spec.file,
                target=spec.target,
                changes=plan.changes,
                local_count=len(plan.local),
            )
        return results

    def diff(self, environment: str, file: Optional[Union[str, Path]] = None) -> SyncPlan:
        """Detailed comparison for one environment."""
        return self.plan(environment, file)
