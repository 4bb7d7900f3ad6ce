"""Vercel integration through the ``vc`` command line tool."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence

from ..core.errors import ProviderUnavailableError
from ..core.types import MutationOutcome
from .base import BasePlatform

logger = logging.getLogger(__name__)

SENSITIVE_HINT = "If this is a sensitive variable, update it manually in the Vercel dashboard"

VERCEL_SYSTEM_VARS: FrozenSet[str] = frozenset(
    {
        "VERCEL*",
        "VERCEL_ENV",
        "VERCEL_TARGET_ENV",
        "VERCEL_URL",
        "VERCEL_BRANCH_URL",
        "VERCEL_PROJECT_PRODUCTION_URL",
        "VERCEL_REGION",
        "VERCEL_DEPLOYMENT_ID",
        "VERCEL_PROJECT_ID",
        "VERCEL_SKEW_PROTECTION_ENABLED",
        "VERCEL_AUTOMATION_BYPASS_SECRET",
        "VERCEL_OIDC_TOKEN",
        "VERCEL_GIT_PROVIDER",
        "VERCEL_GIT_REPO_SLUG",
        "VERCEL_GIT_REPO_OWNER",
        "VERCEL_GIT_REPO_ID",
        "VERCEL_GIT_COMMIT_REF",
        "VERCEL_GIT_COMMIT_SHA",
        "VERCEL_GIT_COMMIT_MESSAGE",
        "VERCEL_GIT_COMMIT_AUTHOR_LOGIN",
        "VERCEL_GIT_COMMIT_AUTHOR_NAME",
        "VERCEL_GIT_PREVIOUS_SHA",
        "VERCEL_GIT_PULL_REQUEST_ID",
        "NEXT_PUBLIC_VERCEL_URL",
        "NEXT_PUBLIC_VERCEL_ENV",
        "NEXT_PUBLIC_VERCEL_PROJECT_PRODUCTION_URL",
        "NEXT_PUBLIC_VERCEL_BRANCH_URL",
        "NEXT_PUBLIC_VERCEL_GIT_PROVIDER",
        "NEXT_PUBLIC_VERCEL_GIT_REPO_SLUG",
        "NEXT_PUBLIC_VERCEL_GIT_REPO_OWNER",
        "NEXT_PUBLIC_VERCEL_GIT_REPO_ID",
        "NEXT_PUBLIC_VERCEL_GIT_COMMIT_REF",
        "NEXT_PUBLIC_VERCEL_GIT_COMMIT_SHA",
        "NEXT_PUBLIC_VERCEL_GIT_COMMIT_MESSAGE",
        "NEXT_PUBLIC_VERCEL_GIT_COMMIT_AUTHOR_LOGIN",
        "NEXT_PUBLIC_VERCEL_GIT_COMMIT_AUTHOR_NAME",
        "NEXT_PUBLIC_VERCEL_GIT_PULL_REQUEST_ID",
    }
)


def parse_env_ls(output: str) -> List[str]:
    """Extract variable names from ``vc env ls`` table output.

    The name is the first column; header, separator and informational
    lines are skipped.
    """
    names: List[str] = []
    for line in output.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(("name", "---", ">", "Vercel CLI")):
            continue
        first = trimmed.split()[0]
        if "=" in first:
            continue
        if first not in names:
            names.append(first)
    return names


class VercelPlatform(BasePlatform):
    """Remote provider backed by the Vercel CLI."""

    name = "vercel"
    system_vars = VERCEL_SYSTEM_VARS
    targets = ("development", "preview", "production")

    def __init__(self, binary: str = "vc", **options):
        super().__init__(**options)
        self.binary = binary

    def _run(
        self, args: Sequence[str], input: Optional[str] = None
    ) -> subprocess.CompletedProcess:
        cmd = [self.binary, *args]
        logger.debug("running %s", " ".join(cmd))
        return subprocess.run(
            cmd, input=input, capture_output=True, text=True, check=False
        )

    @staticmethod
    def _error(proc: subprocess.CompletedProcess) -> str:
        return (proc.stderr or proc.stdout or "").strip() or f"exit status {proc.returncode}"

    def init(self) -> None:
        try:
            proc = self._run(["--version"])
        except OSError as e:
            raise ProviderUnavailableError(
                "Vercel CLI not found. Please install: npm i -g vercel"
            ) from e
        if proc.returncode != 0:
            raise ProviderUnavailableError(
                "Vercel CLI not found. Please install: npm i -g vercel"
            )
        if not self.is_project_linked():
            raise ProviderUnavailableError("Vercel project not linked. Please run: vc link")

    def is_project_linked(self) -> bool:
        try:
            return self._run(["project", "ls"]).returncode == 0
        except OSError:
            return False

    def list_keys(self, target: str) -> List[str]:
        try:
            proc = self._run(["env", "ls", target])
        except OSError as e:
            raise ProviderUnavailableError(f"Failed to list Vercel env vars: {e}") from e
        if proc.returncode != 0:
            raise ProviderUnavailableError(
                f"Failed to list Vercel env vars: {self._error(proc)}"
            )
        names = parse_env_ls(proc.stdout)
        logger.debug("found %d variables in %s", len(names), target)
        return names

    def set_value(self, name: str, value: str, target: str) -> MutationOutcome:
        # `vc env add` refuses existing names, so drop the old value first
        try:
            self._run(["env", "rm", name, target, "-y"])
            proc = self._run(["env", "add", name, target], input=value)
        except OSError as e:
            return self.log_operation(
                MutationOutcome(op="set", key=name, success=False, error=str(e)), target
            )
        if proc.returncode != 0:
            outcome = MutationOutcome(
                op="set", key=name, success=False, error=self._error(proc), hint=SENSITIVE_HINT
            )
        else:
            outcome = MutationOutcome(op="set", key=name)
        return self.log_operation(outcome, target)

    def remove_value(self, name: str, target: str) -> MutationOutcome:
        try:
            proc = self._run(["env", "rm", name, target, "-y"])
        except OSError as e:
            return self.log_operation(
                MutationOutcome(op="remove", key=name, success=False, error=str(e)), target
            )
        if proc.returncode != 0:
            outcome = MutationOutcome(op="remove", key=name, success=False, error=self._error(proc))
        else:
            outcome = MutationOutcome(op="remove", key=name)
        return self.log_operation(outcome, target)

    def pull_to_file(self, target: str, destination: Path) -> MutationOutcome:
        dest = str(destination)
        try:
            proc = self._run(["env", "pull", dest, f"--environment={target}", "--yes"])
        except OSError as e:
            return MutationOutcome(op="pull", key=dest, success=False, error=str(e))
        if proc.returncode != 0:
            return MutationOutcome(op="pull", key=dest, success=False, error=self._error(proc))
        return MutationOutcome(op="pull", key=dest)
