"""GitHub Environments variables integration (secrets are not handled)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

import httpx

from ..core.errors import ConfigurationError, ProviderUnavailableError
from ..core.types import MutationOutcome
from ..dotenv import write_env_file
from .base import BasePlatform

logger = logging.getLogger(__name__)

PER_PAGE = 100


@dataclass
class _GitHubContext:
    owner: str
    repo: str
    token: str


class GitHubEnvPlatform(BasePlatform):
    """Remote provider for GitHub environment variables.

    The target is the GitHub environment name. The repository comes from
    the ``github.repository`` config entry (``owner/repo``) and the token
    from ``GITHUB_TOKEN`` unless passed explicitly.
    """

    name = "github"
    system_vars: FrozenSet[str] = frozenset({"GITHUB_*"})

    def __init__(
        self,
        repository: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        **options: Any,
    ):
        super().__init__(**options)
        self.ctx = self._parse_repository(repository, token)
        self._client = httpx.Client(
            base_url="https://api.github.com",
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self.ctx.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=20.0,
            transport=transport,
        )

    def _parse_repository(self, repository: Optional[str], token: Optional[str]) -> _GitHubContext:
        if not repository or "/" not in repository:
            raise ConfigurationError(
                "github platform requires 'github.repository' in the form owner/repo"
            )
        owner, repo = repository.split("/", 1)
        token_val = token or os.getenv("GITHUB_TOKEN")
        if not token_val:
            raise ConfigurationError("GITHUB_TOKEN not set and no token configured")
        return _GitHubContext(owner=owner, repo=repo, token=token_val)

    def _url(self, target: str, name: Optional[str] = None) -> str:
        url = f"/repos/{self.ctx.owner}/{self.ctx.repo}/environments/{target}/variables"
        return f"{url}/{name}" if name else url

    # ---- API helpers ----
    def _list_variables(self, target: str) -> Dict[str, str]:
        variables: Dict[str, str] = {}
        page = 1
        while True:
            resp = self._client.get(self._url(target), params={"per_page": PER_PAGE, "page": page})
            resp.raise_for_status()
            batch = resp.json().get("variables", [])
            for v in batch:
                variables[v["name"]] = v.get("value", "")
            if len(batch) < PER_PAGE:
                break
            page += 1
        return variables

    def _outcome(self, op: str, name: str, target: str, resp: httpx.Response) -> MutationOutcome:
        if resp.is_success:
            return self.log_operation(MutationOutcome(op=op, key=name), target)
        return self.log_operation(
            MutationOutcome(
                op=op, key=name, success=False, error=f"HTTP {resp.status_code}: {resp.text}"
            ),
            target,
        )

    # ---- RemoteProvider interface ----
    def init(self) -> None:
        try:
            resp = self._client.get(f"/repos/{self.ctx.owner}/{self.ctx.repo}")
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"Could not reach GitHub: {e}") from e
        if not resp.is_success:
            raise ProviderUnavailableError(
                f"Repository {self.ctx.owner}/{self.ctx.repo} not accessible (HTTP {resp.status_code})"
            )

    def list_keys(self, target: str) -> List[str]:
        try:
            return list(self._list_variables(target))
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"Failed to list GitHub variables: {e}") from e

    def set_value(self, name: str, value: str, target: str) -> MutationOutcome:
        try:
            resp = self._client.patch(self._url(target, name), json={"name": name, "value": value})
            if resp.status_code == 404:
                resp = self._client.post(self._url(target), json={"name": name, "value": value})
        except httpx.HTTPError as e:
            return self.log_operation(
                MutationOutcome(op="set", key=name, success=False, error=str(e)), target
            )
        return self._outcome("set", name, target, resp)

    def remove_value(self, name: str, target: str) -> MutationOutcome:
        try:
            resp = self._client.delete(self._url(target, name))
        except httpx.HTTPError as e:
            return self.log_operation(
                MutationOutcome(op="remove", key=name, success=False, error=str(e)), target
            )
        return self._outcome("remove", name, target, resp)

    def pull_to_file(self, target: str, destination: Path) -> MutationOutcome:
        dest = str(destination)
        try:
            variables = self._list_variables(target)
        except httpx.HTTPError as e:
            return MutationOutcome(op="pull", key=dest, success=False, error=str(e))
        header = None
        if self.options.get("add_header", True):
            header = f"Pulled from GitHub environment {self.ctx.owner}/{self.ctx.repo}#{target}"
        try:
            write_env_file(
                destination,
                variables,
                header=header,
                sort_keys=bool(self.options.get("sort_keys", True)),
            )
        except OSError as e:
            return MutationOutcome(op="pull", key=dest, success=False, error=str(e))
        logger.debug("wrote %d variables to %s", len(variables), dest)
        return MutationOutcome(op="pull", key=dest)

    def close(self) -> None:
        self._client.close()
