"""Tests for the remote platform integrations."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import List

import httpx
import pytest

from secretsync.core.errors import ConfigurationError, ProviderUnavailableError
from secretsync.platforms import get_platform
from secretsync.platforms.github_env import GitHubEnvPlatform
from secretsync.platforms.vercel import SENSITIVE_HINT, VercelPlatform, parse_env_ls
from secretsync.sources.env_file import EnvFileSource

VC_ENV_LS = """\
Vercel CLI 33.0.1
> Environment Variables found for acme/web [120ms]

 name                 value               environments        created
 ---                  ---                 ---                 ---
 DATABASE_URL         Encrypted           Production          2d ago
 NEXT_PUBLIC_API      Encrypted           Production          5d ago
 VERCEL_GIT_SHA       Encrypted           Production          9d ago

"""


class FakeRun:
    """Stand-in for subprocess.run recording commands."""

    def __init__(self, results=None):
        self.commands: List[list] = []
        self.inputs: List[str] = []
        self.results = results or {}

    def __call__(self, cmd, input=None, capture_output=False, text=False, check=False):
        self.commands.append(cmd)
        self.inputs.append(input)
        key = " ".join(cmd[1:3])
        returncode, stdout, stderr = self.results.get(key, (0, "", ""))
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)


@pytest.fixture
def fake_run(monkeypatch):
    runner = FakeRun()
    monkeypatch.setattr("secretsync.platforms.vercel.subprocess.run", runner)
    return runner


class TestRegistry:
    """Test suite for get_platform."""

    def test_vercel(self):
        """Test names are matched case-insensitively."""
        assert isinstance(get_platform("Vercel"), VercelPlatform)

    def test_unsupported(self):
        """Test unknown platforms fail fast."""
        with pytest.raises(ConfigurationError, match="Unsupported platform: heroku"):
            get_platform("heroku")

    @pytest.mark.parametrize("name", ["netlify", "railway"])
    def test_planned(self, name):
        """Test planned platforms report that they are not implemented."""
        with pytest.raises(ConfigurationError, match="not yet implemented"):
            get_platform(name)

    def test_github_needs_repository(self, monkeypatch):
        """Test the github platform requires a repository."""
        monkeypatch.setenv("GITHUB_TOKEN", "t")
        with pytest.raises(ConfigurationError, match="repository"):
            get_platform("github")


class TestVercel:
    """Test suite for VercelPlatform."""

    def test_parse_env_ls(self):
        """Test the table parser keeps only variable names."""
        assert parse_env_ls(VC_ENV_LS) == ["DATABASE_URL", "NEXT_PUBLIC_API", "VERCEL_GIT_SHA"]

    def test_protected_patterns(self):
        """Test system and Vercel variables are protected."""
        patterns = VercelPlatform().protected_patterns()
        assert "HOME" in patterns
        assert "VERCEL*" in patterns
        assert "NEXT_PUBLIC_VERCEL_URL" in patterns

    def test_validate_target(self):
        """Test only Vercel's three targets are accepted."""
        platform = VercelPlatform()
        platform.validate_target("preview")
        with pytest.raises(ConfigurationError, match="Invalid target"):
            platform.validate_target("staging")

    def test_init_ok(self, fake_run):
        """Test init checks the CLI and the project link."""
        VercelPlatform().init()
        assert fake_run.commands == [["vc", "--version"], ["vc", "project", "ls"]]

    def test_init_cli_missing(self, monkeypatch):
        """Test a missing binary is reported as unavailable."""

        def missing(*args, **kwargs):
            raise FileNotFoundError("vc")

        monkeypatch.setattr("secretsync.platforms.vercel.subprocess.run", missing)
        with pytest.raises(ProviderUnavailableError, match="npm i -g vercel"):
            VercelPlatform().init()

    def test_init_not_linked(self, fake_run):
        """Test an unlinked project is reported as unavailable."""
        fake_run.results["project ls"] = (1, "", "not linked")
        with pytest.raises(ProviderUnavailableError, match="vc link"):
            VercelPlatform().init()

    def test_list_keys(self, fake_run):
        """Test listing parses `vc env ls` output."""
        fake_run.results["env ls"] = (0, VC_ENV_LS, "")
        assert VercelPlatform().list_keys("production") == [
            "DATABASE_URL", "NEXT_PUBLIC_API", "VERCEL_GIT_SHA",
        ]
        assert fake_run.commands == [["vc", "env", "ls", "production"]]

    def test_list_keys_failure(self, fake_run):
        """Test a failed listing raises instead of returning nothing."""
        fake_run.results["env ls"] = (1, "", "Error: not authorized")
        with pytest.raises(ProviderUnavailableError, match="not authorized"):
            VercelPlatform().list_keys("production")

    def test_set_value(self, fake_run):
        """Test set removes the old value and pipes the new one on stdin."""
        outcome = VercelPlatform().set_value("API_KEY", "s3cr3t value", "preview")

        assert outcome.success
        assert fake_run.commands == [
            ["vc", "env", "rm", "API_KEY", "preview", "-y"],
            ["vc", "env", "add", "API_KEY", "preview"],
        ]
        assert fake_run.inputs[1] == "s3cr3t value"

    def test_set_value_failure(self, fake_run):
        """Test a failed add returns a failure outcome with a hint."""
        fake_run.results["env add"] = (1, "", "Error: sensitive variable")
        outcome = VercelPlatform().set_value("API_KEY", "x", "preview")

        assert not outcome.success
        assert outcome.error == "Error: sensitive variable"
        assert outcome.hint == SENSITIVE_HINT

    def test_remove_value(self, fake_run):
        """Test remove maps to `vc env rm -y`."""
        fake_run.results["env rm"] = (1, "", "not found")
        outcome = VercelPlatform().remove_value("OLD", "development")
        assert not outcome.success
        assert outcome.op == "remove"
        assert fake_run.commands == [["vc", "env", "rm", "OLD", "development", "-y"]]

    def test_pull_to_file(self, fake_run, tmp_path):
        """Test pull delegates to `vc env pull`."""
        dest = tmp_path / ".env.local"
        outcome = VercelPlatform().pull_to_file("development", dest)
        assert outcome.success
        assert fake_run.commands == [
            ["vc", "env", "pull", str(dest), "--environment=development", "--yes"]
        ]


class FakeGitHub:
    """Minimal GitHub environment variables API."""

    def __init__(self, variables=None):
        self.variables = dict(variables or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        base = "/repos/acme/web/environments/production/variables"
        if path == "/repos/acme/web":
            return httpx.Response(200, json={"full_name": "acme/web"})
        if path == base and request.method == "GET":
            page = int(request.url.params.get("page", "1"))
            per_page = int(request.url.params.get("per_page", "30"))
            items = [{"name": k, "value": v} for k, v in self.variables.items()]
            chunk = items[(page - 1) * per_page : page * per_page]
            return httpx.Response(200, json={"total_count": len(items), "variables": chunk})
        if path == base and request.method == "POST":
            body = json.loads(request.content)
            self.variables[body["name"]] = body["value"]
            return httpx.Response(201)
        if path.startswith(base + "/"):
            name = path.rsplit("/", 1)[1]
            if name not in self.variables:
                return httpx.Response(404, json={"message": "Not Found"})
            if request.method == "PATCH":
                self.variables[name] = json.loads(request.content)["value"]
                return httpx.Response(204)
            if request.method == "DELETE":
                del self.variables[name]
                return httpx.Response(204)
        return httpx.Response(500, text="unexpected")


@pytest.fixture
def github():
    api = FakeGitHub({"A": "1", "GITHUB_SHA": "abc"})
    platform = GitHubEnvPlatform(
        repository="acme/web", token="t0k", transport=httpx.MockTransport(api)
    )
    return api, platform


class TestGitHub:
    """Test suite for GitHubEnvPlatform."""

    def test_token_from_env(self, monkeypatch):
        """Test the token falls back to GITHUB_TOKEN."""
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")
        platform = GitHubEnvPlatform(repository="acme/web")
        assert platform.ctx.token == "from-env"

    def test_missing_token(self, monkeypatch):
        """Test a missing token is a configuration error."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
            GitHubEnvPlatform(repository="acme/web")

    def test_init_and_auth_header(self, github):
        """Test init probes the repository with the bearer token."""
        api, platform = github
        platform.init()
        assert api.requests[0].headers["Authorization"] == "Bearer t0k"

    def test_list_keys_paginates(self, monkeypatch):
        """Test every page is fetched."""
        monkeypatch.setattr("secretsync.platforms.github_env.PER_PAGE", 2)
        api = FakeGitHub({f"V{i}": str(i) for i in range(5)})
        platform = GitHubEnvPlatform(
            repository="acme/web", token="t", transport=httpx.MockTransport(api)
        )
        assert platform.list_keys("production") == ["V0", "V1", "V2", "V3", "V4"]
        assert len(api.requests) == 3

    def test_list_keys_failure(self):
        """Test HTTP errors while listing raise ProviderUnavailableError."""
        platform = GitHubEnvPlatform(
            repository="acme/web",
            token="t",
            transport=httpx.MockTransport(lambda r: httpx.Response(403, text="forbidden")),
        )
        with pytest.raises(ProviderUnavailableError):
            platform.list_keys("production")

    def test_set_existing_and_new(self, github):
        """Test set patches existing names and creates missing ones."""
        api, platform = github
        assert platform.set_value("A", "2", "production").success
        assert platform.set_value("B", "new", "production").success
        assert api.variables == {"A": "2", "GITHUB_SHA": "abc", "B": "new"}
        assert [r.method for r in api.requests] == ["PATCH", "PATCH", "POST"]

    def test_remove(self, github):
        """Test remove deletes and reports missing names as failures."""
        api, platform = github
        assert platform.remove_value("A", "production").success
        missing = platform.remove_value("NOPE", "production")
        assert not missing.success
        assert "404" in missing.error
        assert "A" not in api.variables

    def test_protected_patterns(self, github):
        """Test GitHub-owned names are protected."""
        _, platform = github
        assert "GITHUB_*" in platform.protected_patterns()
        assert "CI" in platform.protected_patterns()
        assert platform.valid_targets() is None

    def test_pull_to_file(self, github, tmp_path: Path):
        """Test pull writes every variable to the env file."""
        _, platform = github
        dest = tmp_path / ".env.production"
        outcome = platform.pull_to_file("production", dest)
        assert outcome.success
        lines = dest.read_text().splitlines()
        assert lines[0].startswith("# Pulled from GitHub environment acme/web#production")
        assert "A=1" in lines
        assert "GITHUB_SHA=abc" in lines

    def test_pull_without_header(self, tmp_path: Path):
        """Test add_header=False writes only the variables."""
        api = FakeGitHub({"A": "1"})
        platform = GitHubEnvPlatform(
            repository="acme/web",
            token="t",
            transport=httpx.MockTransport(api),
            add_header=False,
        )
        dest = tmp_path / ".env"
        assert platform.pull_to_file("production", dest).success
        assert dest.read_text() == "A=1\n"

    def test_pull_keeps_backslashes(self, tmp_path: Path):
        """Test pulled values load back unchanged for the next push."""
        values = {"WIN_PATH": "C:\\new dir", "TRAIL": "a b\\"}
        platform = GitHubEnvPlatform(
            repository="acme/web", token="t", transport=httpx.MockTransport(FakeGitHub(values))
        )
        dest = tmp_path / ".env"
        assert platform.pull_to_file("production", dest).success
        assert EnvFileSource(dest).load_snapshot() == values

    def test_pull_write_failure(self, github, tmp_path: Path):
        """Test an unwritable destination is a failed outcome, not an exception."""
        _, platform = github
        dest = tmp_path / "missing" / ".env"
        outcome = platform.pull_to_file("production", dest)
        assert not outcome.success
        assert outcome.op == "pull"
        assert outcome.key == str(dest)
        assert outcome.error

    def test_close(self, github):
        """Test close releases the HTTP client."""
        _, platform = github
        platform.close()
        assert platform._client.is_closed
