from __future__ import annotations

from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

import pytest

from secretsync.core.errors import ProviderUnavailableError
from secretsync.core.types import MutationOutcome
from secretsync.dotenv import write_env_file
from secretsync.platforms.base import BasePlatform


class FakePlatform(BasePlatform):
    """In-memory remote provider recording every call."""

    name = "fake"
    system_vars: FrozenSet[str] = frozenset({"VERCEL_*"})
    targets = ("development", "preview", "production")

    def __init__(self, remote: Optional[Dict[str, Dict[str, str]]] = None, **options):
        super().__init__(**options)
        self.remote: Dict[str, Dict[str, str]] = remote or {}
        self.calls: List[Tuple[str, ...]] = []
        self.fail: Set[str] = set()
        self.unavailable = False
        self.init_count = 0
        self.closed = False

    def init(self) -> None:
        self.init_count += 1

    def list_keys(self, target: str) -> List[str]:
        self.calls.append(("list", target))
        if self.unavailable:
            raise ProviderUnavailableError("remote down")
        return list(self.remote.get(target, {}))

    def set_value(self, name: str, value: str, target: str) -> MutationOutcome:
        self.calls.append(("set", name, target))
        if name in self.fail:
            return MutationOutcome(op="set", key=name, success=False, error="denied")
        self.remote.setdefault(target, {})[name] = value
        return MutationOutcome(op="set", key=name)

    def remove_value(self, name: str, target: str) -> MutationOutcome:
        self.calls.append(("remove", name, target))
        self.remote.get(target, {}).pop(name, None)
        return MutationOutcome(op="remove", key=name)

    def pull_to_file(self, target: str, destination: Path) -> MutationOutcome:
        self.calls.append(("pull", target, str(destination)))
        write_env_file(destination, self.remote.get(target, {}))
        return MutationOutcome(op="pull", key=str(destination))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()
