from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict

import pytest


def _ensure_src_on_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if src_path.exists():
        src_str = str(src_path)
        if src_str not in sys.path:
            sys.path.insert(0, src_str)


_ensure_src_on_path()

from fakes import FakeSession, Route  # noqa: E402
from gode_engine.config import GodeCheckConfig  # noqa: E402
from gode_engine.github import GitHubClient  # noqa: E402


@pytest.fixture
def config(tmp_path: Path) -> GodeCheckConfig:
    return GodeCheckConfig(github_token="test-token", scratch_root=tmp_path / "gode-check")


@pytest.fixture
def make_client(config: GodeCheckConfig) -> Callable[[Dict[str, Route]], GitHubClient]:
    def _make(routes: Dict[str, Route]) -> GitHubClient:
        return GitHubClient(config, session=FakeSession(routes))

    return _make
