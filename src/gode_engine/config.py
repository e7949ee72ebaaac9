"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from gode_engine.errors import ConfigError

TOKEN_ENV = "GODE_CHECK_GITHUB_TOKEN"
API_URL_ENV = "GODE_CHECK_API_URL"
PROXY_URL_ENV = "GODE_CHECK_PROXY_URL"
SCRATCH_DIR_ENV = "GODE_CHECK_SCRATCH_DIR"
TIMEOUT_ENV = "GODE_CHECK_TIMEOUT"
ALL_PAGES_ENV = "GODE_CHECK_ALL_PAGES"

DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_PROXY_BASE_URL = "https://nightly.link"
PACKAGE_EXTENSION = ".geode"
USER_AGENT = "gode-check"
SCRATCH_DIR_NAME = "gode-check"


@dataclass(frozen=True)
class GodeCheckConfig:
    github_token: str = ""
    api_base_url: str = DEFAULT_API_BASE_URL
    proxy_base_url: str = DEFAULT_PROXY_BASE_URL
    scratch_root: Path = Path(tempfile.gettempdir()) / SCRATCH_DIR_NAME
    package_extension: str = PACKAGE_EXTENSION
    user_agent: str = USER_AGENT
    timeout_s: Optional[float] = None
    all_pages: bool = False

    def __repr__(self) -> str:
        # Keep the token out of logs and tracebacks.
        token = "***" if self.github_token else ""
        return (
            f"GodeCheckConfig(github_token={token!r}, api_base_url={self.api_base_url!r}, "
            f"proxy_base_url={self.proxy_base_url!r}, scratch_root={str(self.scratch_root)!r}, "
            f"package_extension={self.package_extension!r}, timeout_s={self.timeout_s!r}, "
            f"all_pages={self.all_pages!r})"
        )


def parse_timeout(raw: Optional[str]) -> Optional[float]:
    """Parse a timeout in seconds; blank means no timeout."""
    value = (raw or "").strip()
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid timeout {value!r}: expected a number of seconds") from exc
    if timeout <= 0:
        raise ConfigError(f"Invalid timeout {value!r}: must be > 0")
    return timeout


def _flag_enabled(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes"}


def load_config(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> GodeCheckConfig:
    """
    Build the run configuration once at startup.

    Values come from the environment; keyword overrides (CLI flags) win when
    they are not None. A user-named scratch directory (env or `scratch_dir`)
    is only ever a parent: the run owns its `gode-check` child and nothing else.
    """
    env_map = os.environ if env is None else env

    scratch_raw = (env_map.get(SCRATCH_DIR_ENV) or "").strip()
    config = GodeCheckConfig(
        github_token=(env_map.get(TOKEN_ENV) or "").strip(),
        api_base_url=(env_map.get(API_URL_ENV) or "").strip().rstrip("/") or DEFAULT_API_BASE_URL,
        proxy_base_url=(env_map.get(PROXY_URL_ENV) or "").strip().rstrip("/") or DEFAULT_PROXY_BASE_URL,
        scratch_root=Path(scratch_raw or tempfile.gettempdir()) / SCRATCH_DIR_NAME,
        timeout_s=parse_timeout(env_map.get(TIMEOUT_ENV)),
        all_pages=_flag_enabled(env_map.get(ALL_PAGES_ENV)),
    )

    updates = {key: value for key, value in overrides.items() if value is not None}
    if "scratch_dir" in updates:
        updates["scratch_root"] = Path(updates.pop("scratch_dir")) / SCRATCH_DIR_NAME
    unknown = sorted(set(updates) - set(GodeCheckConfig.__dataclass_fields__))
    if unknown:
        raise ConfigError(f"Unknown config field(s): {', '.join(unknown)}")
    if "scratch_root" in updates:
        updates["scratch_root"] = Path(updates["scratch_root"])
    return replace(config, **updates) if updates else config
