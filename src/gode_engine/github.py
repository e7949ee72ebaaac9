"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from gode_engine.config import GodeCheckConfig
from gode_engine.errors import ResponseShapeError, TransportError

logger = logging.getLogger(__name__)

_MAX_ERROR_CHARS = 240


def _clip(text: str, *, limit: int = _MAX_ERROR_CHARS) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _walk(payload: Any, path: tuple[str, ...], context: str) -> Any:
    current = payload
    for idx, key in enumerate(path):
        if not isinstance(current, dict):
            where = ".".join(path[:idx]) or "<root>"
            raise ResponseShapeError(f"Error parsing {context} JSON: expected object at {where}")
        if key not in current or current[key] is None:
            raise ResponseShapeError(f"Error parsing {context} JSON: missing field {'.'.join(path[: idx + 1])}")
        current = current[key]
    return current


def require_str(payload: Any, *path: str, context: str) -> str:
    value = _walk(payload, path, context)
    if not isinstance(value, str) or not value:
        raise ResponseShapeError(f"Error parsing {context} JSON: field {'.'.join(path)} is not a non-empty string")
    return value


def require_int(payload: Any, *path: str, context: str) -> int:
    value = _walk(payload, path, context)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ResponseShapeError(f"Error parsing {context} JSON: field {'.'.join(path)} is not an integer")
    return value


def require_list(payload: Any, *path: str, context: str) -> List[Any]:
    value = _walk(payload, path, context)
    if not isinstance(value, list):
        raise ResponseShapeError(f"Error parsing {context} JSON: field {'.'.join(path)} is not a list")
    return value


class GitHubClient:
    """
    Thin blocking client for the GitHub REST API and plain artifact downloads.

    API calls carry the JSON accept header, the gode-check user agent and,
    when configured, the bearer token. Downloads never carry the token.
    """

    def __init__(self, config: GodeCheckConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session if session is not None else requests.Session()

    def api_url(self, owner: str, repo: str, path: str) -> str:
        return f"{self.config.api_base_url}/repos/{owner}/{repo}/{path.lstrip('/')}"

    def _api_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return headers

    def _get(self, url: str, headers: Dict[str, str], *, context: str) -> requests.Response:
        logger.info("GET %s", url)
        try:
            resp = self.session.get(url, headers=headers, timeout=self.config.timeout_s)
        except requests.RequestException as exc:
            raise TransportError(f"Error fetching {context}: {_clip(str(exc))}") from exc
        if not 200 <= resp.status_code < 300:
            raise TransportError(f"Error fetching {context}: http status {resp.status_code} at {url}")
        return resp

    def get_json(self, owner: str, repo: str, path: str, *, context: str) -> Any:
        url = self.api_url(owner, repo, path)
        resp = self._get(url, self._api_headers(), context=context)
        try:
            return resp.json()
        except ValueError as exc:
            raise ResponseShapeError(f"Error parsing {context} JSON: {_clip(str(exc))}") from exc

    def get_bytes(self, url: str, *, context: str) -> bytes:
        headers = {
            "Accept": "application/octet-stream",
            "User-Agent": self.config.user_agent,
        }
        resp = self._get(url, headers, context=context)
        try:
            payload = resp.content
        except requests.RequestException as exc:
            raise TransportError(f"Error reading {context}: {_clip(str(exc))}") from exc
        logger.info("Downloaded %s (%d bytes)", context, len(payload))
        return payload
