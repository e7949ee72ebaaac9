"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from gode_engine.errors import InvalidReferenceError
from gode_engine.models import ReleaseReference

# https://github.com/<owner>/<repo>/releases/tag/<tag>
_MIN_SEGMENTS = 8
_OWNER_INDEX = 3
_REPO_INDEX = 4
_TAG_INDEX = 7


def parse_release_url(url: str) -> ReleaseReference:
    """Extract owner, repo and tag from a release page URL by fixed segment position."""
    parts = url.split("/")
    if len(parts) < _MIN_SEGMENTS:
        raise InvalidReferenceError(f"Invalid URL: {url}")

    owner, repo, tag = parts[_OWNER_INDEX], parts[_REPO_INDEX], parts[_TAG_INDEX]
    if not owner or not repo or not tag:
        raise InvalidReferenceError(f"Invalid URL: {url} (empty owner, repo or tag segment)")
    return ReleaseReference(owner=owner, repo=repo, tag=tag)
