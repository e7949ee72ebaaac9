"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from typing import Optional

from gode_engine.errors import InvalidReferenceError
from gode_engine.github import GitHubClient, require_str
from gode_engine.models import ReleaseReference, ResolvedCommit

logger = logging.getLogger(__name__)

COMMIT_KIND = "commit"
TAG_KIND = "tag"


def resolve_commit(
    client: GitHubClient,
    ref: ReleaseReference,
    *,
    provided_commit: Optional[str] = None,
) -> ResolvedCommit:
    """
    Return the commit a release tag points at.

    A commit given on the command line is trusted verbatim but must not be
    blank. Otherwise the tag ref is fetched; lightweight tags point straight at
    a commit, annotated tags need one extra fetch of the tag object. Tag
    objects pointing at further tag objects are not followed.
    """
    if provided_commit is not None:
        if not provided_commit.strip():
            raise InvalidReferenceError("Invalid commit: an empty commit would match every artifact")
        return ResolvedCommit(sha=provided_commit, provided=True)

    ref_object = client.get_json(ref.owner, ref.repo, f"git/refs/tags/{ref.tag}", context="tags")
    kind = require_str(ref_object, "object", "type", context="tags")
    sha = require_str(ref_object, "object", "sha", context="tags")
    if kind == COMMIT_KIND:
        return ResolvedCommit(sha=sha)

    logger.info("Tag %s is annotated (object type %s); dereferencing %s", ref.tag, kind, sha)
    tag_object = client.get_json(ref.owner, ref.repo, f"git/tags/{sha}", context="tag object")
    target_sha = require_str(tag_object, "object", "sha", context="tag object")
    target_kind = (tag_object.get("object") or {}).get("type")
    if target_kind == TAG_KIND:
        logger.warning(
            "Tag object %s points at another tag object %s; nested tags are not followed",
            sha,
            target_sha,
        )
    return ResolvedCommit(sha=target_sha)
