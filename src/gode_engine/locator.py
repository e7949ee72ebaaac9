"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from typing import Any, List

from gode_engine.errors import NoEvidenceError, ResponseShapeError
from gode_engine.github import GitHubClient, require_int, require_list, require_str
from gode_engine.models import CIArtifact, LocatedArtifact, ReleaseReference, ResolvedCommit

logger = logging.getLogger(__name__)

ARTIFACTS_PAGE_SIZE = 100


def _parse_artifact(item: Any) -> CIArtifact:
    return CIArtifact(
        id=require_int(item, "id", context="artifacts"),
        name=require_str(item, "name", context="artifacts"),
        workflow_run_id=require_int(item, "workflow_run", "id", context="artifacts"),
        head_sha=require_str(item, "workflow_run", "head_sha", context="artifacts"),
    )


def list_artifacts(client: GitHubClient, ref: ReleaseReference, *, all_pages: bool = False) -> List[CIArtifact]:
    """
    List the repository's CI artifacts.

    By default only the first page the API returns is read. With all_pages the
    listing is walked page by page until a short or empty page.
    """
    if not all_pages:
        payload = client.get_json(ref.owner, ref.repo, "actions/artifacts", context="artifacts")
        return [_parse_artifact(item) for item in require_list(payload, "artifacts", context="artifacts")]

    page = 1
    out: List[CIArtifact] = []
    while True:
        payload = client.get_json(
            ref.owner,
            ref.repo,
            f"actions/artifacts?per_page={ARTIFACTS_PAGE_SIZE}&page={page}",
            context="artifacts",
        )
        items = require_list(payload, "artifacts", context="artifacts")
        out.extend(_parse_artifact(item) for item in items)
        if len(items) < ARTIFACTS_PAGE_SIZE:
            return out
        page += 1


def match_artifacts(artifacts: List[CIArtifact], commit: ResolvedCommit) -> List[CIArtifact]:
    """Keep artifacts whose triggering head sha starts with the resolved commit."""
    if not commit.sha:
        # An empty prefix would match every artifact.
        raise ResponseShapeError("Resolved commit is empty; refusing to match artifacts")
    return [artifact for artifact in artifacts if artifact.head_sha.startswith(commit.sha)]


def fetch_check_suite_id(client: GitHubClient, ref: ReleaseReference, artifact: CIArtifact) -> int:
    run = client.get_json(
        ref.owner,
        ref.repo,
        f"actions/runs/{artifact.workflow_run_id}",
        context="workflow run",
    )
    return require_int(run, "check_suite", "id", context="workflow run")


def locate_artifacts(
    client: GitHubClient,
    ref: ReleaseReference,
    commit: ResolvedCommit,
    *,
    all_pages: bool = False,
) -> List[LocatedArtifact]:
    artifacts = list_artifacts(client, ref, all_pages=all_pages)
    matched = match_artifacts(artifacts, commit)
    logger.info("%d of %d artifacts match commit %s", len(matched), len(artifacts), commit.sha)
    if not matched:
        raise NoEvidenceError("No artifacts found for the commit")

    return [
        LocatedArtifact(index=index, artifact=artifact, check_suite_id=fetch_check_suite_id(client, ref, artifact))
        for index, artifact in enumerate(matched)
    ]
