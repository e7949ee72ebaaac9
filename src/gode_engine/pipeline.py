"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from gode_engine.config import GodeCheckConfig
from gode_engine.digest import compare_files
from gode_engine.github import GitHubClient
from gode_engine.locator import locate_artifacts
from gode_engine.models import (
    ComparisonResult,
    LocatedArtifact,
    ReleaseAsset,
    ReleaseReference,
    ResolvedCommit,
    RetrievedArtifact,
    VerificationReport,
)
from gode_engine.resolver import resolve_commit
from gode_engine.retriever import (
    download_release_asset,
    fetch_release_assets,
    prepare_scratch,
    retrieve_artifact,
    select_release_asset,
)

logger = logging.getLogger(__name__)


class PipelineObserver:
    """Progress hooks; the default implementation ignores every event."""

    def commit_resolved(self, commit: ResolvedCommit) -> None:
        pass

    def artifacts_located(self, located: List[LocatedArtifact]) -> None:
        pass

    def artifact_downloading(self, located: LocatedArtifact, total: int) -> None:
        pass

    def release_downloading(self, asset: ReleaseAsset) -> None:
        pass

    def artifact_comparing(self, retrieved: RetrievedArtifact, total: int) -> None:
        pass

    def comparison_made(self, result: ComparisonResult, file_count: int) -> None:
        pass


def run_verification(
    ref: ReleaseReference,
    *,
    config: GodeCheckConfig,
    client: Optional[GitHubClient] = None,
    provided_commit: Optional[str] = None,
    observer: Optional[PipelineObserver] = None,
) -> VerificationReport:
    """
    Resolve, locate, retrieve and compare for one release.

    Any GodeCheckError aborts the run; a digest mismatch does not.
    """
    client = client or GitHubClient(config)
    observer = observer or PipelineObserver()

    assets = fetch_release_assets(client, ref)

    commit = resolve_commit(client, ref, provided_commit=provided_commit)
    observer.commit_resolved(commit)
    report = VerificationReport(reference=ref, commit=commit)

    located = locate_artifacts(client, ref, commit, all_pages=config.all_pages)
    observer.artifacts_located(located)

    artifact_dir, release_dir = prepare_scratch(config.scratch_root)
    for item in located:
        observer.artifact_downloading(item, len(located))
        report.artifacts.append(retrieve_artifact(client, ref, item, artifact_dir))

    asset = select_release_asset(assets, config.package_extension)
    observer.release_downloading(asset)
    report.release_asset = asset
    report.release_path = download_release_asset(client, asset, release_dir)

    for retrieved in report.artifacts:
        observer.artifact_comparing(retrieved, len(report.artifacts))
        for artifact_file in retrieved.files:
            result = compare_files(
                retrieved.located.index,
                artifact_file,
                report.release_path,
                file_name=retrieved.relative_name(artifact_file),
            )
            report.comparisons.append(result)
            observer.comparison_made(result, len(retrieved.files))

    logger.info(
        "Compared %d file(s) across %d artifact(s); all matched=%s",
        len(report.comparisons),
        len(report.artifacts),
        report.all_matched,
    )
    return report
