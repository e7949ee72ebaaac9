"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class ReleaseReference:
    owner: str
    repo: str
    tag: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ResolvedCommit:
    sha: str
    provided: bool = False


@dataclass(frozen=True)
class CIArtifact:
    id: int
    name: str
    workflow_run_id: int
    head_sha: str


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    download_url: str


@dataclass(frozen=True)
class LocatedArtifact:
    """A matched CI artifact paired with the check suite needed to download it."""

    index: int
    artifact: CIArtifact
    check_suite_id: int


@dataclass(frozen=True)
class RetrievedArtifact:
    located: LocatedArtifact
    directory: Path
    files: List[Path]

    def relative_name(self, path: Path) -> str:
        """POSIX path of an extracted file inside this artifact, e.g. `win/pkg.geode`."""
        try:
            return path.relative_to(self.directory).as_posix()
        except ValueError:
            return path.name


@dataclass(frozen=True)
class ComparisonResult:
    artifact_index: int
    file_name: str
    artifact_digest: str
    release_digest: str
    matched: bool


@dataclass
class VerificationReport:
    reference: ReleaseReference
    commit: ResolvedCommit
    artifacts: List[RetrievedArtifact] = field(default_factory=list)
    release_asset: Optional[ReleaseAsset] = None
    release_path: Optional[Path] = None
    comparisons: List[ComparisonResult] = field(default_factory=list)

    @property
    def all_matched(self) -> bool:
        return bool(self.comparisons) and all(item.matched for item in self.comparisons)

    def to_dict(self) -> dict:
        return {
            "reference": {
                "owner": self.reference.owner,
                "repo": self.reference.repo,
                "tag": self.reference.tag,
            },
            "commit": {"sha": self.commit.sha, "provided": self.commit.provided},
            "artifacts": [
                {
                    "index": item.located.index,
                    "id": item.located.artifact.id,
                    "name": item.located.artifact.name,
                    "workflow_run_id": item.located.artifact.workflow_run_id,
                    "head_sha": item.located.artifact.head_sha,
                    "check_suite_id": item.located.check_suite_id,
                    "directory": str(item.directory),
                    "files": [item.relative_name(path) for path in item.files],
                }
                for item in self.artifacts
            ],
            "release_asset": (
                {"name": self.release_asset.name, "download_url": self.release_asset.download_url}
                if self.release_asset
                else None
            ),
            "comparisons": [
                {
                    "artifact_index": item.artifact_index,
                    "file_name": item.file_name,
                    "artifact_sha256": item.artifact_digest,
                    "release_sha256": item.release_digest,
                    "matched": item.matched,
                }
                for item in self.comparisons
            ],
            "all_matched": self.all_matched,
        }
