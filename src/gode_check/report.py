"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, TextIO

from gode_engine.errors import ScratchError
from gode_engine.models import (
    ComparisonResult,
    LocatedArtifact,
    ReleaseAsset,
    ResolvedCommit,
    RetrievedArtifact,
    VerificationReport,
)
from gode_engine.pipeline import PipelineObserver

RESET = "\033[0m"
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[0;33m"
BLUE = "\033[0;34m"
CYAN = "\033[0;36m"


def color_enabled(stream: TextIO, *, no_color: bool = False) -> bool:
    if no_color or os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class ConsoleReporter(PipelineObserver):
    """Human-readable progress and comparison output."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None, *, use_color: bool = True):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.use_color = use_color

    def _paint(self, color: str, text: str) -> str:
        if not self.use_color:
            return text
        return f"{color}{text}{RESET}"

    def _print(self, text: str) -> None:
        print(text, file=self.out)

    def error(self, message: str) -> None:
        print(self._paint(RED, message), file=self.err)

    def commit_resolved(self, commit: ResolvedCommit) -> None:
        if commit.provided:
            self._print(f"Using provided commit: {self._paint(CYAN, commit.sha)}")
        else:
            self._print(f"Release found for commit: {self._paint(CYAN, commit.sha)}")

    def artifacts_located(self, located: List[LocatedArtifact]) -> None:
        if len(located) > 1:
            self._print(self._paint(GREEN, f"{len(located)} artifacts for commit found!"))
        else:
            self._print(self._paint(GREEN, "Artifact for commit found!"))

    def artifact_downloading(self, located: LocatedArtifact, total: int) -> None:
        if total == 1:
            self._print("Downloading artifact...")
        else:
            self._print(f"Downloading artifact {located.index + 1}...")

    def release_downloading(self, asset: ReleaseAsset) -> None:
        self._print("Downloading release file...")

    def artifact_comparing(self, retrieved: RetrievedArtifact, total: int) -> None:
        if total > 1:
            index = retrieved.located.index + 1
            self._print(self._paint(YELLOW, f"Artifact {index} ({retrieved.located.artifact.name}):"))

    def comparison_made(self, result: ComparisonResult, file_count: int) -> None:
        label = f"{result.file_name} Comparison:" if file_count > 1 else "Comparison:"
        verdict = self._paint(GREEN, "✅ Match") if result.matched else self._paint(RED, "❌ Mismatch")
        self._print(f"{self._paint(BLUE, label)} {verdict}")
        self._print(f"Artifact hash: {self._paint(CYAN, result.artifact_digest)}")
        self._print(f"Release hash: {self._paint(CYAN, result.release_digest)}")


def write_report(report: VerificationReport, path: Path) -> None:
    payload = report.to_dict()
    payload["generated_at"] = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ScratchError(f"Error writing report {path}: {exc}") from exc
