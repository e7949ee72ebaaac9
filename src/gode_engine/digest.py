"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Optional

from gode_engine.errors import ScratchError
from gode_engine.models import ComparisonResult

_CHUNK_BYTES = 1024 * 1024


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    try:
        with path.open("rb") as f:
            while True:
                chunk = f.read(_CHUNK_BYTES)
                if not chunk:
                    break
                h.update(chunk)
    except OSError as exc:
        raise ScratchError(f"Error opening {path}: {exc}") from exc
    return h.hexdigest()


def compare_files(
    artifact_index: int,
    artifact_file: Path,
    release_file: Path,
    *,
    file_name: Optional[str] = None,
) -> ComparisonResult:
    """
    Exact whole-file comparison; both sides are hashed from disk on every call.

    file_name labels the result and defaults to the artifact file's basename.
    """
    artifact_digest = sha256_file(artifact_file)
    release_digest = sha256_file(release_file)
    return ComparisonResult(
        artifact_index=artifact_index,
        file_name=file_name or artifact_file.name,
        artifact_digest=artifact_digest,
        release_digest=release_digest,
        matched=artifact_digest == release_digest,
    )
