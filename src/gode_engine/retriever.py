"""
gode-check
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import io
import logging
import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import List, Sequence, Tuple

from gode_engine.config import GodeCheckConfig
from gode_engine.errors import NoEvidenceError, ScratchError
from gode_engine.github import GitHubClient, require_list, require_str
from gode_engine.models import LocatedArtifact, ReleaseAsset, ReleaseReference, RetrievedArtifact

logger = logging.getLogger(__name__)

ARTIFACT_DIR_NAME = "artifact"
RELEASE_DIR_NAME = "release"


def _foreign_entries(scratch_root: Path) -> List[str]:
    if not scratch_root.is_dir():
        return []
    owned = {ARTIFACT_DIR_NAME, RELEASE_DIR_NAME}
    return sorted(entry.name for entry in scratch_root.iterdir() if entry.name not in owned)


def prepare_scratch(scratch_root: Path) -> Tuple[Path, Path]:
    """Destroy any previous scratch tree and create fresh artifact/ and release/ dirs."""
    if scratch_root.exists():
        foreign = _foreign_entries(scratch_root)
        if foreign:
            raise ScratchError(
                f"Refusing to clean temporary directory {scratch_root}: "
                f"it holds entries gode-check did not create ({', '.join(foreign)})"
            )
        try:
            shutil.rmtree(scratch_root)
        except OSError as exc:
            raise ScratchError(f"Failed to clean temporary directory: {exc}") from exc

    artifact_dir = scratch_root / ARTIFACT_DIR_NAME
    release_dir = scratch_root / RELEASE_DIR_NAME
    for label, path in (("temporary", scratch_root), ("artifact", artifact_dir), ("release", release_dir)):
        try:
            path.mkdir(parents=True)
        except OSError as exc:
            raise ScratchError(f"Failed to create {label} directory: {exc}") from exc
    logger.info("Scratch directories ready under %s", scratch_root)
    return artifact_dir, release_dir


def proxy_download_url(config: GodeCheckConfig, ref: ReleaseReference, located: LocatedArtifact) -> str:
    return (
        f"{config.proxy_base_url}/{ref.owner}/{ref.repo}"
        f"/suites/{located.check_suite_id}/artifacts/{located.artifact.id}"
    )


def _member_target(dest: Path, member_name: str) -> Path:
    posix_path = PurePosixPath(member_name)
    if posix_path.is_absolute():
        raise ScratchError(f"unsafe zip member path: {member_name}")

    parts = [part for part in posix_path.parts if part not in ("", ".")]
    if not parts or any(part == ".." for part in parts):
        raise ScratchError(f"unsafe zip member path: {member_name}")

    target = (dest / Path(*parts)).resolve()
    try:
        target.relative_to(dest)
    except ValueError as exc:
        raise ScratchError(f"unsafe zip member path: {member_name}") from exc
    return target


def safe_extract_zip(zf: zipfile.ZipFile, dest: Path) -> List[Path]:
    """Extract every member under dest, rejecting paths that would escape it."""
    dest_resolved = dest.resolve()
    extracted: List[Path] = []
    for member in zf.infolist():
        target = _member_target(dest_resolved, member.filename)
        if member.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        with zf.open(member) as src, target.open("wb") as out:
            shutil.copyfileobj(src, out)
        extracted.append(target)
    return extracted


def filter_package_files(paths: Sequence[Path], extension: str) -> List[Path]:
    return sorted(path for path in paths if path.name.endswith(extension))


def unpack_artifact(payload: bytes, dest: Path, extension: str) -> List[Path]:
    try:
        with zipfile.ZipFile(io.BytesIO(payload)) as zf:
            extracted = safe_extract_zip(zf, dest)
    except zipfile.BadZipFile as exc:
        raise ScratchError(f"Error reading zip archive: {exc}") from exc
    except ScratchError:
        raise
    except (OSError, zlib.error, RuntimeError, NotImplementedError, EOFError) as exc:
        raise ScratchError(f"Error extracting zip archive: {exc}") from exc
    return filter_package_files(extracted, extension)


def retrieve_artifact(
    client: GitHubClient,
    ref: ReleaseReference,
    located: LocatedArtifact,
    artifact_dir: Path,
) -> RetrievedArtifact:
    """Download one artifact archive through the proxy and unpack it into artifact/<index>/."""
    dest = artifact_dir / str(located.index)
    try:
        dest.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ScratchError(f"Failed to create artifact directory: {exc}") from exc

    url = proxy_download_url(client.config, ref, located)
    payload = client.get_bytes(url, context="artifact")
    files = unpack_artifact(payload, dest, client.config.package_extension)
    if not files:
        logger.warning(
            "Artifact %s contains no %s files",
            located.artifact.name,
            client.config.package_extension,
        )
    return RetrievedArtifact(located=located, directory=dest.resolve(), files=files)


def fetch_release_assets(client: GitHubClient, ref: ReleaseReference) -> List[ReleaseAsset]:
    release = client.get_json(ref.owner, ref.repo, f"releases/tags/{ref.tag}", context="release")
    return [
        ReleaseAsset(
            name=require_str(item, "name", context="release"),
            download_url=require_str(item, "browser_download_url", context="release"),
        )
        for item in require_list(release, "assets", context="release")
    ]


def select_release_asset(assets: Sequence[ReleaseAsset], extension: str) -> ReleaseAsset:
    for asset in assets:
        if asset.name.endswith(extension):
            return asset
    raise NoEvidenceError(f"No {extension} file found in the release")


def download_release_asset(client: GitHubClient, asset: ReleaseAsset, release_dir: Path) -> Path:
    payload = client.get_bytes(asset.download_url, context="release file")
    # Asset names come from the API; never let them pick a directory.
    target = release_dir / PurePosixPath(asset.name).name
    try:
        target.write_bytes(payload)
    except OSError as exc:
        raise ScratchError(f"Error saving release file: {exc}") from exc
    return target
