from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

from fakes import ASSET_URL, PROXY, FakeResponse, make_zip
from gode_engine.errors import NoEvidenceError, ScratchError
from gode_engine.models import CIArtifact, LocatedArtifact, ReleaseAsset, ReleaseReference
from gode_engine.retriever import (
    download_release_asset,
    prepare_scratch,
    retrieve_artifact,
    safe_extract_zip,
    select_release_asset,
    unpack_artifact,
)

REF = ReleaseReference(owner="owner", repo="repo", tag="v1.0.0")


def _located(index: int = 0, artifact_id: int = 42, suite_id: int = 4200) -> LocatedArtifact:
    return LocatedArtifact(
        index=index,
        artifact=CIArtifact(id=artifact_id, name="Build Output", workflow_run_id=7, head_sha="abc"),
        check_suite_id=suite_id,
    )


def test_prepare_scratch_recreates_tree(tmp_path: Path) -> None:
    root = tmp_path / "gode-check"
    (root / "artifact" / "0").mkdir(parents=True)
    (root / "artifact" / "0" / "stale.geode").write_bytes(b"old")

    artifact_dir, release_dir = prepare_scratch(root)

    assert artifact_dir == root / "artifact"
    assert release_dir == root / "release"
    assert artifact_dir.is_dir() and release_dir.is_dir()
    assert list(artifact_dir.iterdir()) == []


def test_prepare_scratch_reports_creation_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(ScratchError, match="Failed to create temporary directory"):
        prepare_scratch(blocker / "gode-check")


def test_prepare_scratch_refuses_directory_with_foreign_entries(tmp_path: Path) -> None:
    root = tmp_path / "gode-check"
    (root / "artifact").mkdir(parents=True)
    (root / "thesis.tex").write_text("chapter one", encoding="utf-8")

    with pytest.raises(ScratchError, match=r"Refusing to clean temporary directory .*thesis\.tex"):
        prepare_scratch(root)

    assert (root / "thesis.tex").read_text(encoding="utf-8") == "chapter one"


def test_unpack_artifact_keeps_only_package_files(tmp_path: Path) -> None:
    payload = make_zip(
        {
            "owner.repo.geode": b"pkg",
            "nested/other.geode": b"pkg2",
            "README.md": b"docs",
        }
    )

    files = unpack_artifact(payload, tmp_path, ".geode")

    assert [path.name for path in files] == ["other.geode", "owner.repo.geode"]
    assert (tmp_path / "README.md").read_bytes() == b"docs"
    assert (tmp_path / "nested" / "other.geode").read_bytes() == b"pkg2"


def test_unpack_artifact_rejects_non_zip(tmp_path: Path) -> None:
    with pytest.raises(ScratchError, match="Error reading zip archive"):
        unpack_artifact(b"this is not a zip", tmp_path, ".geode")


def _deflated_zip(name: str, data: bytes) -> bytearray:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(name, data)
    return bytearray(buffer.getvalue())


def test_unpack_artifact_reports_corrupt_compressed_data(tmp_path: Path) -> None:
    payload = _deflated_zip("owner.repo.geode", bytes(range(256)) * 64)
    # Local header is 30 bytes plus the name; scramble the deflate stream after it.
    start = 30 + len("owner.repo.geode")
    for offset in range(start + 2, start + 40):
        payload[offset] ^= 0xFF

    with pytest.raises(ScratchError, match="zip archive"):
        unpack_artifact(bytes(payload), tmp_path / "out", ".geode")


def test_unpack_artifact_reports_encrypted_member(tmp_path: Path) -> None:
    payload = bytearray(make_zip({"owner.repo.geode": b"pkg"}))
    # Bit 0 of the central directory flags marks the member as encrypted.
    central = payload.index(b"PK\x01\x02")
    payload[central + 8] |= 0x01

    with pytest.raises(ScratchError, match="Error extracting zip archive: .*encrypted"):
        unpack_artifact(bytes(payload), tmp_path / "out", ".geode")


def test_safe_extract_rejects_parent_traversal(tmp_path: Path) -> None:
    dest = tmp_path / "dest"
    dest.mkdir()
    archive = tmp_path / "evil.zip"
    archive.write_bytes(make_zip({"../evil.geode": b"x"}))

    with zipfile.ZipFile(archive) as zf:
        with pytest.raises(ScratchError, match="unsafe zip member path"):
            safe_extract_zip(zf, dest)

    assert not (tmp_path / "evil.geode").exists()


def test_retrieve_artifact_downloads_through_proxy(make_client, config) -> None:
    url = f"{PROXY}/suites/4200/artifacts/42"
    client = make_client({url: FakeResponse(body=make_zip({"owner.repo.geode": b"bytes"}))})
    artifact_dir, _ = prepare_scratch(config.scratch_root)

    retrieved = retrieve_artifact(client, REF, _located(index=3), artifact_dir)

    assert retrieved.directory == (artifact_dir / "3").resolve()
    assert [path.name for path in retrieved.files] == ["owner.repo.geode"]
    assert client.session.urls() == [url]


def test_select_release_asset_takes_first_package_asset() -> None:
    assets = [
        ReleaseAsset(name="checksums.txt", download_url="https://x/1"),
        ReleaseAsset(name="a.geode", download_url="https://x/2"),
        ReleaseAsset(name="b.geode", download_url="https://x/3"),
    ]
    assert select_release_asset(assets, ".geode").name == "a.geode"


def test_select_release_asset_without_package_is_fatal() -> None:
    with pytest.raises(NoEvidenceError, match="No .geode file found in the release"):
        select_release_asset([ReleaseAsset(name="source.zip", download_url="https://x")], ".geode")


def test_download_release_asset_writes_basename_only(make_client, config) -> None:
    client = make_client({ASSET_URL: FakeResponse(body=b"release-bytes")})
    _, release_dir = prepare_scratch(config.scratch_root)

    path = download_release_asset(
        client,
        ReleaseAsset(name="../../owner.repo.geode", download_url=ASSET_URL),
        release_dir,
    )

    assert path == release_dir / "owner.repo.geode"
    assert path.read_bytes() == b"release-bytes"
