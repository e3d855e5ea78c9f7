from __future__ import annotations

import io
import zipfile
from typing import TYPE_CHECKING

import pytest

from dualsync.adapters.distribution import ArchiveDistributionFetcher, ArchiveWorkspace
from dualsync.config.archive import ArchiveConfig
from dualsync.config.errors import ConfigurationError
from dualsync.config.storage import StorageConfig
from dualsync.domain.errors import FetchError
from tests.support.fetching import FakeTransport
from tests.support.trees import build_tarball

if TYPE_CHECKING:
    from pathlib import Path

MIRROR = "https://mirror.example"
DIST = "AUTHOR/Foo-Bar-1.02.tar.gz"
DIST_URL = f"{MIRROR}/authors/id/A/AU/AUTHOR/Foo-Bar-1.02.tar.gz"


def _fetcher(workspace: ArchiveWorkspace, transport: FakeTransport) -> ArchiveDistributionFetcher:
    return ArchiveDistributionFetcher(
        workspace=workspace,
        transport=transport,
        config=ArchiveConfig(mirror_url=MIRROR),
    )


def test_temporary_workspace_is_removed_on_exit() -> None:
    with ArchiveWorkspace() as workspace:
        root = workspace.root
        assert workspace.is_temporary
        assert workspace.archives_dir.is_dir()
        assert workspace.extracted_dir.is_dir()

    assert not root.exists()


def test_temporary_workspace_is_removed_after_failure() -> None:
    with pytest.raises(RuntimeError), ArchiveWorkspace() as workspace:
        root = workspace.root
        raise RuntimeError("boom")

    assert not root.exists()


def test_cache_workspace_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError), ArchiveWorkspace(StorageConfig(tmp_path / "missing")):
        pass


def test_cache_workspace_wipes_extraction_area(tmp_path: Path) -> None:
    stale = tmp_path / "extracted" / "Old-1.0" / "lib" / "Old.pm"
    stale.parent.mkdir(parents=True)
    stale.write_text("stale\n")
    cached = tmp_path / "archives" / "Keep-1.0.tar.gz"
    cached.parent.mkdir()
    cached.write_bytes(b"data")

    with ArchiveWorkspace(StorageConfig(tmp_path)) as workspace:
        assert not workspace.is_temporary
        assert list(workspace.extracted_dir.iterdir()) == []

    assert cached.exists()
    assert tmp_path.exists()


def test_distribution_url_uses_author_directories() -> None:
    with ArchiveWorkspace() as workspace:
        fetcher = _fetcher(workspace, FakeTransport({}))

        assert fetcher.distribution_url(DIST) == DIST_URL


def test_fetch_downloads_and_extracts(tmp_path: Path) -> None:
    tarball = build_tarball({"lib/Foo/Bar.pm": "package Foo::Bar;\n"}, top_dir="Foo-Bar-1.02")
    transport = FakeTransport({DIST_URL: tarball})

    with ArchiveWorkspace(StorageConfig(tmp_path)) as workspace:
        root = _fetcher(workspace, transport).fetch(DIST)

        assert root == workspace.extracted_dir / "Foo-Bar-1.02" / "Foo-Bar-1.02"
        assert (root / "lib" / "Foo" / "Bar.pm").read_text() == "package Foo::Bar;\n"
        assert (root / "MANIFEST").is_file()
    assert (tmp_path / "archives" / "Foo-Bar-1.02.tar.gz").read_bytes() == tarball


def test_cached_archive_is_reused(tmp_path: Path) -> None:
    archives = tmp_path / "archives"
    archives.mkdir()
    (archives / "Foo-Bar-1.02.tar.gz").write_bytes(
        build_tarball({"lib/Foo/Bar.pm": "cached\n"}, top_dir="Foo-Bar-1.02")
    )
    transport = FakeTransport({})

    with ArchiveWorkspace(StorageConfig(tmp_path)) as workspace:
        root = _fetcher(workspace, transport).fetch(DIST)
        assert (root / "lib" / "Foo" / "Bar.pm").read_text() == "cached\n"

    assert transport.urls == []


def test_empty_cached_archive_is_downloaded_again(tmp_path: Path) -> None:
    archives = tmp_path / "archives"
    archives.mkdir()
    (archives / "Foo-Bar-1.02.tar.gz").write_bytes(b"")
    tarball = build_tarball({"lib/Foo/Bar.pm": "fresh\n"}, top_dir="Foo-Bar-1.02")
    transport = FakeTransport({DIST_URL: tarball})

    with ArchiveWorkspace(StorageConfig(tmp_path)) as workspace:
        root = _fetcher(workspace, transport).fetch(DIST)
        assert (root / "lib" / "Foo" / "Bar.pm").read_text() == "fresh\n"

    assert transport.urls == [DIST_URL]


def test_failed_download_leaves_no_partial_file(tmp_path: Path) -> None:
    with ArchiveWorkspace(StorageConfig(tmp_path)) as workspace:
        with pytest.raises(FetchError, match="404"):
            _fetcher(workspace, FakeTransport({})).fetch(DIST)

        assert list(workspace.archives_dir.iterdir()) == []


def test_corrupt_archive_is_a_fetch_error() -> None:
    transport = FakeTransport({DIST_URL: b"this is not a tarball"})

    with ArchiveWorkspace() as workspace, pytest.raises(FetchError, match="extract"):
        _fetcher(workspace, transport).fetch(DIST)


def test_truncated_archive_is_a_fetch_error_and_leaves_no_cache(tmp_path: Path) -> None:
    tarball = build_tarball({"lib/Foo/Bar.pm": "1;\n" * 2000}, top_dir="Foo-Bar-1.02")
    transport = FakeTransport({DIST_URL: tarball[: len(tarball) // 2]})

    with ArchiveWorkspace(StorageConfig(tmp_path)) as workspace:
        with pytest.raises(FetchError, match="failed to extract"):
            _fetcher(workspace, transport).fetch(DIST)
        assert not (workspace.archives_dir / "Foo-Bar-1.02.tar.gz").exists()
        assert not (workspace.extracted_dir / "Foo-Bar-1.02").exists()


def test_truncated_cached_archive_is_downloaded_again(tmp_path: Path) -> None:
    tarball = build_tarball({"lib/Foo/Bar.pm": "1;\n" * 2000}, top_dir="Foo-Bar-1.02")
    (tmp_path / "archives").mkdir()
    (tmp_path / "archives" / "Foo-Bar-1.02.tar.gz").write_bytes(tarball[: len(tarball) // 2])
    transport = FakeTransport({DIST_URL: tarball})

    with ArchiveWorkspace(StorageConfig(tmp_path)) as workspace:
        fetcher = _fetcher(workspace, transport)
        with pytest.raises(FetchError):
            fetcher.fetch(DIST)
        root = fetcher.fetch(DIST)

        assert transport.urls == [DIST_URL]
        assert (root / "lib" / "Foo" / "Bar.pm").is_file()


def test_malformed_distribution_id_is_a_fetch_error() -> None:
    with ArchiveWorkspace() as workspace, pytest.raises(FetchError, match="Malformed"):
        _fetcher(workspace, FakeTransport({})).fetch("no-author.tar.gz")


def test_zip_archives_are_extracted() -> None:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("Foo-Bar-1.02/MANIFEST", "MANIFEST\n")
    url = f"{MIRROR}/authors/id/A/AU/AUTHOR/Foo-Bar-1.02.zip"

    with ArchiveWorkspace() as workspace:
        root = _fetcher(workspace, FakeTransport({url: buffer.getvalue()})).fetch(
            "AUTHOR/Foo-Bar-1.02.zip"
        )

        assert (root / "MANIFEST").read_text() == "MANIFEST\n"
