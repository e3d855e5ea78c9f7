"""Downloading and extracting distribution archives."""

from __future__ import annotations

import lzma
import shutil
import tarfile
import tempfile
import zipfile
import zlib
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from dualsync.config.errors import MissingCacheDirectoryError
from dualsync.config.storage import StorageConfig
from dualsync.domain.errors import FetchError
from dualsync.domain.model import distribution_author_path, distribution_filename

if TYPE_CHECKING:
    from types import TracebackType

    from dualsync.config.archive import ArchiveConfig

    from .transport import DownloadTransport

log = getLogger(__name__)

# truncated or corrupt compressed streams surface as these rather than as TarError
_EXTRACTION_ERRORS = (
    shutil.ReadError,
    tarfile.TarError,
    zipfile.BadZipFile,
    EOFError,
    zlib.error,
    lzma.LZMAError,
    ValueError,
    OSError,
)

_ARCHIVE_SUFFIXES = (".tar.gz", ".tar.bz2", ".tar.xz", ".tgz", ".tbz", ".zip")


class ArchiveWorkspace:
    """Directory holding downloads and extracted archives for one run.

    A persistent cache directory must already exist; its extraction area is
    wiped on entry. Without one, a temporary directory is created and removed
    again on exit.
    """

    def __init__(self, storage: StorageConfig | None = None) -> None:
        self._storage = storage or StorageConfig()
        self._tempdir: tempfile.TemporaryDirectory[str] | None = None
        self._root: Path | None = None

    @property
    def root(self) -> Path:
        if self._root is None:
            raise RuntimeError("Workspace is not open")
        return self._root

    @property
    def archives_dir(self) -> Path:
        return self.root / self._storage.archives_dirname

    @property
    def extracted_dir(self) -> Path:
        return self.root / self._storage.extracted_dirname

    @property
    def is_temporary(self) -> bool:
        return self._tempdir is not None

    def __enter__(self) -> ArchiveWorkspace:
        cache_dir = self._storage.resolve_cache_dir()
        if cache_dir is None:
            self._tempdir = tempfile.TemporaryDirectory(prefix="dualsync-")
            self._root = Path(self._tempdir.name)
        else:
            if not cache_dir.is_dir():
                raise MissingCacheDirectoryError(cache_dir)
            self._root = cache_dir
            if self.extracted_dir.exists():
                log.debug("Clearing stale extraction directory %s", self.extracted_dir)
                shutil.rmtree(self.extracted_dir)

        self.archives_dir.mkdir(exist_ok=True)
        self.extracted_dir.mkdir(exist_ok=True)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self._tempdir is not None:
            self._tempdir.cleanup()
            self._tempdir = None
        self._root = None


class ArchiveDistributionFetcher:
    """Resolves distribution ids to extracted archive trees inside a workspace."""

    def __init__(
        self,
        *,
        workspace: ArchiveWorkspace,
        transport: DownloadTransport,
        config: ArchiveConfig,
    ) -> None:
        self._workspace = workspace
        self._transport = transport
        self._config = config

    def distribution_url(self, distribution_id: str) -> str:
        return self._config.author_url(distribution_author_path(distribution_id))

    def fetch(self, distribution_id: str) -> Path:
        try:
            url = self.distribution_url(distribution_id)
        except ValueError as exc:
            raise FetchError(str(exc)) from exc
        destination = self._workspace.archives_dir / distribution_filename(distribution_id)
        return self.extract(self.download(url, destination))

    def download(self, url: str, destination: Path) -> Path:
        """Download ``url`` unless a non-empty copy is already cached."""

        if destination.exists():
            if destination.stat().st_size > 0:
                log.debug("Using cached %s", destination)
                return destination
            log.info("Removing empty cached file %s", destination)
            destination.unlink()

        log.info("Fetching %s", url)
        try:
            self._transport.download(url, destination)
        except FetchError:
            destination.unlink(missing_ok=True)
            raise
        if not destination.is_file() or destination.stat().st_size == 0:
            destination.unlink(missing_ok=True)
            raise FetchError(f"download of {url} produced no data")
        return destination

    def extract(self, archive: Path) -> Path:
        target = self._workspace.extracted_dir / _archive_stem(archive.name)
        if target.exists():
            shutil.rmtree(target)
        log.debug("Extracting %s into %s", archive, target)
        # zip extraction takes no filter
        unpack_filter = None if archive.name.endswith(".zip") else "data"
        try:
            shutil.unpack_archive(archive, target, filter=unpack_filter)
        except _EXTRACTION_ERRORS as exc:
            log.info("Removing unreadable archive %s", archive)
            archive.unlink(missing_ok=True)
            shutil.rmtree(target, ignore_errors=True)
            raise FetchError(f"failed to extract {archive.name}: {exc}") from exc
        return _archive_root(target)


def _archive_stem(filename: str) -> str:
    for suffix in _ARCHIVE_SUFFIXES:
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return filename


def _archive_root(target: Path) -> Path:
    """Descend into the single top-level directory most archives wrap their files in."""

    entries = list(target.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return target
