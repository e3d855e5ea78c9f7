"""Local copy of the archive's package index."""

from __future__ import annotations

import gzip
import shutil
from logging import getLogger
from typing import TYPE_CHECKING, Final

from dualsync.domain.errors import FetchError

if TYPE_CHECKING:
    from pathlib import Path

    from dualsync.config.archive import ArchiveConfig

    from .distribution import ArchiveWorkspace
    from .transport import DownloadTransport

log = getLogger(__name__)

INDEX_FILENAME: Final[str] = "02packages.details.txt"


class PackageIndexLoader:
    """Downloads and decompresses the package index on demand."""

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

    @property
    def index_path(self) -> Path:
        return self._workspace.root / INDEX_FILENAME

    def ensure(self, *, force: bool = False) -> Path:
        index = self.index_path
        if index.is_file() and index.stat().st_size > 0 and not force:
            log.debug("Using cached package index %s", index)
            return index

        compressed = index.with_name(f"{INDEX_FILENAME}.gz")
        compressed.unlink(missing_ok=True)
        url = self._config.package_index_url
        log.info("Fetching %s", url)
        try:
            self._transport.download(url, compressed)
            with gzip.open(compressed, "rb") as source, index.open("wb") as target:
                shutil.copyfileobj(source, target)
        except (OSError, EOFError) as exc:
            index.unlink(missing_ok=True)
            raise FetchError(f"failed to unpack package index: {exc}") from exc
        except FetchError:
            index.unlink(missing_ok=True)
            raise
        finally:
            compressed.unlink(missing_ok=True)
        return index

    def load(self, *, force: bool = False) -> list[str]:
        with self.ensure(force=force).open(encoding="utf-8", errors="replace") as handle:
            return handle.readlines()
