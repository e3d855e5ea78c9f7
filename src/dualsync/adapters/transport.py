"""Download strategies: the httpx client or an external command."""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

import httpx

from dualsync.adapters.http_client import ArchiveClient
from dualsync.domain.errors import FetchError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from dualsync.config.archive import ArchiveConfig, HttpConfig

log = getLogger(__name__)


class DownloadTransport(Protocol):
    def download(self, url: str, destination: Path) -> None:
        """Fetch ``url`` into ``destination`` or raise ``FetchError``."""
        ...


def _default_client_factory(config: HttpConfig) -> ArchiveClient:
    return ArchiveClient(config)


@dataclass(slots=True)
class HttpDownloadTransport:
    config: HttpConfig
    client_factory: Callable[[HttpConfig], ArchiveClient] = field(
        default=_default_client_factory
    )

    def download(self, url: str, destination: Path) -> None:
        try:
            asyncio.run(self._download_async(url, destination))
        except (httpx.HTTPError, OSError) as exc:
            raise FetchError(f"failed to download {url}: {exc}") from exc

    async def _download_async(self, url: str, destination: Path) -> None:
        async with self.client_factory(self.config) as client:
            await client.download(url, destination)


@dataclass(frozen=True, slots=True)
class CommandDownloadTransport:
    """Runs an external downloader such as ``curl`` or ``wget``.

    Arguments may contain ``{url}`` and ``{destination}`` placeholders; when
    neither appears, the URL and destination are appended in that order.
    """

    command: tuple[str, ...]

    def build_argv(self, url: str, destination: Path) -> list[str]:
        joined = " ".join(self.command)
        if "{url}" not in joined and "{destination}" not in joined:
            return [*self.command, url, str(destination)]
        return [arg.format(url=url, destination=destination) for arg in self.command]

    def download(self, url: str, destination: Path) -> None:
        argv = self.build_argv(url, destination)
        log.debug("Running %s", argv)
        try:
            completed = subprocess.run(  # noqa: S603
                argv, capture_output=True, text=True, check=False
            )
        except OSError as exc:
            raise FetchError(f"cannot run {argv[0]}: {exc}") from exc
        if completed.returncode != 0:
            detail = completed.stderr.strip() or f"exit status {completed.returncode}"
            raise FetchError(f"failed to download {url}: {detail}")


def build_transport(config: ArchiveConfig) -> DownloadTransport:
    """Select the download strategy once, from configuration."""

    if config.fetch_command:
        log.info("Using external download command %s", config.fetch_command[0])
        return CommandDownloadTransport(config.fetch_command)
    return HttpDownloadTransport(config.http)
