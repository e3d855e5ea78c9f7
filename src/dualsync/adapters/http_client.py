"""Async HTTP client for package archive downloads."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict

import httpx

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from httpx._types import HeaderTypes, TimeoutTypes

    from dualsync.config.archive import HttpConfig

log = getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    follow_redirects: bool
    transport: httpx.AsyncBaseTransport


class ArchiveClient:
    """Thin wrapper around ``httpx.AsyncClient`` that streams responses to disk."""

    def __init__(
        self,
        config: HttpConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "follow_redirects": config.follow_redirects,
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers is not None:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ArchiveClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def download(self, url: str, destination: Path) -> int:
        """Stream ``url`` into ``destination`` and return the number of bytes written."""

        written = 0
        async with self._client.stream("GET", url) as response:
            response.raise_for_status()
            with destination.open("wb") as handle:
                async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                    handle.write(chunk)
                    written += len(chunk)
        log.debug("Downloaded %s bytes from %s", written, url)
        return written
