"""Package archive configuration values."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from dualsync import __version__

from .env import optional_env_var

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_MIRROR_URL: Final[str] = "https://www.cpan.org"
PACKAGE_INDEX_PATH: Final[str] = "modules/02packages.details.txt.gz"
AUTHORS_PATH: Final[str] = "authors/id"


def _default_headers() -> dict[str, str]:
    return {"User-Agent": f"dualsync/{__version__}"}


@dataclass(slots=True, frozen=True)
class HttpConfig:
    name: str
    base_url: str | None = None
    # downloads are not bounded in time
    timeout_seconds: float | None = None
    follow_redirects: bool = True
    default_headers: Mapping[str, str] | None = field(default_factory=_default_headers)


@dataclass(frozen=True, slots=True)
class ArchiveConfig:
    """Holds package archive mirror and download settings."""

    mirror_url: str = DEFAULT_MIRROR_URL
    fetch_command: tuple[str, ...] | None = None
    http: HttpConfig = field(default_factory=lambda: HttpConfig(name="archive"))

    def author_url(self, author_path: str) -> str:
        return f"{self.mirror_url.rstrip('/')}/{AUTHORS_PATH}/{author_path}"

    @property
    def package_index_url(self) -> str:
        return f"{self.mirror_url.rstrip('/')}/{PACKAGE_INDEX_PATH}"


def get_archive_config(*, http: HttpConfig | None = None) -> ArchiveConfig:
    """Build the archive configuration from the environment.

    ``DUALSYNC_FETCH_COMMAND`` switches downloads to an external command; its
    arguments may use ``{url}`` and ``{destination}`` placeholders.
    """

    mirror = optional_env_var("DUALSYNC_MIRROR_URL") or DEFAULT_MIRROR_URL
    command = optional_env_var("DUALSYNC_FETCH_COMMAND")
    return ArchiveConfig(
        mirror_url=mirror,
        fetch_command=tuple(shlex.split(command)) if command else None,
        http=http or HttpConfig(name="archive", base_url=mirror),
    )
