"""Cache directory configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

ARCHIVES_DIRNAME: Final[str] = "archives"
EXTRACTED_DIRNAME: Final[str] = "extracted"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Where downloads and extracted archives live.

    ``cache_dir`` of ``None`` means a temporary directory per run.
    """

    cache_dir: Path | None = None
    archives_dirname: str = ARCHIVES_DIRNAME
    extracted_dirname: str = EXTRACTED_DIRNAME

    def resolve_cache_dir(self) -> Path | None:
        if self.cache_dir is None:
            return None
        return self.cache_dir.expanduser().resolve()


def get_storage_config(*, cache_dir: Path | str | None = None) -> StorageConfig:
    value = cache_dir if cache_dir is not None else optional_env_var("DUALSYNC_CACHE_DIR")
    return StorageConfig(cache_dir=Path(value) if value is not None else None)
