"""Errors raised while resolving dualsync configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class ConfigurationError(RuntimeError):
    """Raised when a configured value cannot be used."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")


class MissingCacheDirectoryError(ConfigurationError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Cache directory does not exist: {path}")
