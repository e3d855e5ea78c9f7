"""Application configuration helpers."""

from __future__ import annotations

from .archive import ArchiveConfig, HttpConfig, get_archive_config
from .diff import DiffConfig, get_diff_config
from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingCacheDirectoryError, MissingConfigurationError
from .logging import configure_logging
from .registry import RegistryConfig, get_registry_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ArchiveConfig",
    "ConfigurationError",
    "DiffConfig",
    "HttpConfig",
    "MissingCacheDirectoryError",
    "MissingConfigurationError",
    "RegistryConfig",
    "StorageConfig",
    "configure_logging",
    "get_archive_config",
    "get_diff_config",
    "get_registry_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
