"""Module registry location."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import optional_env_var, require_env_var


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    path: Path
    core_root: Path


def get_registry_config(
    *,
    path: Path | str | None = None,
    core_root: Path | str | None = None,
) -> RegistryConfig:
    registry_path = Path(path) if path is not None else Path(require_env_var("DUALSYNC_REGISTRY"))
    root = core_root if core_root is not None else optional_env_var("DUALSYNC_CORE_ROOT")
    return RegistryConfig(
        path=registry_path.expanduser(),
        core_root=Path(root).expanduser() if root is not None else Path.cwd(),
    )
