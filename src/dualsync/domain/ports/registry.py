"""Read-only access to the module registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dualsync.domain.model import ModuleRecord


@runtime_checkable
class ModuleRegistry(Protocol):
    """Authoritative store of modules, their distributions and overrides."""

    def get(self, module: str) -> ModuleRecord:
        """Return the record for ``module`` or raise ``UnknownModuleError``."""
        ...

    def core_files(self, module: str) -> Sequence[str]:
        """Return the core-tree paths owned by ``module``."""
        ...

    def dual_life_modules(self) -> Sequence[str]:
        """Return the names of all modules flagged dual-life."""
        ...


__all__ = ["ModuleRegistry"]
