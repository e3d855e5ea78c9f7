"""Error taxonomy shared by the reconciliation and crosscheck workflows."""

from __future__ import annotations


class DualSyncError(RuntimeError):
    """Base class for all dualsync failures."""


class UsageError(DualSyncError, ValueError):
    """Raised for invalid command-line option combinations."""


class RegistryIntegrityError(DualSyncError):
    """Raised when the module registry is inconsistent with the request."""


class UnknownModuleError(RegistryIntegrityError):
    def __init__(self, module: str) -> None:
        super().__init__(f"{module} is not known to the module registry")
        self.module = module


class MissingDistributionError(RegistryIntegrityError):
    def __init__(self, module: str) -> None:
        super().__init__(f"{module} is dual-life but has no distribution recorded")
        self.module = module


class NotDualLifeError(DualSyncError):
    """Raised when a module is not mirrored on the package archive."""

    def __init__(self, module: str) -> None:
        super().__init__(f"{module} is not a dual-life module, skipping")
        self.module = module


class FetchError(DualSyncError):
    """Raised when a distribution cannot be downloaded or extracted."""


class MissingManifestError(DualSyncError):
    """Raised when an extracted archive lacks its MANIFEST file."""


class DiffError(DualSyncError):
    """Raised when the external line-diff command fails."""
