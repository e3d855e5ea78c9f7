"""Ports for retrieving distributions and the package index."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


@runtime_checkable
class DistributionFetcher(Protocol):
    """Resolves a distribution id to the root of its extracted archive."""

    def fetch(self, distribution_id: str) -> Path:
        ...


@runtime_checkable
class PackageIndexSource(Protocol):
    """Supplies the lines of the archive's package index."""

    def load(self, *, force: bool = False) -> Iterable[str]:
        ...


__all__ = ["DistributionFetcher", "PackageIndexSource"]
