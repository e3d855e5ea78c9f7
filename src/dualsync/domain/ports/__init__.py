"""Domain port definitions for adapters."""

from __future__ import annotations

from .diffing import LineDiffer
from .fetching import DistributionFetcher, PackageIndexSource
from .registry import ModuleRegistry

__all__ = [
    "DistributionFetcher",
    "LineDiffer",
    "ModuleRegistry",
    "PackageIndexSource",
]
