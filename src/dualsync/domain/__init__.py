"""Reconciliation core for dual-life modules.

The domain layer knows nothing about HTTP, archives on disk or the registry
file format. Adapters provide those capabilities through :mod:`.ports`.
"""

from __future__ import annotations

from .crosscheck import CrossChecker, CrosscheckFinding, PackageIndex, Verdict
from .mapping import Excluded, MappingRuleSet, derive_mapping_rules, map_path
from .model import LiteralExclusion, ModuleRecord, PatternExclusion
from .reconciliation import (
    CompareOptions,
    FileOutcome,
    FileStatus,
    ReconciliationResult,
    Reconciler,
)
from .report import ReportWriter

__all__ = [
    "CompareOptions",
    "CrossChecker",
    "CrosscheckFinding",
    "Excluded",
    "FileOutcome",
    "FileStatus",
    "LiteralExclusion",
    "MappingRuleSet",
    "ModuleRecord",
    "PackageIndex",
    "PatternExclusion",
    "ReconciliationResult",
    "Reconciler",
    "ReportWriter",
    "Verdict",
    "derive_mapping_rules",
    "map_path",
]
