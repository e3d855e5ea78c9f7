"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TextIO

from dualsync.adapters.diff import CommandLineDiffer
from dualsync.adapters.distribution import ArchiveDistributionFetcher, ArchiveWorkspace
from dualsync.adapters.package_index import PackageIndexLoader
from dualsync.adapters.transport import build_transport
from dualsync.config import get_archive_config, get_diff_config, get_storage_config
from dualsync.domain.crosscheck import CrossChecker, CrosscheckFinding
from dualsync.domain.reconciliation import CompareOptions, ReconciliationResult, Reconciler
from dualsync.domain.report import ReportWriter

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from dualsync.adapters.transport import DownloadTransport
    from dualsync.config import ArchiveConfig, StorageConfig
    from dualsync.domain.ports import LineDiffer, ModuleRegistry

log = getLogger(__name__)


def all_dual_life_modules(registry: ModuleRegistry) -> list[str]:
    """Every dual-life module, sorted case-insensitively."""

    return sorted(registry.dual_life_modules(), key=lambda name: (name.lower(), name))


def compare_modules(
    modules: Sequence[str],
    *,
    registry: ModuleRegistry,
    core_root: Path,
    output: TextIO,
    options: CompareOptions | None = None,
    diff_options: str | None = None,
    storage: StorageConfig | None = None,
    archive: ArchiveConfig | None = None,
    transport: DownloadTransport | None = None,
    differ: LineDiffer | None = None,
) -> list[ReconciliationResult]:
    """Compare each module's published distribution with the core tree."""

    effective_options = options or CompareOptions()
    archive_config = archive or get_archive_config()
    effective_transport = transport or build_transport(archive_config)
    effective_differ = differ
    if effective_options.use_diff and effective_differ is None:
        effective_differ = CommandLineDiffer(get_diff_config(options=diff_options))

    log.info("Comparing %s module(s) against %s", len(modules), core_root)
    with ArchiveWorkspace(storage or get_storage_config()) as workspace:
        fetcher = ArchiveDistributionFetcher(
            workspace=workspace,
            transport=effective_transport,
            config=archive_config,
        )
        reconciler = Reconciler(
            registry=registry,
            fetcher=fetcher,
            core_root=core_root,
            report=ReportWriter(
                output,
                verbose=effective_options.verbose,
                diff_only=effective_options.use_diff,
            ),
            differ=effective_differ,
            options=effective_options,
        )
        return reconciler.run(modules)


def crosscheck_modules(
    modules: Sequence[str],
    *,
    registry: ModuleRegistry,
    output: TextIO,
    force: bool = False,
    storage: StorageConfig | None = None,
    archive: ArchiveConfig | None = None,
    transport: DownloadTransport | None = None,
) -> list[CrosscheckFinding]:
    """Check recorded distributions against the archive's package index."""

    archive_config = archive or get_archive_config()
    effective_transport = transport or build_transport(archive_config)

    log.info("Cross-checking %s module(s) against %s", len(modules), archive_config.mirror_url)
    with ArchiveWorkspace(storage or get_storage_config()) as workspace:
        loader = PackageIndexLoader(
            workspace=workspace,
            transport=effective_transport,
            config=archive_config,
        )
        checker = CrossChecker(registry=registry, index_source=loader, report=ReportWriter(output))
        return checker.run(modules, force=force)
