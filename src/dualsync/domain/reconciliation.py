"""Reconciliation of a module's archive contents against the core tree.

For every file the distribution's MANIFEST lists, the archive path is mapped
into the core tree and classified; core files that no archive file maps onto
are reported as core-only. Results are streamed to a :class:`ReportWriter`
while they are computed and also returned as a :class:`ReconciliationResult`.
"""

from __future__ import annotations

import filecmp
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .errors import (
    DiffError,
    FetchError,
    MissingDistributionError,
    MissingManifestError,
    NotDualLifeError,
    RegistryIntegrityError,
)
from .manifest import read_manifest
from .mapping import Excluded, effective_mapping_rules, map_path

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .mapping import MappingRuleSet
    from .model import ModuleRecord
    from .ports import DistributionFetcher, LineDiffer, ModuleRegistry
    from .report import ReportWriter

log = getLogger(__name__)

PACKED_SUFFIX: Final[str] = ".packed"

IGNORABLE_FILES: Final = frozenset(
    {
        ".cvsignore",
        ".gitignore",
        ".mailmap",
        ".perlcriticrc",
        ".perltidyrc",
        ".travis.yml",
        "ANNOUNCE",
        "AUTHORS",
        "BUGS",
        "Build.PL",
        "CHANGELOG",
        "CHANGES",
        "CONTRIBUTING",
        "CONTRIBUTING.md",
        "COPYING",
        "CREDITS",
        "Changelog",
        "ChangeLog",
        "Changes",
        "Copying",
        "HISTORY",
        "INSTALL",
        "LICENCE",
        "LICENSE",
        "MANIFEST",
        "MANIFEST.SKIP",
        "META.json",
        "META.yml",
        "MYMETA.json",
        "MYMETA.yml",
        "Makefile.PL",
        "NEWS",
        "NOTES",
        "README",
        "README.md",
        "README.pod",
        "SIGNATURE",
        "THANKS",
        "TODO",
        "Todo",
        "cpanfile",
        "dist.ini",
        "ppport.h",
    }
)


class FileStatus(StrEnum):
    MODIFIED = "modified"
    UNCHANGED = "unchanged"
    EXCLUDED = "excluded"
    IGNORED = "ignored"
    ARCHIVE_ONLY = "archive_only"
    CORE_ONLY = "core_only"
    NEEDS_BUILD = "needs_build"
    MISSING_CORE = "missing_core"
    MISSING_ARCHIVE = "missing_archive"


MATCHED_STATUSES: Final = frozenset(
    {FileStatus.MODIFIED, FileStatus.UNCHANGED, FileStatus.NEEDS_BUILD}
)


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """Classification of one archive file, core file, or matched pair."""

    status: FileStatus
    archive_path: str | None = None
    core_path: str | None = None

    @property
    def changed(self) -> bool:
        return self.status is FileStatus.MODIFIED

    @property
    def paths(self) -> tuple[str, ...]:
        """The distinct paths involved, archive side first."""

        if self.archive_path is None or self.core_path is None:
            return tuple(path for path in (self.archive_path, self.core_path) if path is not None)
        if self.archive_path == self.core_path:
            return (self.archive_path,)
        return (self.archive_path, self.core_path)


@dataclass(slots=True)
class ReconciliationResult:
    module: str
    distribution_id: str
    outcomes: list[FileOutcome] = field(default_factory=list)

    def with_status(self, *statuses: FileStatus) -> list[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status in statuses]

    @property
    def matched(self) -> list[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status in MATCHED_STATUSES]

    @property
    def modified(self) -> list[FileOutcome]:
        return self.with_status(FileStatus.MODIFIED)

    @property
    def archive_only(self) -> list[FileOutcome]:
        return self.with_status(FileStatus.ARCHIVE_ONLY)

    @property
    def core_only(self) -> list[FileOutcome]:
        return self.with_status(FileStatus.CORE_ONLY)

    @property
    def excluded(self) -> list[FileOutcome]:
        return self.with_status(FileStatus.EXCLUDED)

    @property
    def ignored(self) -> list[FileOutcome]:
        return self.with_status(FileStatus.IGNORED)


@dataclass(frozen=True, slots=True)
class CompareOptions:
    use_diff: bool = False
    reverse: bool = False
    verbose: bool = False


@dataclass(slots=True)
class _ModuleContext:
    record: ModuleRecord
    rules: MappingRuleSet
    archive_root: Path
    known: frozenset[str]
    seen: set[str] = field(default_factory=set)


class Reconciler:
    """Compares distributions against the core tree, one module at a time."""

    def __init__(
        self,
        *,
        registry: ModuleRegistry,
        fetcher: DistributionFetcher,
        core_root: Path,
        report: ReportWriter,
        differ: LineDiffer | None = None,
        options: CompareOptions | None = None,
    ) -> None:
        self._registry = registry
        self._fetcher = fetcher
        self._core_root = Path(core_root)
        self._report = report
        self._differ = differ
        self._options = options or CompareOptions()
        if self._options.use_diff and differ is None:
            raise ValueError("Diff mode requires a line differ")
        self._seen_distributions: dict[str, str] = {}

    def run(self, module_names: Iterable[str]) -> list[ReconciliationResult]:
        """Reconcile each module in turn.

        Fetch failures and missing manifests are reported and the batch moves on
        to the next module. Registry integrity problems abort the run after the
        error has been written to the report.
        """

        results: list[ReconciliationResult] = []
        for module in module_names:
            try:
                results.append(self.reconcile(module))
            except NotDualLifeError as exc:
                self._report.heading(str(exc))
            except FetchError as exc:
                log.warning("Skipping %s: %s", module, exc)
                self._report.error(f"{module}: {exc}")
            except MissingManifestError as exc:
                self._report.warning(f"{module}: {exc}")
            except RegistryIntegrityError as exc:
                self._report.error(str(exc))
                raise
        return results

    def reconcile(self, module: str) -> ReconciliationResult:
        record = self._registry.get(module)
        if not record.dual_life:
            raise NotDualLifeError(module)
        distribution = record.distribution_id
        if not distribution:
            raise MissingDistributionError(module)

        self._report.heading(f"{module} - {distribution}")
        previous = self._seen_distributions.setdefault(distribution, module)
        if previous != module:
            self._report.warning(f"distribution {distribution} was already compared for {previous}")

        archive_root = self._fetcher.fetch(distribution)
        archive_files = read_manifest(archive_root)
        core_files = list(dict.fromkeys(self._registry.core_files(module)))

        context = _ModuleContext(
            record=record,
            rules=effective_mapping_rules(record, core_files),
            archive_root=archive_root,
            known=frozenset(core_files),
        )
        result = ReconciliationResult(module=module, distribution_id=distribution)

        for archive_path in archive_files:
            self._emit(result, self._classify(context, archive_path))

        for core_path in core_files:
            if core_path not in context.seen:
                self._emit(result, FileOutcome(FileStatus.CORE_ONLY, core_path=core_path))

        log.info(
            "Compared %s: modified=%s, archive_only=%s, core_only=%s",
            module,
            len(result.modified),
            len(result.archive_only),
            len(result.core_only),
        )
        return result

    def _emit(self, result: ReconciliationResult, outcome: FileOutcome) -> None:
        result.outcomes.append(outcome)
        self._report.outcome(outcome)

    def _classify(self, context: _ModuleContext, archive_path: str) -> FileOutcome:
        mapped = map_path(context.record.excluded, context.rules, archive_path)
        if isinstance(mapped, Excluded):
            return FileOutcome(FileStatus.EXCLUDED, archive_path=archive_path)

        if mapped in context.known:
            context.seen.add(mapped)
            return self._compare(context, archive_path, mapped)

        packed = mapped + PACKED_SUFFIX
        if packed in context.known:
            context.seen.add(packed)
            core_file = self._core_root / mapped
            if not core_file.exists() and (self._core_root / packed).exists():
                return FileOutcome(
                    FileStatus.NEEDS_BUILD, archive_path=archive_path, core_path=packed
                )
            return self._compare(context, archive_path, mapped)

        if archive_path in IGNORABLE_FILES:
            return FileOutcome(FileStatus.IGNORED, archive_path=archive_path)

        return FileOutcome(FileStatus.ARCHIVE_ONLY, archive_path=archive_path)

    def _compare(self, context: _ModuleContext, archive_path: str, core_path: str) -> FileOutcome:
        archive_file = context.archive_root / archive_path
        core_file = self._core_root / core_path
        if not archive_file.is_file():
            return FileOutcome(
                FileStatus.MISSING_ARCHIVE, archive_path=archive_path, core_path=core_path
            )
        if not core_file.is_file():
            return FileOutcome(
                FileStatus.MISSING_CORE, archive_path=archive_path, core_path=core_path
            )

        if filecmp.cmp(archive_file, core_file, shallow=False):
            return FileOutcome(FileStatus.UNCHANGED, archive_path=archive_path, core_path=core_path)

        if self._options.use_diff:
            self._show_diff(archive_file, core_file)
        return FileOutcome(FileStatus.MODIFIED, archive_path=archive_path, core_path=core_path)

    def _show_diff(self, archive_file: Path, core_file: Path) -> None:
        differ = self._differ
        if differ is None:
            raise ValueError("Diff mode requires a line differ")
        old, new = (core_file, archive_file) if self._options.reverse else (archive_file, core_file)
        try:
            self._report.diff(differ(old, new))
        except DiffError as exc:
            self._report.warning(str(exc))
