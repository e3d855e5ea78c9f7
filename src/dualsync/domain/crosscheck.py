"""Cross-check recorded distributions against the archive's package index."""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .errors import MissingDistributionError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from .model import ModuleRecord
    from .ports import ModuleRegistry, PackageIndexSource
    from .report import ReportWriter

log = getLogger(__name__)

_AUTHOR_PREFIX_RE: Final = re.compile(r"^[A-Z]/[A-Z]{2}/")
_ARCHIVE_EXTENSION: Final = r"\.(?:tar\.gz|tar\.bz2|tar\.xz|tar\.Z|tgz|tbz|zip)"
_VERSIONED_SUFFIX_RE: Final = re.compile(
    rf"-v?\d[\d._]*(?:-TRIAL\d*)?{_ARCHIVE_EXTENSION}$"
)
_BARE_SUFFIX_RE: Final = re.compile(rf"{_ARCHIVE_EXTENSION}$")


def normalize_distribution_path(path: str) -> str:
    """Strip the ``A/AU/`` directory levels in front of the author directory."""

    return _AUTHOR_PREFIX_RE.sub("", path, count=1)


def distribution_base_name(path: str) -> str:
    """Return the distribution name without directories, version or extension.

    ``A/AU/AUTHOR/Foo-Bar-1.02.tar.gz`` becomes ``Foo-Bar``.
    """

    name = path.rsplit("/", 1)[-1]
    stripped = _VERSIONED_SUFFIX_RE.sub("", name, count=1)
    if stripped == name:
        stripped = _BARE_SUFFIX_RE.sub("", name, count=1)
    return stripped


@dataclass(frozen=True, slots=True)
class PackageIndex:
    by_module: Mapping[str, str]
    by_base_name: Mapping[str, tuple[str, ...]]

    def candidates(self, module: str, recorded: str) -> tuple[str, ...]:
        """Distributions that may currently provide ``module``."""

        current = self.by_module.get(module)
        if current is not None:
            return (current,)
        return self.by_base_name.get(distribution_base_name(recorded), ())


def parse_package_index(
    lines: Iterable[str],
    *,
    warn: Callable[[str], None] | None = None,
) -> PackageIndex:
    """Parse the package index: a header block, a blank line, then 3-column records."""

    by_module: dict[str, str] = {}
    by_base_name: defaultdict[str, set[str]] = defaultdict(set)
    in_header = True

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if in_header:
            if not line.strip():
                in_header = False
            continue
        fields = line.split()
        if len(fields) != 3:
            message = f"malformed package index line {line_number}: {line!r}"
            log.debug(message)
            if warn is not None:
                warn(message)
            continue
        module, _version, path = fields
        distribution = normalize_distribution_path(path)
        by_module[module] = distribution
        by_base_name[distribution_base_name(distribution)].add(distribution)

    return PackageIndex(
        by_module=by_module,
        by_base_name={name: tuple(sorted(paths)) for name, paths in by_base_name.items()},
    )


class Verdict(StrEnum):
    SKIPPED = "skipped"
    UNRESOLVED = "unresolved"
    AMBIGUOUS = "ambiguous"
    MISMATCH = "mismatch"
    MATCH = "match"


@dataclass(frozen=True, slots=True)
class CrosscheckFinding:
    module: str
    verdict: Verdict
    recorded: str | None = None
    candidates: tuple[str, ...] = ()

    @property
    def current(self) -> str | None:
        if len(self.candidates) == 1:
            return self.candidates[0]
        return None


class CrossChecker:
    """Reports modules whose recorded distribution is no longer the published one."""

    def __init__(
        self,
        *,
        registry: ModuleRegistry,
        index_source: PackageIndexSource,
        report: ReportWriter,
    ) -> None:
        self._registry = registry
        self._index_source = index_source
        self._report = report

    def run(self, module_names: Sequence[str], *, force: bool = False) -> list[CrosscheckFinding]:
        records = self._validate(module_names)
        index = parse_package_index(
            self._index_source.load(force=force),
            warn=self._report.warning,
        )
        findings = [self._check(record, index) for record in records]
        for finding in findings:
            self._report_finding(finding)
        return findings

    def _validate(self, module_names: Sequence[str]) -> list[ModuleRecord]:
        records: list[ModuleRecord] = []
        for module in module_names:
            record = self._registry.get(module)
            if record.dual_life and not record.distribution_id:
                raise MissingDistributionError(module)
            records.append(record)
        return records

    def _check(self, record: ModuleRecord, index: PackageIndex) -> CrosscheckFinding:
        if not record.dual_life or record.distribution_id is None:
            return CrosscheckFinding(record.name, Verdict.SKIPPED)

        recorded = record.distribution_id
        candidates = index.candidates(record.name, recorded)
        if not candidates:
            verdict = Verdict.UNRESOLVED
        elif len(candidates) > 1:
            verdict = Verdict.AMBIGUOUS
        elif candidates[0] != recorded:
            verdict = Verdict.MISMATCH
        else:
            verdict = Verdict.MATCH
        return CrosscheckFinding(record.name, verdict, recorded=recorded, candidates=candidates)

    def _report_finding(self, finding: CrosscheckFinding) -> None:
        module = finding.module
        if finding.verdict is Verdict.SKIPPED:
            self._report.line(f"{module}: skipping, not a dual-life module")
        elif finding.verdict is Verdict.UNRESOLVED:
            self._report.line(f"{module}: cannot determine current archive distribution")
        elif finding.verdict is Verdict.AMBIGUOUS:
            listed = ", ".join(finding.candidates)
            self._report.line(f"{module}: ambiguous archive distribution: {listed}")
        elif finding.verdict is Verdict.MISMATCH:
            self._report.line(
                f"{module}: registry has {finding.recorded}, archive index has {finding.current}"
            )
