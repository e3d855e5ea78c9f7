"""Human-readable report output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, TextIO

from .reconciliation import PACKED_SUFFIX, FileStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .reconciliation import FileOutcome

WARNING_PREFIX: Final[str] = "WARNING:"
ERROR_PREFIX: Final[str] = "ERROR:"

STATUS_LABELS: Final[Mapping[FileStatus, str]] = {
    FileStatus.MODIFIED: "Modified:",
    FileStatus.UNCHANGED: "Unchanged:",
    FileStatus.EXCLUDED: "Excluded:",
    FileStatus.IGNORED: "Ignored:",
    FileStatus.ARCHIVE_ONLY: "Archive only:",
    FileStatus.CORE_ONLY: "Core only:",
}

VERBOSE_ONLY: Final = frozenset({FileStatus.UNCHANGED, FileStatus.EXCLUDED, FileStatus.IGNORED})
HIDDEN_IN_DIFF_MODE: Final = frozenset(
    {FileStatus.MODIFIED, FileStatus.ARCHIVE_ONLY, FileStatus.CORE_ONLY}
)


class ReportWriter:
    """Writes report lines to a text stream, filtering by verbosity and mode.

    ``diff_only`` suppresses the classification lines that a diff already
    conveys or that are not diffs at all. Warnings and errors are always
    written.
    """

    def __init__(self, stream: TextIO, *, verbose: bool = False, diff_only: bool = False) -> None:
        self._stream = stream
        self.verbose = verbose
        self.diff_only = diff_only

    def line(self, text: str) -> None:
        self._stream.write(f"{text}\n")

    def heading(self, text: str) -> None:
        self._stream.write(f"\n{text}\n")

    def warning(self, text: str) -> None:
        self.line(f"{WARNING_PREFIX} {text}")

    def error(self, text: str) -> None:
        self.line(f"{ERROR_PREFIX} {text}")

    def diff(self, text: str) -> None:
        if not text:
            return
        self._stream.write(text if text.endswith("\n") else f"{text}\n")

    def outcome(self, outcome: FileOutcome) -> None:
        status = outcome.status
        if status is FileStatus.NEEDS_BUILD:
            self.warning(
                f"{outcome.core_path} exists but {_unpacked(outcome.core_path)} does not; "
                "the core tree must be built to produce it"
            )
            return
        if status is FileStatus.MISSING_CORE:
            self.warning(f"core file {outcome.core_path} is missing")
            return
        if status is FileStatus.MISSING_ARCHIVE:
            self.warning(f"archive file {outcome.archive_path} is listed in MANIFEST but missing")
            return

        if status in VERBOSE_ONLY and not self.verbose:
            return
        if status in HIDDEN_IN_DIFF_MODE and self.diff_only:
            return
        label = STATUS_LABELS[status]
        self.line(f"    {label:<14}{' '.join(outcome.paths)}")


def _unpacked(path: str | None) -> str | None:
    if path is not None and path.endswith(PACKED_SUFFIX):
        return path[: -len(PACKED_SUFFIX)]
    return path
