"""Line diffs through the external ``diff`` command."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dualsync.domain.errors import DiffError

if TYPE_CHECKING:
    from pathlib import Path

    from dualsync.config.diff import DiffConfig

# diff(1): 0 = identical, 1 = differences found, anything else = trouble
_DIFF_OK = frozenset({0, 1})


@dataclass(frozen=True, slots=True)
class CommandLineDiffer:
    config: DiffConfig

    def __call__(self, old: Path, new: Path) -> str:
        argv = [self.config.command, *self.config.options, str(old), str(new)]
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise DiffError(f"cannot run {self.config.command}: {exc}") from exc
        if completed.returncode not in _DIFF_OK:
            detail = completed.stderr.strip() or f"exit status {completed.returncode}"
            raise DiffError(f"{self.config.command} failed on {old} and {new}: {detail}")
        return completed.stdout
