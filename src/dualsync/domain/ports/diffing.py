"""Port for producing textual line diffs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path


@runtime_checkable
class LineDiffer(Protocol):
    """Returns the line diff between two files, empty when they are equal."""

    def __call__(self, old: Path, new: Path) -> str:
        ...


__all__ = ["LineDiffer"]
