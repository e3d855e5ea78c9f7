"""MANIFEST file parsing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .errors import MissingManifestError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

MANIFEST_FILENAME: Final[str] = "MANIFEST"


def parse_manifest_line(line: str) -> str | None:
    """Return the path named on one MANIFEST line, ignoring trailing comments.

    Names containing whitespace are single-quoted, with ``\\\\`` and ``\\'``
    escapes.
    """

    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    if not stripped.startswith("'"):
        return stripped.split(None, 1)[0]

    chars: list[str] = []
    escaped = False
    for char in stripped[1:]:
        if escaped:
            chars.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "'":
            return "".join(chars)
        else:
            chars.append(char)
    # unterminated quote, fall back to the raw first token
    return stripped.split(None, 1)[0]


def parse_manifest(lines: Iterable[str]) -> list[str]:
    """Return manifest paths in order, keeping the first of any duplicates."""

    paths: dict[str, None] = {}
    for line in lines:
        path = parse_manifest_line(line)
        if path is not None:
            paths.setdefault(path, None)
    return list(paths)


def read_manifest(root: Path) -> list[str]:
    manifest = root / MANIFEST_FILENAME
    if not manifest.is_file():
        raise MissingManifestError(f"no {MANIFEST_FILENAME} found in {root}")
    with manifest.open(encoding="utf-8", errors="surrogateescape") as handle:
        return parse_manifest(handle)
