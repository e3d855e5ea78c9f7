"""Domain records describing dual-life modules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class LiteralExclusion:
    """Excludes exactly one archive-relative path."""

    path: str

    def matches(self, path: str) -> bool:
        return path == self.path

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True, slots=True)
class PatternExclusion:
    """Excludes every archive-relative path the pattern finds a match in."""

    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, expression: str) -> PatternExclusion:
        return cls(re.compile(expression))

    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None

    def __str__(self) -> str:
        return f"/{self.pattern.pattern}/"


ExclusionRule: TypeAlias = LiteralExclusion | PatternExclusion


@dataclass(frozen=True, slots=True, kw_only=True)
class ModuleRecord:
    """Registry entry for one module, as seen by the reconciliation core."""

    name: str
    dual_life: bool = False
    distribution_id: str | None = None
    excluded: tuple[ExclusionRule, ...] = ()
    mapping_rules: Mapping[str, str] | None = None


def split_distribution_id(distribution_id: str) -> tuple[str, str]:
    """Split ``AUTHOR/filename`` into its author and the author-relative path."""

    author, sep, rest = distribution_id.partition("/")
    if not sep or not author or not rest:
        raise ValueError(f"Malformed distribution id: {distribution_id!r}")
    return author, rest


def distribution_author_path(distribution_id: str) -> str:
    """Return the archive path ``A/AU/AUTHOR/filename`` for a distribution id."""

    author, rest = split_distribution_id(distribution_id)
    return f"{author[0]}/{author[:2]}/{author}/{rest}"


def distribution_filename(distribution_id: str) -> str:
    return distribution_id.rsplit("/", 1)[-1]
