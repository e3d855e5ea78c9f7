"""Translation of archive-relative paths into core-tree paths.

A module's archive lays its files out the way a standalone distribution does
(``lib/Foo/Bar.pm``, ``t/basic.t``), while the core tree keeps them wherever
the core build expects them. A :class:`MappingRuleSet` rewrites the longest
matching prefix of an archive path; exclusion rules take precedence and remove
a path from the comparison entirely.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import ExclusionRule, ModuleRecord

TEST_LIB_PREFIX: Final[str] = "t/lib/"
_EXT_DIR_RE: Final = re.compile(r"^(ext/[^/]+/)")


@dataclass(frozen=True, slots=True)
class Excluded:
    """Marker returned by :func:`map_path` for excluded archive paths."""

    rule: ExclusionRule


@dataclass(frozen=True, slots=True)
class MappingRuleSet:
    """Prefix rewrite table with longest-prefix-wins selection."""

    rules: Mapping[str, str]
    _ordered: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # longest first, then lexicographically smallest
        ordered = tuple(sorted(self.rules, key=lambda prefix: (-len(prefix), prefix)))
        object.__setattr__(self, "_ordered", ordered)

    def select_prefix(self, path: str) -> str | None:
        """Return the prefix that applies to ``path``, if any."""

        for prefix in self._ordered:
            if path.startswith(prefix):
                return prefix
        return None

    def rewrite(self, path: str) -> str:
        prefix = self.select_prefix(path)
        if prefix is None:
            return path
        return self.rules[prefix] + path[len(prefix) :]


def map_path(
    excluded: Iterable[ExclusionRule],
    rules: MappingRuleSet,
    archive_path: str,
) -> str | Excluded:
    """Map an archive-relative path to its core-tree path, or signal exclusion."""

    for rule in excluded:
        if rule.matches(archive_path):
            return Excluded(rule)
    return rules.rewrite(archive_path)


def derive_mapping_rules(module_name: str, core_files: Iterable[str]) -> MappingRuleSet:
    """Compute the default rules for a module without registry-supplied ones.

    Modules living entirely in one ``ext/<name>/`` directory map the archive
    root onto that directory. Everything else follows the ``lib/`` layout with
    unprefixed files placed beside the module's own ``.pm`` file.
    """

    ext_dirs: set[str | None] = set()
    for path in core_files:
        if path.startswith(TEST_LIB_PREFIX):
            continue
        match = _EXT_DIR_RE.match(path)
        ext_dirs.add(match.group(1) if match else None)

    if len(ext_dirs) == 1:
        (ext_dir,) = ext_dirs
        if ext_dir is not None:
            return MappingRuleSet({"": ext_dir})

    module_dir = module_name.replace("::", "/")
    return MappingRuleSet({"lib/": "lib/", "": f"lib/{module_dir}/"})


def effective_mapping_rules(record: ModuleRecord, core_files: Iterable[str]) -> MappingRuleSet:
    if record.mapping_rules:
        return MappingRuleSet(dict(record.mapping_rules))
    return derive_mapping_rules(record.name, core_files)
