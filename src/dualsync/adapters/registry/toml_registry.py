"""Module registry loaded from a TOML file.

Each ``[modules."Name"]`` table names the module's distribution, its
core-tree ``files`` (files or directories, relative to the core root),
exclusions and optional prefix ``map``. Directory entries are expanded
against the core tree's MANIFEST, or by walking the tree when it has none.
"""

from __future__ import annotations

import re
import tomllib
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from dualsync.domain.errors import RegistryIntegrityError, UnknownModuleError
from dualsync.domain.manifest import MANIFEST_FILENAME, read_manifest
from dualsync.domain.model import LiteralExclusion, ModuleRecord, PatternExclusion

from .schema import ModuleEntry, PatternEntry, RegistryDocument

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from dualsync.domain.model import ExclusionRule

log = getLogger(__name__)


def translate_module(name: str, entry: ModuleEntry) -> ModuleRecord:
    excluded: list[ExclusionRule] = []
    for item in entry.excluded:
        if isinstance(item, PatternEntry):
            try:
                excluded.append(PatternExclusion.compile(item.pattern))
            except re.error as exc:
                raise RegistryIntegrityError(
                    f"{name}: invalid exclusion pattern {item.pattern!r}: {exc}"
                ) from exc
        else:
            excluded.append(LiteralExclusion(item))
    return ModuleRecord(
        name=name,
        dual_life=entry.dual_life,
        distribution_id=entry.distribution,
        excluded=tuple(excluded),
        mapping_rules=dict(entry.mapping) if entry.mapping else None,
    )


class TomlModuleRegistry:
    def __init__(self, document: RegistryDocument, *, core_root: Path) -> None:
        self._entries = document.modules
        self._records = {
            name: translate_module(name, entry) for name, entry in self._entries.items()
        }
        self._core_root = core_root
        self._core_manifest: list[str] | None = None
        self._core_files: dict[str, tuple[str, ...]] = {}

    @classmethod
    def from_path(cls, path: Path, *, core_root: Path) -> TomlModuleRegistry:
        try:
            with path.open("rb") as handle:
                payload = tomllib.load(handle)
        except FileNotFoundError as exc:
            raise RegistryIntegrityError(f"Registry file not found: {path}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise RegistryIntegrityError(f"Registry file {path} is not valid TOML: {exc}") from exc
        try:
            document = RegistryDocument.model_validate(payload)
        except ValidationError as exc:
            raise RegistryIntegrityError(f"Registry file {path} is invalid: {exc}") from exc
        log.debug("Loaded %s modules from %s", len(document.modules), path)
        return cls(document, core_root=core_root)

    def get(self, module: str) -> ModuleRecord:
        try:
            return self._records[module]
        except KeyError:
            raise UnknownModuleError(module) from None

    def core_files(self, module: str) -> tuple[str, ...]:
        if module not in self._entries:
            raise UnknownModuleError(module)
        cached = self._core_files.get(module)
        if cached is None:
            cached = self._expand(self._entries[module].files)
            self._core_files[module] = cached
        return cached

    def dual_life_modules(self) -> list[str]:
        return [name for name, record in self._records.items() if record.dual_life]

    def _expand(self, entries: Sequence[str]) -> tuple[str, ...]:
        manifest = self._manifest()
        files: dict[str, None] = {}
        for entry in entries:
            prefix = entry.rstrip("/")
            if manifest is not None:
                for path in manifest:
                    if path == prefix or path.startswith(f"{prefix}/"):
                        files.setdefault(path, None)
                continue
            target = self._core_root / prefix
            if target.is_dir():
                for path in sorted(p for p in target.rglob("*") if p.is_file()):
                    files.setdefault(path.relative_to(self._core_root).as_posix(), None)
            else:
                files.setdefault(prefix, None)
        return tuple(files)

    def _manifest(self) -> list[str] | None:
        if self._core_manifest is None and (self._core_root / MANIFEST_FILENAME).is_file():
            self._core_manifest = read_manifest(self._core_root)
        return self._core_manifest
