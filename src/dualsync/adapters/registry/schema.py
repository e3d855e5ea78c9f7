"""Schema of the TOML module registry file."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class RegistryBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Registry %s: unknown keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class PatternEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pattern: str


class ModuleEntry(RegistryBaseModel):
    dual_life: bool = False
    distribution: str | None = None
    files: list[str] = Field(default_factory=list)
    excluded: list[str | PatternEntry] = Field(default_factory=list)
    mapping: dict[str, str] | None = Field(default=None, alias="map")


class RegistryDocument(RegistryBaseModel):
    modules: dict[str, ModuleEntry] = Field(default_factory=dict)
