"""TOML-backed module registry adapter."""

from __future__ import annotations

from .toml_registry import TomlModuleRegistry, translate_module

__all__ = ["TomlModuleRegistry", "translate_module"]
