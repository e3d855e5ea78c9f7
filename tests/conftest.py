from __future__ import annotations

import io
from typing import TYPE_CHECKING

import pytest

from dualsync.domain.report import ReportWriter
from tests.support.registry import InMemoryModuleRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "DUALSYNC_REGISTRY",
        "DUALSYNC_CORE_ROOT",
        "DUALSYNC_CACHE_DIR",
        "DUALSYNC_MIRROR_URL",
        "DUALSYNC_FETCH_COMMAND",
        "DUALSYNC_DIFF_COMMAND",
        "DUALSYNC_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def registry() -> InMemoryModuleRegistry:
    return InMemoryModuleRegistry()


@pytest.fixture
def report_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def report(report_stream: io.StringIO) -> ReportWriter:
    return ReportWriter(report_stream)
