"""Line-diff command configuration."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Final

from .env import optional_env_var

DEFAULT_DIFF_COMMAND: Final[str] = "diff"
DEFAULT_DIFF_OPTIONS: Final[str] = "-u"


@dataclass(frozen=True, slots=True)
class DiffConfig:
    command: str = DEFAULT_DIFF_COMMAND
    options: tuple[str, ...] = (DEFAULT_DIFF_OPTIONS,)


def get_diff_config(*, options: str | None = None) -> DiffConfig:
    command = optional_env_var("DUALSYNC_DIFF_COMMAND") or DEFAULT_DIFF_COMMAND
    return DiffConfig(
        command=command,
        options=tuple(shlex.split(options if options is not None else DEFAULT_DIFF_OPTIONS)),
    )
