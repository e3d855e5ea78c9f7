"""Logging setup for the dualsync CLI."""

from __future__ import annotations

import logging
import sys
from typing import Final

from .env import optional_env_var

LOG_LEVEL_ENV: Final[str] = "DUALSYNC_LOG_LEVEL"


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Send log records to stderr so stdout carries only the report.

    Without an explicit ``level`` the level name is read from
    ``DUALSYNC_LOG_LEVEL`` (default INFO). Pass ``force=True`` to reconfigure
    during tests.
    """

    unknown_name: str | None = None
    if level is None:
        known = logging.getLevelNamesMapping()
        name = (optional_env_var(LOG_LEVEL_ENV) or "INFO").strip().upper()
        level = known.get(name, logging.INFO)
        if name not in known:
            unknown_name = name

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
    if unknown_name is not None:
        logging.getLogger(__name__).warning(
            "Unknown log level %r in %s, using INFO", unknown_name, LOG_LEVEL_ENV
        )
