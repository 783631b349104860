"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
import os
from typing import Final

from .errors import InvalidConfigurationValueError

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# request-level chatter from the HTTP and migration libraries
QUIET_LOGGERS: Final[tuple[str, ...]] = ("httpx", "hishel", "alembic.runtime.migration")


def resolve_log_level(default: int = logging.INFO) -> int:
    """Level named by ``GEOKEEPER_LOG_LEVEL`` (e.g. ``debug``), else ``default``."""

    raw = os.getenv("GEOKEEPER_LOG_LEVEL")
    if raw is None or not raw.strip():
        return default
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        raise InvalidConfigurationValueError("GEOKEEPER_LOG_LEVEL", raw, "a logging level name")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger for CLI output.

    Without an explicit ``level`` the environment decides (see ``resolve_log_level``).
    The HTTP client and migration loggers never go below WARNING unless debugging.
    """

    effective = level if level is not None else resolve_log_level()
    logging.basicConfig(level=effective, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    quiet_level = effective if effective <= logging.DEBUG else max(effective, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
