"""Shared logging helpers for accoreg."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def log_level_from_env(default: int = logging.INFO) -> int:
    """Return the level named by ``ACCOREG_LOG_LEVEL`` or ``default``."""

    raw = os.getenv("ACCOREG_LOG_LEVEL")
    if not raw:
        return default
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    return default if level is None else level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger with a terse CLI format.

    ``level`` defaults to ``ACCOREG_LOG_LEVEL`` (INFO when unset). Pass
    ``force=True`` to reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=log_level_from_env() if level is None else level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
