"""Logging setup for the songgraph command line."""

from __future__ import annotations

import logging

_NOISY_LOGGERS = ("aiosqlite", "sqlalchemy.engine")


def configure_logging(
    *, level: int = logging.INFO, force: bool = False, log_sql: bool = False
) -> None:
    """Configure the root logger for CLI output.

    Driver and engine loggers stay at WARNING unless ``log_sql`` is set, so that a
    ``DEBUG`` run shows resolver decisions rather than every statement. Pass
    ``force=True`` to replace handlers installed earlier (tests, re-entry).
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if log_sql else max(level, logging.WARNING))
