"""Logging setup for the brickbridge command line and batch jobs."""

from __future__ import annotations

import logging

NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "hishel", "alembic.runtime.migration")


def configure_logging(
    *,
    level: int = logging.INFO,
    force: bool = False,
    quiet: tuple[str, ...] = NOISY_LOGGERS,
) -> None:
    """Initialise the root logger with a terse CLI format.

    Transport-level loggers listed in ``quiet`` are capped at WARNING so request
    chatter does not drown the per-tier matching summaries. Pass ``force=True`` to
    reconfigure during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in quiet:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
